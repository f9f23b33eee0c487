"""Run defaults loaded from a JSON settings file.

Only the dotted keys listed in `SETTINGS_SCHEMA` are understood. Each is
type-checked when the file is loaded, so a bad value fails before the walk
starts. Unknown keys are logged and ignored.

Example::

    {
      "thumbnails": {"sizes": [150, 1200], "dir_name": ".thumbs"},
      "ordering": "date-desc",
      "concurrency": 8,
      "export": {"size": 1200},
      "files": {"descriptor": "meta.json", "config": "folder.ini", "export": "images.js"},
      "logging": {"dir": "logs"}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

SETTINGS_SCHEMA: dict[str, type] = {
    "thumbnails.sizes": list,
    "thumbnails.dir_name": str,
    "ordering": str,
    "concurrency": int,
    "export.size": int,
    "files.descriptor": str,
    "files.config": str,
    "files.export": str,
    "logging.dir": str,
}


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


class JsonSettings:
    """Typed, dotted-key view over an optional JSON settings file."""

    def __init__(self, settings_path: str | Path | None = None) -> None:
        self._values: dict[str, Any] = {}
        if settings_path is None:
            return
        path = Path(settings_path)
        if not path.exists():
            raise FileNotFoundError(f"settings file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"settings root must be an object: {path}")

        for key, value in _flatten(data).items():
            expected = SETTINGS_SCHEMA.get(key)
            if expected is None:
                logger.warning("Ignoring unknown setting {} in {}", key, path)
                continue
            # bool is an int subclass but never a valid count
            if not isinstance(value, expected) or isinstance(value, bool):
                raise ValueError(
                    f"setting {key} must be {expected.__name__}, got {type(value).__name__}"
                )
            self._values[key] = value

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for dotted `key`, or `default` when it is not set."""
        if key not in SETTINGS_SCHEMA:
            raise KeyError(f"unknown setting: {key}")
        return self._values.get(key, default)
