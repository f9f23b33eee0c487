"""Per-folder override files.

The format is one `key=value` per line with no spaces around `=`. A value
ending in a backslash continues on the next line. Blank lines and lines
starting with `#` are ignored. Recognised keys: title, description, cover.
"""

from __future__ import annotations

from pathlib import Path
import re

from loguru import logger

from core.errors import ConfigParseError
from core.models import FolderOverrides

OVERRIDE_KEYS = ("title", "description", "cover")
_LINE_RE = re.compile(r"^(?P<key>[A-Za-z][\w.-]*)=(?P<value>.*)$")


def parse_overrides(text: str, source: str = "<string>") -> FolderOverrides:
    """Parse override `text`; raise `ConfigParseError` on a malformed line."""
    values: dict[str, str] = {}
    key: str | None = None
    parts: list[str] = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        if key is not None:
            line = raw
        else:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            match = _LINE_RE.match(line)
            if not match:
                raise ConfigParseError(f"{source}:{lineno}: expected key=value, got {raw!r}")
            key = match.group("key")
            line = match.group("value")

        if line.endswith("\\"):
            parts.append(line[:-1])
            continue
        parts.append(line)
        values[key] = "\n".join(parts)
        key, parts = None, []

    if key is not None:
        # Continuation on the last line
        values[key] = "\n".join(parts)

    unknown = sorted(set(values) - set(OVERRIDE_KEYS))
    if unknown:
        logger.debug("{}: ignoring unknown keys {}", source, ", ".join(unknown))
    return FolderOverrides(**{k: values[k] for k in OVERRIDE_KEYS if k in values})


class IniFolderConfigProvider:
    """Loads `FolderOverrides` from a folder's config file."""

    def load(self, config_path: Path) -> FolderOverrides:
        """Read and parse `config_path`."""
        try:
            text = Path(config_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as ex:
            raise ConfigParseError(f"Cannot read {config_path}: {ex}") from ex
        overrides = parse_overrides(text, source=str(config_path))
        logger.debug("Loaded overrides from {}: {}", config_path, overrides)
        return overrides
