from __future__ import annotations

from datetime import datetime
from pathlib import Path
import threading

import pytest

from core.errors import ImageMetadataError, ThumbnailError
from core.services.interfaces import IdentifyResult


class FakeImageService:
    """Image service double that records calls and writes placeholder thumbnails."""

    def __init__(self) -> None:
        self.results: dict[str, IdentifyResult] = {}
        self.broken: set[str] = set()
        self.crashing: set[str] = set()
        self.identified: list[Path] = []
        self.resized: list[tuple[Path, Path, int]] = []
        self._lock = threading.Lock()

    def identify(self, path: Path) -> IdentifyResult:
        with self._lock:
            self.identified.append(Path(path))
        if Path(path).name in self.broken:
            raise ImageMetadataError(f"cannot identify {path}")
        if Path(path).name in self.crashing:
            raise RuntimeError(f"decoder crashed on {path}")
        return self.results.get(Path(path).name, IdentifyResult(width=640, height=480))

    def resize(self, src: Path, dst: Path, size: int) -> None:
        with self._lock:
            self.resized.append((Path(src), Path(dst), size))
        if Path(src).name in self.broken:
            raise ThumbnailError(f"cannot resize {src}")
        Path(dst).write_bytes(b"thumb")


@pytest.fixture
def image_service() -> FakeImageService:
    return FakeImageService()


def make_tree(root: Path, layout: dict) -> Path:
    """Create files and folders from a nested dict; str values are file contents."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in layout.items():
        target = root / name
        if isinstance(content, dict):
            make_tree(target, content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


def taken(day: int, hour: int = 12) -> datetime:
    return datetime(2015, 8, day, hour, 0, 0)
