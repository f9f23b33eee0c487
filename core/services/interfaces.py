"""Core service interfaces and shared data structures.

This module defines the seams between the indexing core and the
infrastructure layer (image decoding, config files, descriptor storage), plus
the report that an indexing run returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
import threading

from core.models import FolderDescriptor, FolderOverrides, PreviousDescriptor


@dataclass(frozen=True)
class IdentifyResult:
    """Raw output of identifying an image.

    Attributes:
        width: Stored pixel width (before orientation correction), if known.
        height: Stored pixel height (before orientation correction), if known.
        orientation: EXIF orientation code (1-8), if present.
        make: Camera make, if present.
        model: Camera model, if present.
        taken_at: EXIF capture time, if present and parseable.
    """

    width: int | None
    height: int | None
    orientation: int | None = None
    make: str | None = None
    model: str | None = None
    taken_at: datetime | None = None


@dataclass
class IndexReport:
    """Outcome of an indexing run.

    Attributes:
        warnings: Recoverable problems, in the order they were recorded.
        error: Message of the error that aborted the run, if any.
        folders_written: Number of descriptors written.
        images_identified: Images whose metadata was freshly computed.
        images_reused: Images taken over from a previous descriptor.
        thumbnails_requested: Resize tasks submitted.
        thumbnails_failed: Resize tasks that failed.
    """

    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    folders_written: int = 0
    images_identified: int = 0
    images_reused: int = 0
    thumbnails_requested: int = 0
    thumbnails_failed: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_warning(self, message: str) -> None:
        """Record a warning; safe to call from worker threads."""
        with self._lock:
            self.warnings.append(message)

    def count(self, counter: str, amount: int = 1) -> None:
        """Increment one of the integer counters; safe to call from worker threads."""
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    @property
    def ok(self) -> bool:
        """True when the run was not aborted."""
        return self.error is None


class IImageService:
    """Interface for image identification and thumbnail rendering."""

    def identify(self, path: Path) -> IdentifyResult:
        """Return dimensions and EXIF attributes; raise `ImageMetadataError`."""
        raise NotImplementedError

    def resize(self, src: Path, dst: Path, size: int) -> None:
        """Render `src` into `dst` bounded by `size`; raise `ThumbnailError`."""
        raise NotImplementedError


class IFolderConfigProvider:
    """Interface for per-folder override files."""

    def load(self, config_path: Path) -> FolderOverrides:
        """Parse `config_path`; raise `ConfigParseError` when malformed."""
        raise NotImplementedError


class IDescriptorWriter:
    """Interface for descriptor persistence."""

    def write(self, folder: Path, descriptor: FolderDescriptor) -> Path:
        """Persist `descriptor` inside `folder`; raise `WriteError` on failure."""
        raise NotImplementedError

    def load_previous(self, descriptor_path: Path) -> PreviousDescriptor:
        """Read a previous run's descriptor; raise `PreviousDescriptorParseError`."""
        raise NotImplementedError
