"""Per-image processing: metadata reuse, identification and thumbnails.

Metadata and thumbnails are decided independently. A record found in the
previous descriptor is reused by filename alone, while thumbnails are
requested for every configured size whose target file is missing on disk.
"""

from __future__ import annotations

from concurrent.futures import Future
from pathlib import Path

from loguru import logger

from core.errors import WriteError
from core.models import CaptureAttributes, FolderNode, ImageRecord
from core.services.interfaces import IdentifyResult, IndexReport
from core.services.task_queue import TaskQueue

# EXIF orientation codes for 90/270 degree rotations
ROTATED_ORIENTATIONS = frozenset({6, 8})


def thumbnail_path(folder: Path, thumb_dir_name: str, size: int, filename: str) -> Path:
    """Return the deterministic thumbnail location `<folder>/<dir>/<size>-<filename>`."""
    return folder / thumb_dir_name / f"{size}-{filename}"


def build_record(
    filename: str, result: IdentifyResult, report: IndexReport | None = None
) -> ImageRecord:
    """Turn a raw identify result into an orientation-corrected `ImageRecord`.

    Missing dimensions become the unknown sentinel and, when `report` is
    given, are recorded there as a warning.
    """
    width, height = result.width, result.height
    if width is None or height is None:
        message = f"Missing dimensions for {filename}"
        logger.warning(message)
        if report is not None:
            report.add_warning(message)
        width = height = None
    elif result.orientation in ROTATED_ORIENTATIONS:
        width, height = height, width
    capture = CaptureAttributes(
        make=result.make or None,
        model=result.model or None,
        taken_at=result.taken_at,
    )
    return ImageRecord(filename=filename, width=width, height=height, capture=capture)


class PendingImage:
    """Handle for an image whose record may still be computed by the queue.

    Use `ready` for a record that is already known and `scheduled` for one
    that waits on an identify future.
    """

    def __init__(
        self,
        filename: str,
        record: ImageRecord | None,
        future: Future[IdentifyResult] | None,
        report: IndexReport | None,
        source: Path | None,
    ) -> None:
        if (record is None) == (future is None):
            raise ValueError("PendingImage needs exactly one of record or future")
        self.filename = filename
        self._record = record
        self._future = future
        self._report = report
        self._source = source

    @classmethod
    def ready(cls, record: ImageRecord) -> PendingImage:
        return cls(record.filename, record, None, None, None)

    @classmethod
    def scheduled(
        cls,
        filename: str,
        future: Future[IdentifyResult],
        report: IndexReport,
        source: Path,
    ) -> PendingImage:
        return cls(filename, None, future, report, source)

    def result(self) -> ImageRecord:
        """Block until the record is available.

        Any identify failure is recorded as a warning and yields a record with
        unknown dimensions instead of raising.
        """
        if self._record is not None:
            return self._record
        try:
            identified = self._future.result()
        except Exception as ex:
            message = f"Could not identify {self._source or self.filename}: {ex}"
            logger.warning(message)
            if self._report is not None:
                self._report.add_warning(message)
            self._record = ImageRecord(filename=self.filename, width=None, height=None)
        else:
            self._record = build_record(self.filename, identified, self._report)
        return self._record


class ImageProcessor:
    """Assembles `ImageRecord`s, fanning uncached work into a `TaskQueue`."""

    def __init__(
        self,
        queue: TaskQueue,
        thumbnail_sizes: list[int],
        *,
        thumb_dir_name: str = ".thumbs",
        report: IndexReport | None = None,
    ) -> None:
        self._queue = queue
        self._sizes = list(thumbnail_sizes)
        self._thumb_dir_name = thumb_dir_name
        self._report = report if report is not None else IndexReport()

    def process_image(self, folder: FolderNode, filename: str) -> ImageRecord:
        """Return the record for `filename` in `folder`, waiting for any identify call."""
        return self.submit(folder, filename).result()

    def submit(self, folder: FolderNode, filename: str) -> PendingImage:
        """Schedule all work for one image and return without waiting."""
        self.schedule_thumbnails(folder, filename)

        previous = (folder.previous_images or {}).get(filename)
        if previous is not None:
            logger.debug("Reusing metadata for {}", folder.path / filename)
            self._report.count("images_reused")
            return PendingImage.ready(previous)

        source = folder.path / filename
        self._report.count("images_identified")
        return PendingImage.scheduled(
            filename, self._queue.identify(source), self._report, source
        )

    def schedule_thumbnails(self, folder: FolderNode, filename: str) -> list[int]:
        """Queue a resize for every configured size without a thumbnail; return those sizes."""
        source = folder.path / filename
        queued: list[int] = []
        for size in self._sizes:
            target = thumbnail_path(folder.path, self._thumb_dir_name, size, filename)
            if target.exists():
                continue
            self._ensure_thumb_dir(target.parent)
            future = self._queue.resize(source, target, size)
            future.add_done_callback(lambda f, t=target: self._on_resized(f, t))
            self._report.count("thumbnails_requested")
            queued.append(size)
        return queued

    def _ensure_thumb_dir(self, thumb_dir: Path) -> None:
        try:
            thumb_dir.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            raise WriteError(f"Cannot create thumbnail directory {thumb_dir}: {ex}") from ex

    def _on_resized(self, future: Future, target: Path) -> None:
        ex = future.exception()
        if ex is None:
            logger.debug("Thumbnail written: {}", target)
            return
        message = f"Thumbnail {target} failed: {ex}"
        logger.warning(message)
        self._report.add_warning(message)
        self._report.count("thumbnails_failed")
