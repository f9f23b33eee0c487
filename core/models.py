"""Core domain models for folder trees, image records and descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class ImageOrdering(str, Enum):
    """Total orderings available for the images of a descriptor."""

    DATE_ASC = "date-asc"
    DATE_DESC = "date-desc"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"


@dataclass(frozen=True)
class CaptureAttributes:
    """Camera attributes read from EXIF; every field is optional."""

    make: str | None = None
    model: str | None = None
    taken_at: datetime | None = None


@dataclass(frozen=True)
class ImageRecord:
    """A single processed image.

    `width`/`height` are already corrected for EXIF orientation. `None` means
    the dimensions could not be determined.
    """

    filename: str
    width: int | None
    height: int | None
    capture: CaptureAttributes = field(default_factory=CaptureAttributes)


@dataclass(frozen=True)
class FolderOverrides:
    """Optional values from a folder's config file; `None` means not set."""

    title: str | None = None
    description: str | None = None
    cover: str | None = None


@dataclass
class FolderNode:
    """One visited directory, as produced by the tree builder."""

    path: Path
    name: str
    image_filenames: list[str] = field(default_factory=list)
    children: list[FolderNode] = field(default_factory=list)
    overrides: FolderOverrides | None = None
    # Loaded from the previous run's descriptor when reuse is enabled
    previous_images: dict[str, ImageRecord] | None = None
    previous_time: datetime | None = None


@dataclass(frozen=True)
class PreviousDescriptor:
    """What the indexer reuses from a descriptor written by an earlier run."""

    images: dict[str, ImageRecord]
    time: datetime | None = None


@dataclass(frozen=True)
class SubDirSummary:
    """Lightweight view of a child folder shown in its parent's descriptor."""

    folder_name: str
    title: str
    time: datetime | None
    cover: str | None
    image_count: int


@dataclass
class FolderDescriptor:
    """The persisted summary of one folder."""

    folder_name: str
    title: str
    time: datetime | None
    description: str
    image_count: int
    cover: str | None
    images: list[ImageRecord] = field(default_factory=list)
    sub_dirs: list[SubDirSummary] = field(default_factory=list)

    def summary(self) -> SubDirSummary:
        """Return the summary used in the parent's `sub_dirs` list."""
        return SubDirSummary(
            folder_name=self.folder_name,
            title=self.title,
            time=self.time,
            cover=self.cover,
            image_count=self.image_count,
        )


@dataclass
class IndexOptions:
    """Settings for one indexing run."""

    thumbnail_sizes: list[int]
    ordering: ImageOrdering = ImageOrdering.DATE_ASC
    force: bool = False
    export_size: int | None = None
    concurrency: int = 5
    thumb_dir_name: str = ".thumbs"
    descriptor_filename: str = "meta.json"
    config_filename: str = "folder.ini"
    export_filename: str = "images.js"

    @property
    def reuse_previous(self) -> bool:
        """Incremental reuse is on unless a forced recompute was requested."""
        return not self.force
