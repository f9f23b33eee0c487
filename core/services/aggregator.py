"""Bottom-up merge of folder trees into descriptors.

Each folder waits for its children and for its own images before its
descriptor is computed and written, so a parent always sees finalized
child results.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger

from core.models import FolderDescriptor, FolderNode, ImageOrdering, ImageRecord
from core.services.image_processor import ImageProcessor
from core.services.interfaces import IDescriptorWriter, IndexReport
from core.services.naming import derive_title_and_date
from core.services.sort_service import SortService


def _earliest(times: list[datetime | None]) -> datetime | None:
    known = [t for t in times if t is not None]
    return min(known) if known else None


class FolderAggregator:
    """Computes and writes a `FolderDescriptor` for every node of a tree."""

    def __init__(
        self,
        processor: ImageProcessor,
        writer: IDescriptorWriter,
        *,
        ordering: ImageOrdering = ImageOrdering.DATE_ASC,
        sorter: SortService | None = None,
        report: IndexReport | None = None,
    ) -> None:
        self._processor = processor
        self._writer = writer
        self._ordering = ordering
        self._sorter = sorter or SortService()
        self._report = report if report is not None else IndexReport()

    def aggregate(self, node: FolderNode) -> FolderDescriptor:
        """Aggregate `node` after all of its children; write and return its descriptor.

        A `WriteError` from the writer propagates and stops the traversal.
        """
        children = [self.aggregate(child) for child in node.children]

        pending = [self._processor.submit(node, name) for name in node.image_filenames]
        images = self._sorter.sort([p.result() for p in pending], self._ordering)

        descriptor = self.describe(node, images, children)
        path = self._writer.write(node.path, descriptor)
        self._report.count("folders_written")
        logger.debug("Wrote {} ({} images total)", path, descriptor.image_count)
        return descriptor

    def describe(
        self,
        node: FolderNode,
        images: list[ImageRecord],
        children: list[FolderDescriptor],
    ) -> FolderDescriptor:
        """Derive the descriptor of `node` from its sorted images and finalized children."""
        derived_title, derived_date = derive_title_and_date(node.name)
        time = (
            derived_date
            or _earliest([image.capture.taken_at for image in images])
            or _earliest([child.time for child in children])
            or node.previous_time
        )
        overrides = node.overrides
        title = overrides.title if overrides and overrides.title is not None else derived_title
        description = (
            overrides.description if overrides and overrides.description is not None else ""
        )
        if overrides and overrides.cover is not None:
            cover: str | None = overrides.cover
        else:
            # Cover falls back to listing order, not display order
            cover = node.image_filenames[0] if node.image_filenames else None

        return FolderDescriptor(
            folder_name=node.name,
            title=title,
            time=time,
            description=description,
            image_count=len(images) + sum(child.image_count for child in children),
            cover=cover,
            images=images,
            sub_dirs=self._sorter.sort_sub_dirs(child.summary() for child in children),
        )
