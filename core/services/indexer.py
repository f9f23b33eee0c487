"""One indexing run: walk, aggregate, then wait for thumbnail work."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from core.errors import WriteError
from core.models import IndexOptions
from core.services.aggregator import FolderAggregator
from core.services.image_processor import ImageProcessor
from core.services.interfaces import (
    IDescriptorWriter,
    IFolderConfigProvider,
    IImageService,
    IndexReport,
)
from core.services.task_queue import TaskQueue
from core.services.tree_builder import TreeBuilder


class Indexer:
    """Wires tree building, image processing and aggregation for a single run."""

    def __init__(
        self,
        image_service: IImageService,
        config_provider: IFolderConfigProvider,
        writer: IDescriptorWriter,
        options: IndexOptions,
    ) -> None:
        self._image_service = image_service
        self._config_provider = config_provider
        self._writer = writer
        self._options = options

    def run(self, root: str | Path) -> IndexReport:
        """Index the tree at `root` and return the run report.

        `PathNotFound` is raised before any work is queued. A `WriteError`
        stops the traversal but queued thumbnails are still awaited; the
        error is returned in the report.
        """
        opts = self._options
        report = IndexReport()
        builder = TreeBuilder(
            self._config_provider,
            self._writer,
            reuse_previous=opts.reuse_previous,
            config_filename=opts.config_filename,
            descriptor_filename=opts.descriptor_filename,
            thumb_dir_name=opts.thumb_dir_name,
            report=report,
        )
        tree = builder.build(root)

        with TaskQueue(self._image_service, opts.concurrency) as queue:
            processor = ImageProcessor(
                queue,
                opts.thumbnail_sizes,
                thumb_dir_name=opts.thumb_dir_name,
                report=report,
            )
            aggregator = FolderAggregator(
                processor, self._writer, ordering=opts.ordering, report=report
            )
            try:
                aggregator.aggregate(tree)
            except WriteError as ex:
                logger.error("Run aborted: {}", ex)
                report.error = str(ex)
            queue.join()

        logger.info(
            "Indexed {} folder(s): {} identified, {} reused, {} thumbnail(s) requested",
            report.folders_written,
            report.images_identified,
            report.images_reused,
            report.thumbnails_requested,
        )
        return report
