"""Command line parsing and run report output."""

from __future__ import annotations

import argparse

from loguru import logger

from core.models import ImageOrdering, IndexOptions
from core.services.interfaces import IndexReport
from core.services.task_queue import DEFAULT_CONCURRENCY
from infrastructure.settings import JsonSettings

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as ex:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from ex
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the indexer."""
    parser = argparse.ArgumentParser(
        prog="photo-indexer",
        description=(
            "Write a metadata descriptor into every folder of a photo tree "
            "and render thumbnails for each image."
        ),
    )
    parser.add_argument("root", help="Root folder of the photo tree.")
    parser.add_argument(
        "-s",
        "--size",
        dest="sizes",
        action="append",
        type=_positive_int,
        help="Thumbnail size in pixels (longest side). Repeat for several sizes.",
    )
    parser.add_argument(
        "-o",
        "--order",
        choices=[o.value for o in ImageOrdering],
        default=None,
        help="Image ordering inside a folder. Default: date-asc.",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        default=False,
        help="Recompute metadata for every image, ignoring previous descriptors.",
    )
    parser.add_argument(
        "-e",
        "--export-size",
        type=_positive_int,
        default=None,
        help="Also write an image list pointing at thumbnails of this size.",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=_positive_int,
        default=None,
        help=f"Maximum number of parallel image tasks. Default: {DEFAULT_CONCURRENCY}.",
    )
    parser.add_argument("--settings", default=None, help="JSON file with run defaults.")
    parser.add_argument("--log-dir", default=None, help="Also write logs to this directory.")
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="Enable debug logging."
    )
    return parser


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(args)


def build_options(args: argparse.Namespace, settings: JsonSettings) -> IndexOptions:
    """Merge CLI arguments over settings defaults; raise `ValueError` when unusable."""
    sizes = args.sizes or settings.get("thumbnails.sizes") or []
    if not sizes:
        raise ValueError("at least one thumbnail size is required (--size)")
    try:
        sizes = [int(s) for s in sizes]
        ordering = ImageOrdering(args.order or settings.get("ordering", "date-asc"))
        concurrency = int(args.concurrency or settings.get("concurrency", DEFAULT_CONCURRENCY))
        export_size = args.export_size or settings.get("export.size")
        export_size = int(export_size) if export_size is not None else None
    except (TypeError, ValueError) as ex:
        raise ValueError(f"invalid settings: {ex}") from ex
    if any(s < 1 for s in sizes) or concurrency < 1:
        raise ValueError("sizes and concurrency must be positive")

    return IndexOptions(
        thumbnail_sizes=sizes,
        ordering=ordering,
        force=bool(args.force),
        export_size=export_size,
        concurrency=concurrency,
        thumb_dir_name=settings.get("thumbnails.dir_name", ".thumbs"),
        descriptor_filename=settings.get("files.descriptor", "meta.json"),
        config_filename=settings.get("files.config", "folder.ini"),
        export_filename=settings.get("files.export", "images.js"),
    )


def log_report(report: IndexReport) -> int:
    """Log the accumulated warnings and outcome; return the process exit code."""
    for warning in report.warnings:
        logger.warning("- {}", warning)
    if report.thumbnails_failed:
        logger.warning(
            "{} of {} thumbnail(s) failed",
            report.thumbnails_failed,
            report.thumbnails_requested,
        )
    if not report.ok:
        logger.error("Indexing failed: {}", report.error)
        return EXIT_FAILED
    logger.info(
        "Done: {} folder(s) written with {} warning(s)",
        report.folders_written,
        len(report.warnings),
    )
    return EXIT_OK
