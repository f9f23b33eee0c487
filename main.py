from __future__ import annotations

from loguru import logger

from app.cli import EXIT_USAGE, build_options, log_report, parse_args
from core.errors import PathNotFound
from core.services.indexer import Indexer
from infrastructure.descriptor_repository import JsonDescriptorRepository
from infrastructure.folder_config import IniFolderConfigProvider
from infrastructure.image_service import ImageService
from infrastructure.logging import find_latest_log_file, init_logging
from infrastructure.settings import JsonSettings


def main(cli_args: list[str] | None = None) -> int:
    args = parse_args(cli_args)
    try:
        settings = JsonSettings(args.settings)
    except (OSError, ValueError) as ex:
        init_logging(args.log_dir, args.verbose)
        logger.error("Cannot load settings: {}", ex)
        return EXIT_USAGE

    log_dir = args.log_dir or settings.get("logging.dir")
    init_logging(log_dir, args.verbose)

    try:
        options = build_options(args, settings)
    except ValueError as ex:
        logger.error("{}", ex)
        return EXIT_USAGE

    writer = JsonDescriptorRepository(
        options.descriptor_filename,
        export_size=options.export_size,
        export_filename=options.export_filename,
        thumb_dir_name=options.thumb_dir_name,
    )
    indexer = Indexer(ImageService(), IniFolderConfigProvider(), writer, options)

    try:
        report = indexer.run(args.root)
    except PathNotFound as ex:
        logger.error("{}", ex)
        return EXIT_USAGE

    exit_code = log_report(report)
    if log_dir:
        logger.complete()
        logger.info("Log file: {}", find_latest_log_file(log_dir))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
