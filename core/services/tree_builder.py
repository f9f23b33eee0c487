"""Recursive filesystem walk producing the unprocessed folder model."""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from core.errors import ConfigParseError, PathNotFound, PreviousDescriptorParseError
from core.models import FolderNode
from core.services.interfaces import IDescriptorWriter, IFolderConfigProvider, IndexReport

HIDDEN_MARKER = "."
IMAGE_EXTENSIONS = (".jpg", ".jpeg")


def is_image_filename(name: str) -> bool:
    """Case-insensitive match on the supported image extensions."""
    return name.lower().endswith(IMAGE_EXTENSIONS)


class TreeBuilder:
    """Walks a directory tree depth-first and classifies its entries.

    Hidden entries and the thumbnail directory are skipped, images are
    collected in enumeration order, and per-folder config files and previous
    descriptors are loaded when present. Problems with those two files are
    recorded as warnings and never stop the walk.
    """

    def __init__(
        self,
        config_provider: IFolderConfigProvider,
        descriptors: IDescriptorWriter,
        *,
        reuse_previous: bool = True,
        config_filename: str = "folder.ini",
        descriptor_filename: str = "meta.json",
        thumb_dir_name: str = ".thumbs",
        report: IndexReport | None = None,
    ) -> None:
        self._config_provider = config_provider
        self._descriptors = descriptors
        self._reuse_previous = reuse_previous
        self._config_filename = config_filename
        self._descriptor_filename = descriptor_filename
        self._thumb_dir_name = thumb_dir_name
        self._report = report if report is not None else IndexReport()

    def build(self, root: str | Path) -> FolderNode:
        """Return the folder tree rooted at `root`; raise `PathNotFound` if it is not a directory."""
        root_path = Path(root)
        if not root_path.is_dir():
            raise PathNotFound(f"Not a directory: {root_path}")
        try:
            entries = self._list(root_path)
        except OSError as ex:
            raise PathNotFound(f"Cannot list {root_path}: {ex}") from ex
        node = self._build_node(root_path, entries)
        logger.info("Scanned {} under {}", _describe(node), root_path)
        return node

    def _list(self, folder: Path) -> list[os.DirEntry]:
        with os.scandir(folder) as it:
            return list(it)

    def _visit(self, folder: Path) -> FolderNode:
        try:
            entries = self._list(folder)
        except OSError as ex:
            self._warn(f"Cannot list {folder}: {ex}")
            return FolderNode(path=folder, name=folder.name)
        return self._build_node(folder, entries)

    def _build_node(self, folder: Path, entries: list[os.DirEntry]) -> FolderNode:
        node = FolderNode(path=folder, name=folder.name)
        subdirs: list[Path] = []
        has_config = has_descriptor = False

        for entry in entries:
            name = entry.name
            if name.startswith(HIDDEN_MARKER) or name == self._thumb_dir_name:
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(Path(entry.path))
                elif not entry.is_file():
                    continue
                elif is_image_filename(name):
                    node.image_filenames.append(name)
                elif name == self._config_filename:
                    has_config = True
                elif name == self._descriptor_filename:
                    has_descriptor = True
            except OSError as ex:
                self._warn(f"Cannot stat {entry.path}: {ex}")

        if has_config:
            self._load_overrides(node)
        if has_descriptor and self._reuse_previous:
            self._load_previous(node)

        for subdir in sorted(subdirs, key=lambda p: p.name):
            node.children.append(self._visit(subdir))
        return node

    def _load_overrides(self, node: FolderNode) -> None:
        config_path = node.path / self._config_filename
        try:
            node.overrides = self._config_provider.load(config_path)
        except ConfigParseError as ex:
            self._warn(f"Ignoring config {config_path}: {ex}")

    def _load_previous(self, node: FolderNode) -> None:
        descriptor_path = node.path / self._descriptor_filename
        try:
            previous = self._descriptors.load_previous(descriptor_path)
        except PreviousDescriptorParseError as ex:
            self._warn(f"Ignoring previous descriptor {descriptor_path}: {ex}")
            return
        node.previous_images = previous.images
        node.previous_time = previous.time

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._report.add_warning(message)


def _describe(node: FolderNode) -> str:
    folders = images = 0
    stack = [node]
    while stack:
        current = stack.pop()
        folders += 1
        images += len(current.image_filenames)
        stack.extend(current.children)
    return f"{folders} folder(s) with {images} image(s)"
