"""JSON persistence for folder descriptors.

Descriptors are written atomically (temporary file, then rename). Reading a
descriptor back only recovers what incremental reuse needs: the image records
and the folder time.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from core.errors import PreviousDescriptorParseError, WriteError
from core.models import (
    CaptureAttributes,
    FolderDescriptor,
    ImageRecord,
    PreviousDescriptor,
    SubDirSummary,
)
from infrastructure.utils import format_iso_datetime, parse_iso_datetime

EXPORT_PREFIX = "var images = "
EXPORT_SUFFIX = ";\n"


def image_to_dict(image: ImageRecord) -> dict[str, Any]:
    """Serialize an `ImageRecord` with a fixed key order."""
    return {
        "filename": image.filename,
        "width": image.width,
        "height": image.height,
        "exif": {
            "make": image.capture.make,
            "model": image.capture.model,
            "dateTimeOriginal": format_iso_datetime(image.capture.taken_at),
        },
    }


def image_from_dict(data: dict[str, Any]) -> ImageRecord:
    """Inverse of `image_to_dict`; raise `ValueError` on a malformed entry."""
    if not isinstance(data, dict) or not isinstance(data.get("filename"), str):
        raise ValueError(f"image entry without filename: {data!r}")
    exif = data.get("exif") or {}
    if not isinstance(exif, dict):
        raise ValueError(f"exif of {data['filename']} is not an object")
    width, height = data.get("width"), data.get("height")
    for value in (width, height):
        if value is not None and not isinstance(value, int):
            raise ValueError(f"bad dimension {value!r} for {data['filename']}")
    return ImageRecord(
        filename=data["filename"],
        width=width,
        height=height,
        capture=CaptureAttributes(
            make=exif.get("make"),
            model=exif.get("model"),
            taken_at=parse_iso_datetime(exif.get("dateTimeOriginal")),
        ),
    )


def _sub_dir_to_dict(summary: SubDirSummary) -> dict[str, Any]:
    return {
        "folderName": summary.folder_name,
        "title": summary.title,
        "time": format_iso_datetime(summary.time),
        "cover": summary.cover,
        "imageCount": summary.image_count,
    }


def descriptor_to_dict(descriptor: FolderDescriptor) -> dict[str, Any]:
    """Return the on-disk shape of `descriptor`."""
    return {
        "title": descriptor.title,
        "description": descriptor.description,
        "time": format_iso_datetime(descriptor.time),
        "imageCount": descriptor.image_count,
        "cover": descriptor.cover,
        "images": [image_to_dict(image) for image in descriptor.images],
        "subDirs": [_sub_dir_to_dict(summary) for summary in descriptor.sub_dirs],
    }


def _write_atomic(path: Path, text: str) -> None:
    tmp = path.with_name(f"{path.name}.tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


class JsonDescriptorRepository:
    """Write descriptors (and the optional export) and read previous ones."""

    def __init__(
        self,
        descriptor_filename: str = "meta.json",
        *,
        export_size: int | None = None,
        export_filename: str = "images.js",
        thumb_dir_name: str = ".thumbs",
    ) -> None:
        self._descriptor_filename = descriptor_filename
        self._export_size = export_size
        self._export_filename = export_filename
        self._thumb_dir_name = thumb_dir_name

    def write(self, folder: Path, descriptor: FolderDescriptor) -> Path:
        """Write `descriptor` into `folder` and return the descriptor path."""
        path = Path(folder) / self._descriptor_filename
        text = json.dumps(descriptor_to_dict(descriptor), indent=2, ensure_ascii=False)
        try:
            _write_atomic(path, text + "\n")
            if self._export_size is not None:
                self._write_export(Path(folder), descriptor)
        except OSError as ex:
            raise WriteError(f"Cannot write descriptor in {folder}: {ex}") from ex
        return path

    def export_text(self, descriptor: FolderDescriptor) -> str:
        """Return the export artifact for `descriptor` at the configured size."""
        if self._export_size is None:
            raise ValueError("no export size configured")
        entries = []
        for image in descriptor.images:
            entry = image_to_dict(image)
            entry["filename"] = f"{self._thumb_dir_name}/{self._export_size}-{image.filename}"
            entries.append(entry)
        return EXPORT_PREFIX + json.dumps(entries, ensure_ascii=False) + EXPORT_SUFFIX

    def _write_export(self, folder: Path, descriptor: FolderDescriptor) -> Path:
        path = folder / self._export_filename
        _write_atomic(path, self.export_text(descriptor))
        logger.debug("Wrote export {}", path)
        return path

    def load_previous(self, descriptor_path: Path) -> PreviousDescriptor:
        """Parse a previous descriptor into reusable image records."""
        try:
            with Path(descriptor_path).open("r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("descriptor root is not an object")
            raw_images = data.get("images") or []
            if not isinstance(raw_images, list):
                raise ValueError("images is not a list")
            images = {}
            for raw in raw_images:
                record = image_from_dict(raw)
                images[record.filename] = record
        except (OSError, ValueError, TypeError) as ex:
            raise PreviousDescriptorParseError(f"{descriptor_path}: {ex}") from ex
        return PreviousDescriptor(images=images, time=parse_iso_datetime(data.get("time")))
