"""Image identification and thumbnail rendering with Pillow.

Optional Pillow-HEIF support is registered when available, mirroring how
the decoder is set up elsewhere in the project. All Pillow failures are
converted into `ImageMetadataError` / `ThumbnailError`.
"""

from __future__ import annotations

import os
from pathlib import Path

from PIL import Image, ImageOps
from loguru import logger

from core.errors import ImageMetadataError, ThumbnailError
from core.services.interfaces import IdentifyResult
from infrastructure.utils import parse_exif_datetime

try:  # pragma: no cover - optional dependency
    from pillow_heif import register_heif_opener  # type: ignore

    register_heif_opener()
    PIL_HEIF_AVAILABLE = True
except ImportError:  # pragma: no cover - optional dependency
    PIL_HEIF_AVAILABLE = False

# EXIF tags
TAG_ORIENTATION = 274
TAG_MAKE = 271
TAG_MODEL = 272
TAG_DATETIME = 306
TAG_DATETIME_ORIGINAL = 36867
IFD_EXIF = 0x8769

JPEG_QUALITY = 85

_PIL_ERRORS = (OSError, ValueError, OverflowError, SyntaxError, Image.DecompressionBombError)


def _clean_text(value: object) -> str | None:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None
    text = value.strip().rstrip("\x00").strip()
    return text or None


def _read_orientation(value: object) -> int | None:
    """Return the EXIF orientation code, or None when absent or unusable."""
    if not value:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        logger.debug("Ignoring orientation value {!r}", value)
        return None


class ImageService:
    """Pillow-backed implementation of the image service seam."""

    def __init__(self, jpeg_quality: int = JPEG_QUALITY) -> None:
        self._jpeg_quality = jpeg_quality

    def identify(self, path: Path) -> IdentifyResult:
        """Return stored dimensions plus orientation, camera and capture time."""
        try:
            with Image.open(path) as im:
                width, height = im.size
                exif = im.getexif()
                try:
                    exif_ifd = exif.get_ifd(IFD_EXIF)
                except (KeyError, ValueError, TypeError):
                    exif_ifd = {}
                taken_raw = exif_ifd.get(TAG_DATETIME_ORIGINAL) or exif.get(TAG_DATETIME)
                return IdentifyResult(
                    width=int(width) if width else None,
                    height=int(height) if height else None,
                    orientation=_read_orientation(exif.get(TAG_ORIENTATION)),
                    make=_clean_text(exif.get(TAG_MAKE)),
                    model=_clean_text(exif.get(TAG_MODEL)),
                    taken_at=parse_exif_datetime(_clean_text(taken_raw)),
                )
        except _PIL_ERRORS as ex:
            logger.debug("Identify failed for {}: {}", path, ex)
            raise ImageMetadataError(f"{path}: {ex}") from ex

    def resize(self, src: Path, dst: Path, size: int) -> None:
        """Write a JPEG of `src` bounded by `size` x `size` to `dst`.

        The image is rendered to a temporary name first so a crashed run never
        leaves a truncated file that a later run would treat as done.
        """
        tmp = dst.with_name(f"{dst.name}.part")
        try:
            with Image.open(src) as im:
                try:
                    im = ImageOps.exif_transpose(im)
                except (OSError, ValueError, AttributeError):
                    pass
                resampling = getattr(Image, "Resampling", Image)
                im.thumbnail((size, size), resampling.LANCZOS)
                if im.mode not in ("RGB", "L"):
                    im = im.convert("RGB")
                im.save(tmp, "JPEG", quality=self._jpeg_quality)
            os.replace(tmp, dst)
        except _PIL_ERRORS as ex:
            try:
                tmp.unlink()
            except OSError:
                pass
            raise ThumbnailError(f"{src} -> {dst}: {ex}") from ex
        logger.debug("Resized {} to {} ({}px)", src, dst, size)
