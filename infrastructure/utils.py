"""Utilities for date parsing (EXIF and descriptor) and formatting.

This module centralizes date parsing/formatting so the rest of the app can
depend on a single behavior. Parsing is best-effort and does not raise;
callers should expect `None` when a value is missing or invalid.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger

EXIF_DT_FMT = "%Y:%m:%d %H:%M:%S"


def parse_exif_datetime(value: str | None) -> datetime | None:
    """Parse an EXIF timestamp such as `2015:08:27 10:00:00`; None on failure."""
    if not value:
        return None
    val_str = str(value).strip().rstrip("\x00")
    try:
        # Common EXIF format: "YYYY:MM:DD HH:MM:SS"
        if len(val_str) >= 19 and val_str[4] == ":" and val_str[7] == ":":
            return datetime.strptime(val_str[:19], EXIF_DT_FMT)
        return datetime.fromisoformat(val_str.replace("/", "-"))
    except (ValueError, TypeError) as ex:
        logger.debug("Unparseable EXIF datetime {!r}: {}", value, ex)
        return None


def format_iso_datetime(dt: datetime | None) -> str | None:
    """Format datetime for descriptors; None stays None."""
    return dt.isoformat() if dt else None


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse a descriptor timestamp written by `format_iso_datetime`."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        logger.warning("Invalid datetime: {}", value)
        return None
