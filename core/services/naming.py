"""Title and date derivation from folder names.

Folder names such as `2015-08-27_Trip_to_lake` carry both a date and a title.
Patterns are tried from the most to the least specific one.
"""

from __future__ import annotations

from datetime import datetime
import re

_DATE_PATTERNS = (
    re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})_(?P<rest>.+)$"),
    re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})_(?P<rest>.+)$"),
    re.compile(r"^(?P<year>\d{4})_(?P<rest>.+)$"),
)


def _to_title(text: str) -> str:
    return text.replace("_", " ")


def derive_title_and_date(folder_name: str) -> tuple[str, datetime | None]:
    """Return `(title, date)` for `folder_name`.

    Missing month/day default to 1. A pattern whose numbers do not form a
    valid date is treated as not matching, so the whole name becomes the title.
    """
    for pattern in _DATE_PATTERNS:
        match = pattern.match(folder_name)
        if not match:
            continue
        parts = match.groupdict()
        try:
            date = datetime(
                int(parts["year"]),
                int(parts.get("month") or 1),
                int(parts.get("day") or 1),
            )
        except ValueError:
            break
        return _to_title(parts["rest"]), date
    return _to_title(folder_name), None
