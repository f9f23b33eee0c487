"""Sorting service for image records and child folder summaries.

Every ordering is total: records without a capture time go last under the
date orderings, and ties fall back to the filename in ascending order.
"""

from __future__ import annotations

from collections.abc import Iterable

from core.models import ImageOrdering, ImageRecord, SubDirSummary


class SortService:
    """Provides sorting utilities for descriptor contents."""

    def sort(self, records: Iterable[ImageRecord], ordering: ImageOrdering) -> list[ImageRecord]:
        """Return `records` sorted by `ordering` without mutating the input.

        Args:
            records: Image records of one folder, in any order.
            ordering: One of the four `ImageOrdering` policies.
        """
        by_name = sorted(records, key=lambda r: r.filename)

        if ordering is ImageOrdering.NAME_ASC:
            return by_name
        if ordering is ImageOrdering.NAME_DESC:
            return by_name[::-1]

        dated = [r for r in by_name if r.capture.taken_at is not None]
        undated = [r for r in by_name if r.capture.taken_at is None]
        # reverse=True keeps the sort stable, so equal times stay in filename order
        dated.sort(
            key=lambda r: r.capture.taken_at,  # type: ignore[arg-type,return-value]
            reverse=ordering is ImageOrdering.DATE_DESC,
        )
        return dated + undated

    def sort_sub_dirs(self, summaries: Iterable[SubDirSummary]) -> list[SubDirSummary]:
        """Return child summaries newest first; folders without a time go last."""
        by_name = sorted(summaries, key=lambda s: s.folder_name)
        dated = [s for s in by_name if s.time is not None]
        undated = [s for s in by_name if s.time is None]
        dated.sort(key=lambda s: s.time, reverse=True)  # type: ignore[arg-type,return-value]
        return dated + undated
