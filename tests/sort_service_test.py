from __future__ import annotations

import pytest

from conftest import taken
from core.models import CaptureAttributes, ImageOrdering, ImageRecord, SubDirSummary
from core.services.sort_service import SortService


def _record(filename: str, day: int | None = None) -> ImageRecord:
    capture = CaptureAttributes(taken_at=taken(day) if day else None)
    return ImageRecord(filename=filename, width=1, height=1, capture=capture)


RECORDS = [
    _record("c.jpg", 3),
    _record("undated_b.jpg"),
    _record("a.jpg", 5),
    _record("b.jpg", 3),
    _record("undated_a.jpg"),
]


@pytest.mark.parametrize(
    "ordering, expected",
    [
        (
            ImageOrdering.DATE_ASC,
            ["b.jpg", "c.jpg", "a.jpg", "undated_a.jpg", "undated_b.jpg"],
        ),
        (
            ImageOrdering.DATE_DESC,
            ["a.jpg", "b.jpg", "c.jpg", "undated_a.jpg", "undated_b.jpg"],
        ),
        (
            ImageOrdering.NAME_ASC,
            ["a.jpg", "b.jpg", "c.jpg", "undated_a.jpg", "undated_b.jpg"],
        ),
        (
            ImageOrdering.NAME_DESC,
            ["undated_b.jpg", "undated_a.jpg", "c.jpg", "b.jpg", "a.jpg"],
        ),
    ],
)
def test_sort_orderings(ordering: ImageOrdering, expected: list[str]) -> None:
    result = SortService().sort(RECORDS, ordering)

    assert [r.filename for r in result] == expected


@pytest.mark.parametrize("ordering", list(ImageOrdering))
def test_sort_is_idempotent_and_input_order_independent(ordering: ImageOrdering) -> None:
    sorter = SortService()
    once = sorter.sort(RECORDS, ordering)

    assert sorter.sort(once, ordering) == once
    assert sorter.sort(list(reversed(RECORDS)), ordering) == once


def test_sort_does_not_mutate_input() -> None:
    records = list(RECORDS)
    SortService().sort(records, ImageOrdering.DATE_DESC)

    assert records == RECORDS


def test_descending_by_time_example() -> None:
    first, second = _record("x.jpg", 1), _record("y.jpg", 2)

    result = SortService().sort([first, second], ImageOrdering.DATE_DESC)

    assert result == [second, first]


def test_sort_sub_dirs_newest_first() -> None:
    summaries = [
        SubDirSummary("old", "old", taken(1), None, 1),
        SubDirSummary("none", "none", None, None, 0),
        SubDirSummary("new", "new", taken(9), None, 2),
        SubDirSummary("also_new", "also new", taken(9), None, 2),
    ]

    result = SortService().sort_sub_dirs(summaries)

    assert [s.folder_name for s in result] == ["also_new", "new", "old", "none"]
