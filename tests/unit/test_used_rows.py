from __future__ import annotations

from calcsheet.tracking.used_rows import UsedRowTracker

ROWS = [
    ["Excavation", "SF (2'-0\"x1'-0\")", 12, "FT"],
    [None, None, None, None],
    ["Misc", "Scaffolding", 1, "LS"],
    ["", "  ", None, ""],
    [None, "Sump pit", 2, "EA"],
]


def test_unused_rows_skip_blank_and_claimed():
    tracker = UsedRowTracker()
    tracker.mark_used(0)
    unused = tracker.get_unused_rows(ROWS)
    assert [u.row_index for u in unused] == [2, 4]
    assert all(u.is_used is False for u in unused)
    assert unused[0].row_data == ROWS[2]


def test_mark_used_ignores_non_integers():
    tracker = UsedRowTracker()
    tracker.mark_used(True)
    tracker.mark_used("3")
    for index in (2, 2, 4):
        tracker.mark_used(index)
    assert tracker.used_indices == frozenset({2, 4})
    assert len(tracker) == 2
    assert tracker.is_used(4)
    assert not tracker.is_used(0)


def test_stats_partition_rows():
    tracker = UsedRowTracker()
    tracker.mark_used(0)
    tracker.mark_used(4)
    assert tracker.stats(ROWS) == {"total": 5, "used": 2, "unused": 1, "blank": 2}


def test_empty_input():
    assert UsedRowTracker().get_unused_rows([]) == []
