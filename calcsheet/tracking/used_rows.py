from __future__ import annotations

from typing import Any

from calcsheet.models.raw_input import is_blank_row
from calcsheet.models.unused_row import UnusedRowRecord

"""Used-row tracker.

One tracker is created per calculation pass and handed to every section
processor through the pipeline context. After all sections ran, the tracker
yields the complement: non-blank rows nobody claimed. Blank rows are in neither
set.
"""

__all__ = [
    "UsedRowTracker",
]


class UsedRowTracker:
    """Set of input row indices claimed during one pass.

    Indices are zero-based positions in RawInput.rows (header excluded). The
    tracker is never reset; build a new one for the next pass.
    """

    def __init__(self) -> None:
        self._used: set[int] = set()

    def mark_used(self, row_index: int) -> None:
        if isinstance(row_index, bool) or not isinstance(row_index, int):
            return
        self._used.add(row_index)

    def is_used(self, row_index: int) -> bool:
        return row_index in self._used

    @property
    def used_indices(self) -> frozenset[int]:
        return frozenset(self._used)

    def __len__(self) -> int:
        return len(self._used)

    def get_unused_rows(self, raw_rows: list[list[Any]]) -> list[UnusedRowRecord]:
        """Records for every non-blank, unclaimed row, in input order.

        `is_used` is always False here; reviewer flags are merged afterwards.
        """
        return [
            UnusedRowRecord(row_index=idx, row_data=list(row), is_used=False)
            for idx, row in enumerate(raw_rows or [])
            if idx not in self._used and not is_blank_row(row)
        ]

    def stats(self, raw_rows: list[list[Any]]) -> dict[str, int]:
        blank = sum(1 for row in raw_rows if is_blank_row(row))
        used = sum(1 for idx, row in enumerate(raw_rows) if idx in self._used and not is_blank_row(row))
        total = len(raw_rows)
        return {
            "total": total,
            "used": used,
            "unused": total - blank - used,
            "blank": blank,
        }
