from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

"""UnusedRowRecord model.

An input row that no classifier claimed. `is_used` starts False and is only ever
flipped by a human reviewer; the engine carries a reviewer's True forward when
it re-derives the sheet.
"""

__all__ = [
    "UnusedRowRecord",
]


def _json_cell(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class UnusedRowRecord:
    row_index: int
    row_data: list[Any]
    is_used: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowIndex": self.row_index,
            "rowData": [_json_cell(v) for v in self.row_data],
            "isUsed": self.is_used,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> UnusedRowRecord:
        return UnusedRowRecord(
            row_index=int(data["rowIndex"]),
            row_data=list(data.get("rowData") or []),
            is_used=data.get("isUsed") is True,
        )
