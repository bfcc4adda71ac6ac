from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .geometry import ParsedGeometry
from .item_type import ItemType, RowKind

"""CalculationRow model.

Rows are built by the section processors with a per-pass `row_id`; the
assembler later assigns the 1-based sheet `position`. Cross-row links (subtotal
ranges, "row N above" references) are held as row ids until then.
"""

__all__ = [
    "CalculationRow",
]


@dataclass(frozen=True)
class CalculationRow:
    kind: RowKind
    section: str
    row_id: int
    subsection: str | None = None
    particulars: str = ""
    takeoff: float | None = None
    unit: str = ""
    geometry: ParsedGeometry = field(default_factory=ParsedGeometry)
    item_type: ItemType | None = None
    raw_index: int | None = None  # source row for DATA rows taken from the input
    first_id: int | None = None  # SUM rows: first data row of the range
    last_id: int | None = None  # SUM rows: last data row of the range
    ref_id: int | None = None  # referenced row (subtotal, pier for line drill, ...)
    labels: dict[str, str] | None = None  # header rows: fixed column captions
    position: int | None = None

    @property
    def is_data(self) -> bool:
        return self.kind is RowKind.DATA

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "position": self.position,
            "kind": self.kind.value,
            "section": self.section,
            "subsection": self.subsection,
            "particulars": self.particulars,
        }
        if self.kind is RowKind.DATA:
            out["takeoff"] = self.takeoff
            out["unit"] = self.unit
            out["geometry"] = self.geometry.to_dict()
            out["itemType"] = self.item_type.value if self.item_type else None
            out["rawRowIndex"] = self.raw_index
        elif self.kind is RowKind.SUM:
            out["itemType"] = self.item_type.value if self.item_type else None
        if self.labels:
            out["labels"] = dict(self.labels)
        return out
