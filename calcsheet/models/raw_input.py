from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

"""Raw take-off input models.

RawInput is the header row plus the data rows exactly as read from the upload.
HeaderIndex resolves the semantic columns once per run; InputRow is a read-only
view over one data row used by the classifiers.
"""

__all__ = [
    "RawInput",
    "HeaderIndex",
    "InputRow",
    "iter_input_rows",
    "is_blank_cell",
    "is_blank_row",
]

DIGITIZER_ITEM = "digitizer item"
TOTAL = "total"
UNITS = "units"
ESTIMATE = "estimate"
QTY = "qty"


def is_blank_cell(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def is_blank_row(cells: list[Any]) -> bool:
    return all(is_blank_cell(c) for c in cells)


@dataclass(frozen=True)
class RawInput:
    headers: list[Any]
    rows: list[list[Any]]  # zero-based index == row identity for one pass

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class HeaderIndex:
    """Positional index of each recognized column, None when absent."""
    digitizer_item: int | None
    total: int | None
    units: int | None
    estimate: int | None
    qty: int | None

    @classmethod
    def resolve(cls, headers: list[Any]) -> HeaderIndex:
        # case-insensitive, trimmed; first occurrence wins
        positions: dict[str, int] = {}
        for i, h in enumerate(headers):
            if is_blank_cell(h):
                continue
            key = str(h).strip().lower()
            positions.setdefault(key, i)
        return cls(
            digitizer_item=positions.get(DIGITIZER_ITEM),
            total=positions.get(TOTAL),
            units=positions.get(UNITS),
            estimate=positions.get(ESTIMATE),
            qty=positions.get(QTY),
        )

    @property
    def has_required(self) -> bool:
        return self.digitizer_item is not None and self.total is not None

    def to_dict(self) -> dict[str, int | None]:
        return {
            "Digitizer Item": self.digitizer_item,
            "Total": self.total,
            "Units": self.units,
            "Estimate": self.estimate,
            "Qty": self.qty,
        }


def _cell(cells: list[Any], idx: int | None) -> Any:
    if idx is None or idx >= len(cells):
        return None
    value = cells[idx]
    return None if is_blank_cell(value) else value


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class InputRow:
    index: int
    cells: list[Any]
    description: str
    takeoff: float | None
    unit: str
    estimate: str | None
    qty: float | None

    @classmethod
    def from_cells(cls, index: int, cells: list[Any], header: HeaderIndex) -> InputRow:
        description = _cell(cells, header.digitizer_item)
        unit = _cell(cells, header.units)
        estimate = _cell(cells, header.estimate)
        return cls(
            index=index,
            cells=cells,
            description=str(description).strip() if description is not None else "",
            takeoff=_to_number(_cell(cells, header.total)),
            unit=str(unit).strip() if unit is not None else "",
            estimate=str(estimate).strip() if estimate is not None else None,
            qty=_to_number(_cell(cells, header.qty)),
        )


def iter_input_rows(raw: RawInput, header: HeaderIndex) -> Iterator[InputRow]:
    """Yield InputRow views for rows that carry a description."""
    for idx, cells in enumerate(raw.rows):
        if is_blank_row(cells):
            continue
        row = InputRow.from_cells(idx, cells, header)
        if row.description:
            yield row
