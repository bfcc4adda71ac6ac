from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .calculation_row import CalculationRow
from .directive import DerivationDirective
from .unused_row import UnusedRowRecord

"""Output of one calculation-sheet pass.

`rows` and `formulas` are ordered by sheet position; `unused_rows` is ordered by
input row index. `aggregates` holds section totals already rounded to 2 places.
"""

__all__ = [
    "COLUMN_TITLES",
    "COLUMN_LETTERS",
    "CalculationResult",
    "column_configs",
]

COLUMN_TITLES = [
    "Estimate",
    "Particulars",
    "Takeoff",
    "Unit",
    "QTY",
    "Length",
    "Width",
    "Height",
    "FT",
    "SQ FT",
    "LBS",
    "CY",
    "QTY",
    "Raw Row #",
]
COLUMN_LETTERS = [chr(ord("A") + i) for i in range(len(COLUMN_TITLES))]
_COLUMN_WIDTHS = [110, 500, 80, 60, 60, 80, 80, 80, 80, 80, 80, 80, 60, 80]


def column_configs() -> list[dict[str, int]]:
    return [{"width": w} for w in _COLUMN_WIDTHS]


@dataclass(frozen=True)
class CalculationResult:
    rows: list[CalculationRow]
    formulas: list[DerivationDirective]
    unused_rows: list[UnusedRowRecord]
    aggregates: dict[str, float] = field(default_factory=dict)
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def data_rows(self) -> list[CalculationRow]:
        return [r for r in self.rows if r.is_data and r.raw_index is not None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": list(COLUMN_TITLES),
            "columnConfigs": column_configs(),
            "rows": [r.to_dict() for r in self.rows],
            "formulas": [f.to_dict() for f in self.formulas],
            "unusedRawDataRows": [u.to_dict() for u in self.unused_rows],
            "aggregates": dict(self.aggregates),
            "stats": dict(self.stats),
        }
