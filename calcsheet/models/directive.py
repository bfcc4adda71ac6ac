from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""DerivationDirective model.

A directive tells the external formula writer which columns of one sheet row are
derived and how. `cells` maps a column letter to either a formula body (str,
without the leading "=") or a literal number. Subtotal directives also carry the
summed row range and any constant applied after summation.
"""

__all__ = [
    "DerivationDirective",
]


@dataclass(frozen=True)
class DerivationDirective:
    row: int
    item_type: str
    section: str
    cells: dict[str, str | float]
    first_data_row: int | None = None
    last_data_row: int | None = None
    multipliers: dict[str, float] = field(default_factory=dict)
    ref_row: int | None = None

    @property
    def is_sum(self) -> bool:
        return self.first_data_row is not None

    @property
    def operator(self) -> str | None:
        if not self.is_sum:
            return None
        if not self.multipliers:
            return "sum"
        return "sum*const"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "row": self.row,
            "itemType": self.item_type,
            "section": self.section,
            "cells": dict(self.cells),
        }
        if self.is_sum:
            out["firstDataRow"] = self.first_data_row
            out["lastDataRow"] = self.last_data_row
            out["operator"] = self.operator
            if self.multipliers:
                out["multipliers"] = dict(self.multipliers)
        if self.ref_row is not None:
            out["refRow"] = self.ref_row
        return out
