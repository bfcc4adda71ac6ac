from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

"""ParsedGeometry model.

The numeric decomposition of one take-off description. Every field defaults to
None (absent); absence is distinct from a measured zero. Fields the estimator is
expected to fill by hand are listed in `manual` so that directives depending on
them are still emitted.
"""

__all__ = [
    "ParsedGeometry",
    "GEOMETRY_COLUMNS",
]

# Sheet column holding each geometry field
GEOMETRY_COLUMNS: dict[str, str] = {
    "quantity": "E",
    "length": "F",
    "width": "G",
    "height": "H",
}


@dataclass(frozen=True)
class ParsedGeometry:
    length: float | None = None  # feet
    width: float | None = None  # feet
    height: float | None = None  # feet
    quantity: float | None = None  # explicit count from the description
    unit: str | None = None
    weight: float | None = None  # lb/ft
    weight2: float | None = None  # lb/ft, second section of dual piles
    height_formula: str | None = None  # e.g. "8/12" when the height is a fixed expression
    group_key: str | None = None
    manual: frozenset[str] = field(default_factory=frozenset)

    def is_available(self, name: str) -> bool:
        """True when the field has a value or is left for manual entry."""
        if name == "height" and self.height_formula is not None:
            return True
        return getattr(self, name) is not None or name in self.manual

    def with_manual(self, *names: str) -> ParsedGeometry:
        return replace(self, manual=self.manual | frozenset(names))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name in ("length", "width", "height", "quantity", "unit", "weight", "weight2", "height_formula"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        if self.manual:
            out["manual"] = sorted(self.manual)
        return out
