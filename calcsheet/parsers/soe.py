from __future__ import annotations

import re
from dataclasses import dataclass

from .dimensions import parse_diameter_thickness, parse_named_param, round_up_to

"""Support-of-excavation (SOE) description parsing.

Soldier piles come in two shapes:
- drilled: `9-5/8"Ø x 0.545 ... H=25'-0", RS=5'-0"` (pipe diameter x wall thickness)
- HP:      `HP12x63 ... H=30'-0"`

Pile heights are rounded up to the next multiple of 5 ft. Drilled pile weight is
(D - t) * t * 10.69 lb/ft.
"""

__all__ = [
    "SoldierPile",
    "parse_soldier_pile",
    "pile_weight",
    "parse_member_weight",
    "parse_soe_height",
    "parse_sheet_pile_weight",
    "PATTERN_ORDER",
]

STEEL_PIPE_FACTOR = 10.69
PATTERN_ORDER = {"E": 0, "E+RS": 1, "RS": 2, "H": 3}

_HP_RE = re.compile(r"HP\s*(\d+)\s*x\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
_MEMBER_WEIGHT_RE = re.compile(r"(?<![A-Za-z])(?:W|MC|WT|C|HP)\s*\d+(?:\.\d+)?\s*x\s*([0-9.]+)", re.IGNORECASE)
_SHEET_PILE_RE = re.compile(r"\bPZC?\s*-?\s*(\d+(?:\.\d+)?)", re.IGNORECASE)


@dataclass(frozen=True)
class SoldierPile:
    kind: str  # "drilled" | "hp"
    diameter: float | None = None  # inches
    thickness: float | None = None  # inches
    hp_weight: float | None = None
    height: float | None = None  # H=, feet
    embedment: float | None = None  # E=, feet
    rock_socket: float | None = None  # RS=, feet

    @property
    def pattern(self) -> str:
        if self.embedment and self.rock_socket:
            return "E+RS"
        if self.embedment:
            return "E"
        if self.rock_socket:
            return "RS"
        return "H"

    @property
    def calculated_height(self) -> float | None:
        if not self.height:
            return None
        if self.kind == "drilled" and self.rock_socket:
            return round_up_to(self.height + self.rock_socket)
        return round_up_to(self.height)

    @property
    def weight(self) -> float | None:
        return pile_weight(self)

    @property
    def group_key(self) -> str:
        if self.kind == "hp":
            return f"HP-{self.height or 0:g}"
        e = round((self.embedment or 0) * 12)
        rs = round((self.rock_socket or 0) * 12)
        return f"{self.diameter:g}-{self.thickness:g}-{self.pattern}-{e}-{rs}"

    def sort_key(self) -> tuple[int, float, float, int]:
        if self.kind == "hp":
            return (1, 0.0, 0.0, 0)
        return (0, self.diameter or 0.0, self.thickness or 0.0, PATTERN_ORDER[self.pattern])


def parse_soldier_pile(text: str) -> SoldierPile | None:
    if not text:
        return None
    m = _HP_RE.search(text)
    if m:
        return SoldierPile(
            kind="hp",
            hp_weight=float(m.group(2)),
            height=parse_named_param(text, "H"),
        )
    dt = parse_diameter_thickness(text)
    if dt is None:
        return None
    return SoldierPile(
        kind="drilled",
        diameter=dt[0],
        thickness=dt[1],
        height=parse_named_param(text, "H"),
        embedment=parse_named_param(text, "E"),
        rock_socket=parse_named_param(text, "RS"),
    )


def pile_weight(pile: SoldierPile) -> float | None:
    if pile.kind == "hp":
        return pile.hp_weight
    if pile.diameter is None or pile.thickness is None:
        return None
    return (pile.diameter - pile.thickness) * pile.thickness * STEEL_PIPE_FACTOR


def parse_member_weight(text: str) -> float | None:
    """lb/ft from a steel designation such as W12x40, MC8x22.8 or HP14x73."""
    m = _MEMBER_WEIGHT_RE.search(text or "")
    if not m:
        return None
    try:
        return float(m.group(1).rstrip("."))
    except ValueError:
        return None


def parse_soe_height(text: str, round_to_five: bool) -> float | None:
    """Height from H= or LF=; piles round up to 5 ft, timber keeps the raw value."""
    height = parse_named_param(text, "H")
    if height is None:
        height = parse_named_param(text, "LF")
    if height is None:
        return None
    return round_up_to(height) if round_to_five else height


def parse_sheet_pile_weight(text: str) -> float | None:
    """lb/sf of a PZ / PZC section; the section number is its weight (PZ22 -> 22)."""
    m = _SHEET_PILE_RE.search(text or "")
    return float(m.group(1)) if m else None
