from __future__ import annotations

import re

from .dimensions import (
    clean_text,
    parse_diameter_thickness,
    parse_fraction_inches,
    parse_named_param,
    round_up_to,
    to_feet,
)
from .soe import STEEL_PIPE_FACTOR

"""Foundation pile description parsing.

Drilled, helical and stelcor piles carry a pipe designation (`9-5/8"Ø x0.545`);
isolation-casing piles list a second, larger diameter after "&" whose wall is
taken as 1/2". Pile lengths are H (plus a rock socket when given) rounded up to
the next 5 ft.
"""

__all__ = [
    "DEFAULT_CASING_THICKNESS",
    "FoundationPile",
    "parse_foundation_pile",
    "pipe_weight",
]

DEFAULT_CASING_THICKNESS = 0.5

_SINGLE_DIAMETER_RE = re.compile(r"""(\d+(?:\.\d+)?(?:-\d+/\d+)?)\s*["']?\s*[Øø]""")
_RS_PLUS_RE = re.compile(r"""\+\s*(\d+'\s*-?\s*\d*(?:\.\d+)?"?)\s*RS\b""", re.IGNORECASE)
_HP_RE = re.compile(r"HP\s*\d+\s*x\s*(\d+(?:\.\d+)?)", re.IGNORECASE)


def pipe_weight(diameter: float, thickness: float) -> float:
    return (diameter - thickness) * thickness * STEEL_PIPE_FACTOR


class FoundationPile:
    """Parsed pile designation; every attribute may be None."""

    def __init__(
        self,
        height: float | None = None,
        weight: float | None = None,
        weight2: float | None = None,
        group_key: str | None = None,
    ) -> None:
        self.height = height
        self.weight = weight
        self.weight2 = weight2
        self.group_key = group_key

    @property
    def is_dual(self) -> bool:
        return self.weight2 is not None


def _pile_height(text: str) -> float | None:
    height = parse_named_param(text, "H")
    if height is None:
        return None
    rock_socket = parse_named_param(text, "RS")
    if rock_socket is None:
        m = _RS_PLUS_RE.search(clean_text(text))
        if m:
            rock_socket = to_feet(m.group(1).strip())
    return round_up_to(height + (rock_socket or 0))


def parse_foundation_pile(text: str) -> FoundationPile:
    height = _pile_height(text or "")
    influence = "influence" in (text or "").lower()
    prefix = "INFLU-" if influence else ""

    hp = _HP_RE.search(text or "")
    if hp:
        return FoundationPile(height=height, weight=float(hp.group(1)), group_key=f"{prefix}{hp.group(0).upper()}")

    first, sep, second = (text or "").partition("&")
    dt = parse_diameter_thickness(first)
    if dt is None:
        return FoundationPile(height=height, group_key=f"{prefix}OTHER")
    diameter, thickness = dt
    weight = pipe_weight(diameter, thickness)
    weight2 = None
    if sep:
        m = _SINGLE_DIAMETER_RE.search(clean_text(second))
        diameter2 = parse_fraction_inches(m.group(1)) if m else None
        if diameter2 is not None:
            weight2 = pipe_weight(diameter2, DEFAULT_CASING_THICKNESS)
    key = f"{prefix}{diameter:.3f}x{thickness:g}"
    if weight2 is not None:
        key += "-DUAL"
    return FoundationPile(height=height, weight=weight, weight2=weight2, group_key=key)
