from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

"""Dimension / text parser for take-off descriptions.

All lengths come back in feet. Every function is best-effort: text that does not
match returns None, never a fabricated zero and never an exception.

Length tokens:
- N"        -> N / 12
- F'-I"     -> F + I / 12  (the "-" before the inches is a separator, not a sign)
- F'        -> F
- N         -> N (bare numbers are feet)

Inside a bracketed dimension group a bare number is read as inches, the way
digitizer exports write (22x16x6'-0").
"""

__all__ = [
    "BracketDimensions",
    "clean_text",
    "to_feet",
    "parse_fraction_inches",
    "normalize_unit",
    "select_bracket_group",
    "parse_bracket_dimensions",
    "parse_thickness",
    "normalize_thickness_label",
    "parse_named_param",
    "parse_height_param",
    "parse_mud_slab_thickness",
    "parse_diameter_thickness",
    "parse_width_height_words",
    "parse_embedded_quantity",
    "round_up_to",
]

_FRACTION_GLYPHS = {
    "½": "1/2",
    "¼": "1/4",
    "¾": "3/4",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
    "⅓": "1/3",
    "⅔": "2/3",
}

_QUOTES = str.maketrans({"”": '"', "“": '"', "″": '"', "’": "'", "‘": "'", "′": "'"})

_FEET_INCHES_RE = re.compile(
    r"""^(\d+(?:\.\d+)?)\s*'\s*(?:-?\s*(\d+(?:\.\d+)?(?:[\s-]+\d+/\d+)?|\d+/\d+)\s*(?:"|'')?)?$"""
)
_INCHES_RE = re.compile(r"""^(\d+(?:\.\d+)?(?:[\s-]+\d+/\d+)?|\d+/\d+)\s*(?:"|'')$""")
_BARE_RE = re.compile(r"^\d+(?:\.\d+)?$")
_BRACKET_RE = re.compile(r"\(([^()]*)\)")
_DIM_SEPARATOR_RE = re.compile(r"""[\d"'½¼¾]\s*[xX]\s*['\d]""")
_THICK_RE = re.compile(
    r"""(\d+(?:\.\d+)?(?:\s*[½¼¾⅛⅜⅝⅞]|[\s-]+\d+/\d+)?)\s*(["'])\s*(?:thick|thk)\b""",
    re.IGNORECASE,
)
_TRAILING_INCHES_RE = re.compile(
    r"""(\d+(?:\.\d+)?(?:[\s-]+\d+/\d+)?|\d+/\d+)\s*"\s*(?:typ\.?)?\s*$""",
    re.IGNORECASE,
)
_MUD_SLAB_RE = re.compile(r"""w/\s*(\d+(?:\.\d+)?)\s*["']?\s*mud\s*slab""", re.IGNORECASE)
_DIA_THICK_RE = re.compile(
    r"""(\d+(?:\.\d+)?(?:-\d+/\d+)?)["']?\s*[Øø]\s*x\s*([0-9.]+)""",
    re.IGNORECASE,
)
_WIDE_HEIGHT_RE = re.compile(
    r"""([0-9'"\-]+)\s*(?:wide|width)\s*,?\s*(?:height|ht|h)\s*=\s*([0-9'"\-]+)""",
    re.IGNORECASE,
)
_QTY_RES = (
    re.compile(r"\(\s*(\d+)\s*(?:no\.?|nos\.?|ea)\s*\)", re.IGNORECASE),
    re.compile(r"\(\s*(\d+)\s*\)\s*(?:no\.?|nos\.?|ea)(?![a-z])", re.IGNORECASE),
)
_EACH_UNITS = {"ea", "no", "nos"}


def clean_text(text: str) -> str:
    """Fold curly quotes and fraction glyphs into ASCII (4½ -> 4-1/2)."""
    out = text.translate(_QUOTES)
    for glyph, frac in _FRACTION_GLYPHS.items():
        # "4½" / "4 ½" -> "4-1/2"; bare "½" -> "1/2"
        out = re.sub(rf"(\d)\s*{glyph}", rf"\1-{frac}", out)
        out = out.replace(glyph, frac)
    return out


def parse_fraction_inches(token: Any) -> float | None:
    """Decimal inches from "4", "4.5", "4 ½", "4-1/2", "4 1/2" or "1/2"."""
    if token is None:
        return None
    if isinstance(token, (int, float)) and not isinstance(token, bool):
        return float(token)
    s = clean_text(str(token)).strip().rstrip('"').strip()
    m = re.match(r"^(\d+(?:\.\d+)?)(?:[\s-]+(\d+)/(\d+))?$", s)
    if m:
        whole = float(m.group(1))
        if m.group(2):
            den = int(m.group(3))
            if den == 0:
                return None
            whole += int(m.group(2)) / den
        return whole
    m = re.match(r"^(\d+)/(\d+)$", s)
    if m and int(m.group(2)) != 0:
        return int(m.group(1)) / int(m.group(2))
    return None


def to_feet(token: Any) -> float | None:
    """Convert one length token to feet; None when it is not a length."""
    if token is None or isinstance(token, bool):
        return None
    if isinstance(token, (int, float)):
        if isinstance(token, float) and math.isnan(token):
            return None
        return float(token)
    s = clean_text(str(token)).strip()
    if not s:
        return None
    m = _FEET_INCHES_RE.match(s)
    if m:
        feet = float(m.group(1))
        if m.group(2):
            inches = parse_fraction_inches(m.group(2))
            if inches is None:
                return None
            feet += inches / 12
        return feet
    m = _INCHES_RE.match(s)
    if m:
        inches = parse_fraction_inches(m.group(1))
        return None if inches is None else inches / 12
    if _BARE_RE.match(s):
        return float(s)
    return None


def normalize_unit(unit: Any) -> str:
    if unit is None:
        return ""
    s = str(unit).strip()
    if s.lower().rstrip(".") in _EACH_UNITS:
        return "EA"
    return s


def select_bracket_group(text: str) -> str | None:
    """Pick the bracketed group holding the dimensions.

    With several groups, the last one containing an "x" separator wins over code
    tags such as "(P3)"; without any such group the first group is returned.
    """
    if not text:
        return None
    groups = _BRACKET_RE.findall(clean_text(text))
    if not groups:
        return None
    with_x = [g for g in groups if _DIM_SEPARATOR_RE.search(g)]
    if with_x:
        return with_x[-1]
    return groups[0]


def _bracket_part_to_feet(part: str) -> float | None:
    p = part.strip().lstrip("'").strip()
    if re.match(r"""^\d+(?:\.\d+)?"?$""", p):
        return float(p.rstrip('"')) / 12
    return to_feet(p)


@dataclass(frozen=True)
class BracketDimensions:
    values: tuple[float | None, ...]

    @property
    def first(self) -> float | None:
        return self.values[0] if self.values else None

    @property
    def second(self) -> float | None:
        return self.values[1] if len(self.values) > 1 else None

    @property
    def length(self) -> float | None:
        return self.values[0] if len(self.values) >= 3 else None

    @property
    def width(self) -> float | None:
        if len(self.values) >= 3:
            return self.values[1]
        return self.values[0] if self.values else None

    @property
    def height(self) -> float | None:
        if len(self.values) >= 3:
            return self.values[2]
        if len(self.values) == 2:
            return self.values[1]
        return None


def parse_bracket_dimensions(text: str) -> BracketDimensions | None:
    """Split the selected bracket group on "x".

    Two parts map to width/height, three to length/width/height, left to right.
    """
    group = select_bracket_group(text)
    if group is None:
        return None
    parts = [p for p in re.split(r"\s*[xX]\s*", group.strip()) if p.strip()]
    if not parts:
        return None
    values = tuple(_bracket_part_to_feet(p) for p in parts)
    if all(v is None for v in values):
        return None
    return BracketDimensions(values=values)


def parse_thickness(text: str, inches_from_name: bool = False) -> float | None:
    """Height from a `<n>" thick` / `<n>" thk` annotation.

    With inches_from_name a bare trailing `<n>"` is accepted too (pit/slab names
    such as `House trap pit slab 12"`).
    """
    if not text:
        return None
    cleaned = clean_text(text)
    m = _THICK_RE.search(cleaned)
    if m:
        value = parse_fraction_inches(m.group(1))
        if value is None:
            return None
        return value / 12 if m.group(2) == '"' else value
    if inches_from_name:
        m = _TRAILING_INCHES_RE.search(cleaned.strip())
        if m:
            value = parse_fraction_inches(m.group(1))
            return value / 12 if value is not None else None
    return None


def normalize_thickness_label(text: str) -> str:
    return re.sub(r"\bthk\b\.?", "thick", text, flags=re.IGNORECASE)


def parse_named_param(text: str, name: str) -> float | None:
    """Value of a `NAME=<length>` parameter, e.g. H=10'-6" or RS=5'-0"."""
    if not text:
        return None
    m = re.search(rf"""(?<![A-Za-z]){re.escape(name)}\s*=\s*([0-9'"\-\./ ]+)""", clean_text(text))
    if not m:
        return None
    return to_feet(m.group(1).strip().rstrip("-").strip())


def parse_height_param(text: str) -> float | None:
    return parse_named_param(text, "H")


def parse_mud_slab_thickness(text: str) -> float | None:
    m = _MUD_SLAB_RE.search(clean_text(text or ""))
    if not m:
        return None
    return float(m.group(1)) / 12


def parse_diameter_thickness(text: str) -> tuple[float, float] | None:
    """(diameter, wall thickness) in inches from `9-5/8"Ø x 0.545`.

    A thickness typed without its decimal point (0545) is read as 0.545.
    """
    m = _DIA_THICK_RE.search(clean_text(text or ""))
    if not m:
        return None
    diameter = parse_fraction_inches(m.group(1))
    raw_t = m.group(2).rstrip(".")
    if not raw_t or diameter is None:
        return None
    try:
        thickness = float(raw_t)
    except ValueError:
        return None
    if "." not in raw_t and 100 <= thickness < 1000:
        thickness = thickness / 1000
    return diameter, thickness


def parse_width_height_words(text: str) -> tuple[float | None, float | None] | None:
    """`8" wide, H=3'-0"` style descriptions -> (width, height)."""
    m = _WIDE_HEIGHT_RE.search(clean_text(text or ""))
    if not m:
        return None
    return to_feet(m.group(1).strip()), to_feet(m.group(2).strip())


def parse_embedded_quantity(text: str) -> int | None:
    """Count written into the name: `(4 No.)`, `(4) No.`, `(2 EA)`."""
    for pattern in _QTY_RES:
        m = pattern.search(text or "")
        if m:
            return int(m.group(1))
    return None


def round_up_to(value: float, step: float = 5) -> float:
    return float(math.ceil(round(value / step, 9)) * step)
