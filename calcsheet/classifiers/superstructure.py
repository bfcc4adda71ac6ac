from __future__ import annotations

import re
from collections.abc import Callable

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import (
    clean_text,
    parse_bracket_dimensions,
    parse_embedded_quantity,
    parse_fraction_inches,
    parse_height_param,
    parse_thickness,
    parse_width_height_words,
    to_feet,
)

from .base import Classification, GeometryParser, Predicate, Rule, RuleTable, all_of, any_of, contains, matches, not_

"""Superstructure rule table.

Several families only claim a row when its dimensions can be read: a "concrete
wall crack repair" row has no (width x height) bracket, so it falls through the
shear wall rule and lands in repair scope further down. Slabs without a
thickness fall back to the family default (CIP 8", LW fill 1'-1", topping 2",
raised 4", built-up 3", pads 4").
"""

__all__ = [
    "SECTION",
    "SUBSECTION_ORDER",
    "TABLE",
    "classify",
]

SECTION = "superstructure"

CIP_SLABS = "CIP Slabs"
BALCONY_SLAB = "Balcony slab"
TERRACE_SLAB = "Terrace slab"
SLAB_STEPS = "Slab steps"
LW_CONCRETE_FILL = "LW concrete fill"
SLAB_ON_METAL_DECK = "Slab on metal deck"
TOPPING_SLAB = "Topping slab"
PATCH_SLAB = "Patch slab"
RAISED_SLAB = "Raised slab"
BUILT_UP_SLAB = "Built-up slab"
SHEAR_WALLS = "Shear Walls"
PARAPET_WALLS = "Parapet walls"
COLUMNS = "Columns"
CONCRETE_POST = "Concrete post"
CONCRETE_ENCASEMENT = "Concrete encasement"
DROP_PANEL = "Drop panel"
BEAMS = "Beams"
CURBS = "Curbs"
CONCRETE_PAD = "Concrete pad"
NON_SHRINK_GROUT = "Non-shrink grout"
REPAIR_SCOPE = "Repair scope"

SUBSECTION_ORDER = (
    CIP_SLABS,
    BALCONY_SLAB,
    TERRACE_SLAB,
    SLAB_STEPS,
    LW_CONCRETE_FILL,
    SLAB_ON_METAL_DECK,
    TOPPING_SLAB,
    PATCH_SLAB,
    RAISED_SLAB,
    BUILT_UP_SLAB,
    SHEAR_WALLS,
    PARAPET_WALLS,
    COLUMNS,
    CONCRETE_POST,
    CONCRETE_ENCASEMENT,
    DROP_PANEL,
    BEAMS,
    CURBS,
    CONCRETE_PAD,
    NON_SHRINK_GROUT,
    REPAIR_SCOPE,
)

CIP_HEIGHT = "8/12"
LW_FILL_HEIGHT = 1 + 1 / 12
PATCH_HEIGHT = 0.5
TOPPING_HEIGHT = 2 / 12
RAISED_HEIGHT = 4 / 12
BUILT_UP_HEIGHT = 3 / 12
PAD_HEIGHT = 4 / 12
DROP_PANEL_HEIGHT = 0.67
SLAB_STEP_COUNT = 2.0

_LEADING_INCHES = r"""\s*(\d+(?:\.\d+)?(?:[\s-]+\d+/\d+)?)\s*(["'])?"""
_BEAM_MARK_RE = re.compile(r"^(?:'?\s*)?(\d+B-\d+|RB-\d+|BHB-\d+)", re.IGNORECASE)
_SOMD_INCHES_RE = re.compile(r"""(\d+(?:\.\d+)?(?:[\s-]+\d+/\d+)?)\s*$""")
_PAD_COUNT_RE = re.compile(r"pad\s*\(\s*(\d+)\s*\)\s*no\.?", re.IGNORECASE)
_BOX_WORDS_RE = re.compile(
    r"""([0-9'"\-]+)\s*x\s*([0-9'"\-]+)\s*(?:wide|width)\s*,?\s*(?:height|ht|h)\s*=\s*([0-9'"\-]+)""",
    re.IGNORECASE,
)


def _length_after(text: str, keyword: str) -> float | None:
    """Thickness written right after a family name (`Raised slab 6"`); bare numbers are inches."""
    m = re.search(re.escape(keyword) + _LEADING_INCHES, clean_text(text), re.IGNORECASE)
    if not m:
        return None
    if m.group(2) == "'":
        return to_feet(f"{m.group(1)}'")
    inches = parse_fraction_inches(m.group(1))
    return inches / 12 if inches is not None else None


def _thickness_or(text: str, keyword: str, default: float) -> ParsedGeometry:
    height = _length_after(text, keyword)
    if height is None:
        height = parse_thickness(text)
    return ParsedGeometry(height=height if height is not None else default)


def _wall_dims(text: str) -> ParsedGeometry | None:
    dims = parse_bracket_dimensions(text)
    if dims is not None and dims.second is not None:
        return ParsedGeometry(width=dims.first, height=dims.second)
    words = parse_width_height_words(text)
    if words is not None:
        return ParsedGeometry(width=words[0], height=words[1])
    return None


def _box_dims(text: str) -> ParsedGeometry | None:
    dims = parse_bracket_dimensions(text)
    if dims is not None and len(dims.values) >= 3:
        return ParsedGeometry(length=dims.length, width=dims.width, height=dims.height)
    m = _BOX_WORDS_RE.search(clean_text(text))
    if m:
        return ParsedGeometry(
            length=to_feet(m.group(1).strip()),
            width=to_feet(m.group(2).strip()),
            height=to_feet(m.group(3).strip()),
        )
    return None


def _somd_inches(text: str) -> tuple[float, float] | None:
    # "SOMD S3 4 1/2" LW concrete topping over 2" MD": first and second inch values
    parts = clean_text(text).split('"')
    if len(parts) < 3:
        return None
    first = _SOMD_INCHES_RE.search(parts[0].strip())
    second = _SOMD_INCHES_RE.search(parts[1].strip())
    if not first or not second:
        return None
    a = parse_fraction_inches(first.group(1))
    b = parse_fraction_inches(second.group(1))
    if not a or not b:
        return None
    return a, b


def _has(parser: Callable[[str], object]) -> Predicate:
    def predicate(text: str) -> bool:
        return parser(text) is not None

    return predicate


def _geometry(parser: Callable[[str], ParsedGeometry | None]) -> GeometryParser:
    def parse(text: str) -> ParsedGeometry:
        return parser(text) or ParsedGeometry()

    return parse


# geometry parsers

def _cip(text: str) -> ParsedGeometry:
    return ParsedGeometry(height_formula=CIP_HEIGHT)


def _plain_slab(text: str) -> ParsedGeometry:
    height = _length_after(text, "slab")
    if height is None:
        return ParsedGeometry(height_formula=CIP_HEIGHT)
    return ParsedGeometry(height=height)


def _slab_step(text: str) -> ParsedGeometry:
    dims = _wall_dims(text) or ParsedGeometry()
    return ParsedGeometry(width=dims.width, height=dims.height, quantity=SLAB_STEP_COUNT)


def _lw_fill(text: str) -> ParsedGeometry:
    height = parse_height_param(text)
    if height is None:
        height = _length_after(text, "fill")
    return ParsedGeometry(height=height if height is not None else LW_FILL_HEIGHT)


def _somd(text: str) -> ParsedGeometry:
    inches = _somd_inches(text)
    if inches is None:
        return ParsedGeometry(manual=frozenset({"height"}))
    return ParsedGeometry(height=inches[0] / 12, group_key=f"SOMD_{inches[0]:g}_{inches[1]:g}")


def _topping(text: str) -> ParsedGeometry:
    height = parse_thickness(text)
    if height is None:
        m = re.search(r'(\d+(?:\.\d+)?)\s*"', clean_text(text))
        height = float(m.group(1)) / 12 if m else None
    return ParsedGeometry(height=height if height is not None else TOPPING_HEIGHT)


def _patch(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=PATCH_HEIGHT)


def _raised(text: str) -> ParsedGeometry:
    return _thickness_or(text, "raised slab", RAISED_HEIGHT)


def _built_up(text: str) -> ParsedGeometry:
    keyword = "builtup slab" if "builtup slab" in text.lower() else "built up slab"
    return _thickness_or(text, keyword, BUILT_UP_HEIGHT)


def _drop_panel(text: str) -> ParsedGeometry:
    box = _box_dims(text)
    if box is not None:
        return box
    height = parse_height_param(text)
    return ParsedGeometry(height=height if height is not None else DROP_PANEL_HEIGHT)


def _beam(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    if dims is None:
        return ParsedGeometry()
    return ParsedGeometry(width=dims.first, height=dims.second)


def _pad(text: str) -> ParsedGeometry:
    m = _PAD_COUNT_RE.search(text)
    if m:
        return ParsedGeometry(height=PAD_HEIGHT, quantity=float(m.group(1)))
    height = _length_after(text, "pad")
    if height is None:
        height = parse_thickness(text)
    quantity = parse_embedded_quantity(text)
    return ParsedGeometry(
        height=height if height is not None else PAD_HEIGHT,
        quantity=float(quantity) if quantity is not None else None,
        manual=frozenset() if quantity is not None else frozenset({"quantity"}),
    )


# predicates

def _is_beam(text: str) -> bool:
    if not _BEAM_MARK_RE.search(text.strip()):
        return False
    dims = parse_bracket_dimensions(text)
    return dims is not None and len(dims.values) == 2


_excluded = contains("detention tank lid slab", "duplex sewage ejector pit slab", "sump pump pit slab 8")
_shear_wall = all_of(contains("sw ", "shear wall", "concrete wall"), _has(_wall_dims))
_parapet = all_of(contains("parapet wall"), _has(_wall_dims))
_curb = all_of(contains("curb"), _has(_wall_dims))


TABLE = RuleTable(
    SECTION,
    [
        Rule("slab_step", all_of(contains("slab step"), _has(_wall_dims)), ItemType.SLAB_STEP, SLAB_STEPS, _slab_step),
        Rule(
            "lw_concrete_fill",
            contains("lw concrete fill", "light weight concrete fill"),
            ItemType.LW_CONCRETE_FILL,
            LW_CONCRETE_FILL,
            _lw_fill,
        ),
        Rule(
            "slab_on_metal_deck",
            all_of(contains("slab on metal deck", "somd"), not_(contains("landing")), _has(_somd_inches)),
            ItemType.SLAB_ON_METAL_DECK,
            SLAB_ON_METAL_DECK,
            _somd,
        ),
        Rule(
            "cip_slab",
            contains('cast in place slab 8"', 'cip slab 8"', 'roof slab 8"'),
            ItemType.CIP_SLAB,
            CIP_SLABS,
            _cip,
        ),
        Rule("balcony_slab", contains('balcony slab 8"'), ItemType.CIP_SLAB, BALCONY_SLAB, _cip),
        Rule("terrace_slab", contains('terrace slab 8"'), ItemType.CIP_SLAB, TERRACE_SLAB, _cip),
        Rule(
            "slab",
            all_of(
                matches(r"""^slab\s+[0-9'"\-]"""),
                not_(contains("slab step", "patch slab", "topping slab", "overpour slab", "slab on ")),
            ),
            ItemType.CIP_SLAB,
            CIP_SLABS,
            _plain_slab,
        ),
        Rule("slab_8", contains('slab 8"'), ItemType.CIP_SLAB, CIP_SLABS, _cip),
        Rule("patch_slab", contains("patch slab"), ItemType.PATCH_SLAB, PATCH_SLAB, _patch),
        Rule(
            "topping_slab",
            all_of(contains("topping slab", "overpour slab"), contains("thick", "thk", '"')),
            ItemType.TOPPING_SLAB,
            TOPPING_SLAB,
            _topping,
        ),
        Rule("raised_slab", contains("raised slab"), ItemType.RAISED_SLAB, RAISED_SLAB, _raised),
        Rule("built_up_slab", contains("builtup slab", "built up slab"), ItemType.BUILT_UP_SLAB, BUILT_UP_SLAB, _built_up),
        Rule("shear_wall", _shear_wall, ItemType.SHEAR_WALL, SHEAR_WALLS, _geometry(_wall_dims)),
        Rule("parapet_wall", _parapet, ItemType.PARAPET_WALL, PARAPET_WALLS, _geometry(_wall_dims)),
        Rule(
            "columns",
            any_of(contains("as per takeoff count"), all_of(contains("column"), contains("count"))),
            ItemType.COLUMN,
            COLUMNS,
        ),
        Rule(
            "concrete_post",
            all_of(contains("concrete post"), _has(_box_dims)),
            ItemType.CONCRETE_POST,
            CONCRETE_POST,
            _geometry(_box_dims),
        ),
        Rule(
            "concrete_encasement",
            all_of(contains("concrete encasement"), _has(_box_dims)),
            ItemType.CONCRETE_POST,
            CONCRETE_ENCASEMENT,
            _geometry(_box_dims),
        ),
        Rule(
            "drop_panel",
            all_of(contains("drop panel"), any_of(_has(_box_dims), matches(r"(?:height|ht|h)\s*="))),
            ItemType.DROP_PANEL,
            DROP_PANEL,
            _drop_panel,
        ),
        Rule(
            "beam",
            all_of(not_(contains("secant pile", "core beam", "pile w/")), _is_beam),
            ItemType.BEAM,
            BEAMS,
            _beam,
        ),
        Rule("curb", _curb, ItemType.CURB, CURBS, _geometry(_wall_dims)),
        Rule(
            "concrete_pad",
            all_of(contains("pad"), not_(contains("transformer"))),
            ItemType.CONCRETE_PAD,
            CONCRETE_PAD,
            _pad,
        ),
        Rule("non_shrink_grout", contains("non-shrink grout", "non shrink grout"), ItemType.NON_SHRINK_GROUT, NON_SHRINK_GROUT),
        Rule(
            "repair_scope",
            contains("concrete wall crack repair", "slab crack repair", "column crack repair"),
            ItemType.REPAIR_SCOPE,
            REPAIR_SCOPE,
        ),
    ],
    excludes=[_excluded],
)


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)
