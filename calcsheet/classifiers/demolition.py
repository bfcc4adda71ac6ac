from __future__ import annotations

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import parse_bracket_dimensions, parse_thickness

from .base import Classification, Rule, RuleTable, contains, group_key_for, starts_with

"""Demolition rule table.

Every demolition row starts with "demo ". Slabs and ramps take their height from
the thickness annotation (4" when none is given); linear items read
(width x height) and footings / pilasters read (length x width x height).
"""

__all__ = [
    "SECTION",
    "TABLE",
    "DEFAULT_SLAB_THICKNESS",
    "SUBSECTION_ORDER",
    "classify",
]

SECTION = "demolition"
DEFAULT_SLAB_THICKNESS = 4 / 12

SLAB_ON_GRADE = "Demo slab on grade"
RAMP_ON_GRADE = "Demo Ramp on grade"
STRIP_FOOTING = "Demo strip footing"
FOUNDATION_WALL = "Demo foundation wall"
RETAINING_WALL = "Demo retaining wall"
ISOLATED_FOOTING = "Demo isolated footing"
PILASTER = "Demo pilaster"
STAIR_ON_GRADE = "Demo stair on grade"


def _slab(text: str) -> ParsedGeometry:
    height = parse_thickness(text, inches_from_name=True)
    return ParsedGeometry(
        height=height if height is not None else DEFAULT_SLAB_THICKNESS,
        group_key=group_key_for(text),
    )


def _linear(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    if dims is None:
        return ParsedGeometry(group_key=group_key_for(text))
    return ParsedGeometry(width=dims.first, height=dims.second, group_key=group_key_for(text))


def _footing(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    if dims is None:
        return ParsedGeometry(group_key=group_key_for(text))
    if len(dims.values) >= 3:
        return ParsedGeometry(
            length=dims.length,
            width=dims.width,
            height=dims.height,
            group_key=group_key_for(text),
        )
    return ParsedGeometry(width=dims.width, height=dims.height, group_key=group_key_for(text))


def _stair(text: str) -> ParsedGeometry:
    height = parse_thickness(text)
    if height is None:
        dims = parse_bracket_dimensions(text)
        height = dims.height if dims else None
    return ParsedGeometry(height=height, group_key=group_key_for(text))


TABLE = RuleTable(
    SECTION,
    [
        Rule("demo_sog", contains("demo sog", "demo slab on grade"), ItemType.DEMO_SLAB, SLAB_ON_GRADE, _slab),
        Rule("demo_rog", contains("demo rog", "demo ramp on grade"), ItemType.DEMO_RAMP, RAMP_ON_GRADE, _slab),
        Rule("demo_sf", contains("demo sf"), ItemType.DEMO_STRIP_FOOTING, STRIP_FOOTING, _linear),
        Rule("demo_fw", contains("demo fw"), ItemType.DEMO_FOUNDATION_WALL, FOUNDATION_WALL, _linear),
        Rule("demo_rw", contains("demo rw"), ItemType.DEMO_RETAINING_WALL, RETAINING_WALL, _linear),
        Rule(
            "demo_isolated_footing",
            contains("demo isolated footing"),
            ItemType.DEMO_ISOLATED_FOOTING,
            ISOLATED_FOOTING,
            _footing,
        ),
        Rule("demo_stair", contains("demo stair"), ItemType.DEMO_STAIR, STAIR_ON_GRADE, _stair),
        Rule("demo_pilaster", contains("demo pilaster"), ItemType.DEMO_PILASTER, PILASTER, _footing),
    ],
    accepts=starts_with("demo "),
)

SUBSECTION_ORDER = (
    SLAB_ON_GRADE,
    RAMP_ON_GRADE,
    STRIP_FOOTING,
    FOUNDATION_WALL,
    RETAINING_WALL,
    ISOLATED_FOOTING,
    PILASTER,
    STAIR_ON_GRADE,
)


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)
