from __future__ import annotations

import re

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import parse_bracket_dimensions, parse_height_param, parse_thickness

from .base import Classification, Rule, RuleTable, all_of, any_of, contains, group_key_for, matches, not_, starts_with

"""Waterproofing rule table.

Exterior side walls take the second bracket value plus 2 ft of lap as their
height. Pit walls are waterproofed on both faces: the exterior row is claimed by
the table and the negative side row is added as a companion with the plain
bracket height.
"""

__all__ = [
    "SECTION",
    "EXTERIOR_SIDE",
    "EXTERIOR_SIDE_PIT",
    "NEGATIVE_SIDE",
    "SUBSECTION_ORDER",
    "TABLE",
    "EXTERIOR_LAP",
    "classify",
    "negative_wall_companion",
]

SECTION = "waterproofing"
EXTERIOR_SIDE = "Exterior side"
EXTERIOR_SIDE_PIT = "Exterior side pit"
NEGATIVE_SIDE = "Negative side"
HORIZONTAL = "Horizontal"
INSULATION = "Insulation"
SUBSECTION_ORDER = (EXTERIOR_SIDE, EXTERIOR_SIDE_PIT, NEGATIVE_SIDE, HORIZONTAL, INSULATION)

EXTERIOR_LAP = 2.0

_PIT_WALL_RES = (
    re.compile(r"deep\s+sewage\s+ejector(?:\s+pit)?\s+wall", re.IGNORECASE),
    re.compile(r"(elev\.?|elevator)(?:\s+pit)?\s+wall", re.IGNORECASE),
    re.compile(r"detention\s+tank\s+wall", re.IGNORECASE),
    re.compile(r"duplex\s+sewage\s+ejector(?:\s+pit)?\s+wall", re.IGNORECASE),
    re.compile(r"grease\s+trap(?:\s+pit)?\s+wall", re.IGNORECASE),
    re.compile(r"house\s+trap(?:\s+pit)?\s+wall", re.IGNORECASE),
)
_NEGATIVE_SLAB_RE = re.compile(
    r"(house\s+trap|grease\s+trap|deep\s+sewage\s+ejector|duplex\s+sewage\s+ejector|detention\s+tank|elev\.?|elevator)"
    r"(?:\s+pit)?(?:\s+lid)?\s+slab",
    re.IGNORECASE,
)


def _is_pit_wall(text: str) -> bool:
    if "slab" in text.lower():
        return False
    return any(p.search(text) for p in _PIT_WALL_RES)


def _second_value(text: str) -> float | None:
    dims = parse_bracket_dimensions(text)
    return dims.second if dims is not None else None


def _exterior_wall(text: str) -> ParsedGeometry:
    second = _second_value(text)
    return ParsedGeometry(
        height=second + EXTERIOR_LAP if second is not None else None,
        group_key=group_key_for(text),
    )


def _exterior_pit_wall(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    if dims is None or dims.second is None:
        return ParsedGeometry()
    return ParsedGeometry(width=dims.first, height=dims.second + EXTERIOR_LAP)


def _negative_wall(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=_second_value(text))


def _area(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=parse_thickness(text) or parse_height_param(text))


TABLE = RuleTable(
    SECTION,
    [
        Rule(
            "exterior_wall",
            any_of(
                matches(r"^(fw|rw)\s*\("),
                contains("vehicle barrier wall (", "concrete liner wall (", "stem wall ("),
            ),
            ItemType.WP_EXTERIOR_WALL,
            EXTERIOR_SIDE,
            _exterior_wall,
        ),
        Rule("exterior_pit_wall", _is_pit_wall, ItemType.WP_EXTERIOR_PIT_WALL, EXTERIOR_SIDE_PIT, _exterior_pit_wall),
        Rule("negative_slab", matches(_NEGATIVE_SLAB_RE.pattern), ItemType.WP_NEGATIVE_SLAB, NEGATIVE_SIDE),
        Rule(
            "horizontal",
            all_of(
                any_of(contains("horizontal"), starts_with("under slab", "underslab", "plaza deck", "blindside")),
                not_(contains("insulation")),
            ),
            ItemType.WP_HORIZONTAL,
            HORIZONTAL,
            _area,
        ),
        Rule("insulation", contains("insulation"), ItemType.WP_INSULATION, INSULATION, _area),
    ],
)


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)


def negative_wall_companion(primary: Classification, description: str) -> Classification | None:
    """Negative side row repeated from an exterior side pit wall, or None."""
    if primary.item_type is not ItemType.WP_EXTERIOR_PIT_WALL:
        return None
    return Classification(
        section=SECTION,
        subsection=NEGATIVE_SIDE,
        item_type=ItemType.WP_NEGATIVE_WALL,
        geometry=_negative_wall(description),
        rule=f"{primary.rule}_negative",
    )
