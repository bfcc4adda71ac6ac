from __future__ import annotations

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import (
    parse_bracket_dimensions,
    parse_height_param,
    parse_mud_slab_thickness,
)

from .base import Classification, GeometryParser, Rule, RuleTable, contains, matches

"""Excavation rule table.

Three subsections:
- Soil excavation: footings, piping, excavation areas and the sewage pit slab
- Backfill: `Backfill (H=...)` rows plus backfill companions of piping, slope
  excavation and excavation & backfill rows
- Mud slab: companion of any claimed row carrying `w/ N" mud slab`

Footing excavations take plan dimensions from the bracket and leave the depth for
manual entry. Rock excavation, concrete piers, line drilling and gravel belong to
other sections.
"""

__all__ = [
    "SECTION",
    "SOIL",
    "BACKFILL",
    "MUD_SLAB",
    "SUBSECTION_ORDER",
    "TABLE",
    "classify",
    "backfill_companion",
    "mud_slab_companion",
]

SECTION = "excavation"
SOIL = "Soil excavation"
BACKFILL = "Backfill"
MUD_SLAB = "Mud slab"
SUBSECTION_ORDER = (SOIL, BACKFILL, MUD_SLAB)

PIPING_WIDTH = 3.0
PIPING_EXCAVATION_HEIGHT = 2.5
PIPING_BACKFILL_HEIGHT = 2.0

_MUD_SLAB_PATTERN = r"""w/\s*\d+(?:\.\d+)?\s*["']?\s*mud\s*slab"""


def _piping(text: str) -> ParsedGeometry:
    return ParsedGeometry(width=PIPING_WIDTH, height=PIPING_EXCAVATION_HEIGHT)


def _piping_backfill(text: str) -> ParsedGeometry:
    return ParsedGeometry(width=PIPING_WIDTH, height=PIPING_BACKFILL_HEIGHT)


def _width_only(text: str) -> ParsedGeometry:
    # SF / WF / ST: first bracket value is the width, depth is entered by hand
    dims = parse_bracket_dimensions(text)
    return ParsedGeometry(width=dims.first if dims else None, manual=frozenset({"height"}))


def _plan(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    if dims is None:
        return ParsedGeometry(manual=frozenset({"height"}))
    return ParsedGeometry(length=dims.first, width=dims.second, manual=frozenset({"height"}))


def _height_param(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=parse_height_param(text))


def _manual_height(text: str) -> ParsedGeometry:
    return ParsedGeometry(manual=frozenset({"height"}))


def _mud_slab(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=parse_mud_slab_thickness(text))


TABLE = RuleTable(
    SECTION,
    [
        Rule("underground_piping", contains("underground piping"), ItemType.EXC_UNDERGROUND_PIPING, SOIL, _piping),
        Rule("strip_footing", matches(r"^sf\s*\("), ItemType.EXC_STRIP_FOOTING, SOIL, _width_only),
        Rule("wall_footing", matches(r"^wf-\d+"), ItemType.EXC_WALL_FOOTING, SOIL, _width_only),
        Rule("stair_footing", matches(r"^st-\d+"), ItemType.EXC_STAIR_FOOTING, SOIL, _width_only),
        Rule("heel_block", contains("heel block"), ItemType.EXC_HEEL_BLOCK, SOIL, _plan),
        Rule("pile_cap", matches(r"^pc-\d+"), ItemType.EXC_PILE_CAP, SOIL, _plan),
        Rule("footing", matches(r"^f-\d+\s*\("), ItemType.EXC_FOOTING, SOIL, _plan),
        Rule("excavation_area", matches(r"^exc\s*\("), ItemType.EXC_AREA, SOIL, _height_param),
        Rule("slope_excavation", contains("slope exc", "slope excavation"), ItemType.EXC_SLOPE, SOIL, _height_param),
        Rule(
            "excavation_and_backfill",
            contains("exc & backfill", "excavation & backfill"),
            ItemType.EXC_AND_BACKFILL,
            SOIL,
            _height_param,
        ),
        Rule(
            "sewage_pit_slab",
            contains("duplex sewage ejector pit slab"),
            ItemType.EXC_PIT_SLAB,
            SOIL,
            _manual_height,
            merge=True,
        ),
        Rule("backfill", matches(r"^backfill\s*\("), ItemType.BACKFILL_AREA, BACKFILL, _height_param),
        Rule("mud_slab", matches(_MUD_SLAB_PATTERN), ItemType.MUD_SLAB, MUD_SLAB, _mud_slab),
    ],
    excludes=[contains("rock excavation", "concrete pier", "line drill", "gravel")],
)

_BACKFILL_COMPANIONS: dict[ItemType, tuple[ItemType, GeometryParser]] = {
    ItemType.EXC_UNDERGROUND_PIPING: (ItemType.BACKFILL_PIPING, _piping_backfill),
    ItemType.EXC_SLOPE: (ItemType.BACKFILL_AREA, _height_param),
    ItemType.EXC_AND_BACKFILL: (ItemType.BACKFILL_AREA, _height_param),
}


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)


def backfill_companion(primary: Classification, description: str) -> Classification | None:
    """Backfill row repeated from a soil excavation row, or None."""
    companion = _BACKFILL_COMPANIONS.get(primary.item_type)
    if companion is None:
        return None
    item_type, parse = companion
    return Classification(
        section=SECTION,
        subsection=BACKFILL,
        item_type=item_type,
        geometry=parse(description),
        rule=f"{primary.rule}_backfill",
    )


def mud_slab_companion(primary: Classification, description: str) -> Classification | None:
    if primary.item_type is ItemType.MUD_SLAB:
        return None
    thickness = parse_mud_slab_thickness(description)
    if thickness is None:
        return None
    return Classification(
        section=SECTION,
        subsection=MUD_SLAB,
        item_type=ItemType.MUD_SLAB,
        geometry=ParsedGeometry(height=thickness),
        rule=f"{primary.rule}_mud_slab",
    )
