from __future__ import annotations

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import parse_bracket_dimensions, parse_height_param

from .base import Classification, Rule, RuleTable, contains, equals

"""Rock excavation rule table.

Line drilling is its own subsection. Piers, pit slabs and sump pits taken off in
the rock section also get a line-drilling reference row whose perimeter is
derived from the referenced row (see LINE_DRILL_REFERENCES).
"""

__all__ = [
    "SECTION",
    "ROCK",
    "LINE_DRILL",
    "SUBSECTION_ORDER",
    "TABLE",
    "LINE_DRILL_REFERENCES",
    "MANUAL_SUMP_PIT_COUNT",
    "classify",
]

SECTION = "rock_excavation"
ROCK = "Rock excavation"
LINE_DRILL = "Line drill"
SUBSECTION_ORDER = (ROCK, LINE_DRILL)

MANUAL_SUMP_PIT_COUNT = 2.0

LINE_DRILL_REFERENCES: dict[ItemType, ItemType] = {
    ItemType.ROCK_CONCRETE_PIER: ItemType.LINE_DRILL_PIER,
    ItemType.ROCK_PIT_SLAB: ItemType.LINE_DRILL_PIT,
    ItemType.ROCK_SUMP_PIT: ItemType.LINE_DRILL_SUMP,
}


def _height_param(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=parse_height_param(text))


def _pier(text: str) -> ParsedGeometry:
    # plan size from the bracket; the rock depth is entered by hand
    dims = parse_bracket_dimensions(text)
    if dims is None:
        return ParsedGeometry(manual=frozenset({"height"}))
    return ParsedGeometry(length=dims.first, width=dims.second, manual=frozenset({"height"}))


def _manual_height(text: str) -> ParsedGeometry:
    return ParsedGeometry(manual=frozenset({"height"}))


TABLE = RuleTable(
    SECTION,
    [
        Rule("line_drilling", contains("line drill"), ItemType.LINE_DRILLING, LINE_DRILL, _height_param),
        Rule("concrete_pier", contains("concrete pier"), ItemType.ROCK_CONCRETE_PIER, ROCK, _pier),
        Rule(
            "pit_slab",
            contains("duplex sewage ejector pit slab"),
            ItemType.ROCK_PIT_SLAB,
            ROCK,
            _manual_height,
            merge=True,
        ),
        Rule("rock_excavation", contains("rock excavation"), ItemType.ROCK_EXCAVATION, ROCK, _height_param),
        Rule("sump_pit", equals("sump pit"), ItemType.ROCK_SUMP_PIT, ROCK),
    ],
)


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)
