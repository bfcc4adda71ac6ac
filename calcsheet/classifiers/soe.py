from __future__ import annotations

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import parse_embedded_quantity
from calcsheet.parsers.soe import (
    parse_member_weight,
    parse_sheet_pile_weight,
    parse_soe_height,
    parse_soldier_pile,
)

from .base import Classification, GeometryParser, Rule, RuleTable, all_of, contains, not_

"""Support of excavation (SOE) rule table.

Soldier piles are matched first and split into drilled / HP by their size
designation. The remaining predicates are plain keyword tests evaluated in the
order below, so "upper raker" is tested before the generic "raker".
"""

__all__ = [
    "SECTION",
    "SOLDIER_PILES",
    "TIMBER_LAGGING",
    "SUBSECTION_ORDER",
    "TABLE",
    "classify",
    "mentions_backpacking",
]

SECTION = "soe"
SOLDIER_PILES = "Soldier piles"
PRIMARY_SECANT = "Primary secant piles"
SECONDARY_SECANT = "Secondary secant piles"
TANGENT = "Tangent piles"
SHEET_PILES = "Sheet piles"
TIMBER_LAGGING = "Timber lagging"
TIMBER_SHEETING = "Timber sheeting"
WALERS = "Waler"
RAKERS = "Raker"
UPPER_RAKERS = "Upper Raker"
LOWER_RAKERS = "Lower Raker"
STAND_OFFS = "Stand off"
KICKERS = "Kicker"
CHANNELS = "Channel"
ROLL_CHOCKS = "Roll chock"
STUD_BEAMS = "Stud beam"
INNER_CORNER_BRACES = "Inner corner brace"
KNEE_BRACES = "Knee brace"

SUBSECTION_ORDER = (
    SOLDIER_PILES,
    PRIMARY_SECANT,
    SECONDARY_SECANT,
    TANGENT,
    SHEET_PILES,
    TIMBER_LAGGING,
    TIMBER_SHEETING,
    WALERS,
    RAKERS,
    UPPER_RAKERS,
    LOWER_RAKERS,
    STAND_OFFS,
    KICKERS,
    CHANNELS,
    ROLL_CHOCKS,
    STUD_BEAMS,
    INNER_CORNER_BRACES,
    KNEE_BRACES,
)


def _soldier_pile_type(text: str) -> ItemType:
    pile = parse_soldier_pile(text)
    if pile is not None and pile.kind == "hp":
        return ItemType.SOLDIER_PILE_HP
    return ItemType.SOLDIER_PILE_DRILLED


def _soldier_pile(text: str) -> ParsedGeometry:
    pile = parse_soldier_pile(text)
    if pile is None:
        return ParsedGeometry(height=parse_soe_height(text, round_to_five=True))
    return ParsedGeometry(
        height=pile.calculated_height,
        weight=pile.weight,
        group_key=pile.group_key,
    )


def _pile(text: str) -> ParsedGeometry:
    return ParsedGeometry(
        height=parse_soe_height(text, round_to_five=True),
        weight=parse_member_weight(text),
    )


def _sheet_pile(text: str) -> ParsedGeometry:
    return ParsedGeometry(
        height=parse_soe_height(text, round_to_five=True),
        weight=parse_sheet_pile_weight(text),
    )


def _timber(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=parse_soe_height(text, round_to_five=False))


def _member(text: str) -> ParsedGeometry:
    # bracing members: count goes to column E, typed in when not in the name
    quantity = parse_embedded_quantity(text)
    return ParsedGeometry(
        height=parse_soe_height(text, round_to_five=False),
        weight=parse_member_weight(text),
        quantity=float(quantity) if quantity is not None else None,
        manual=frozenset({"quantity"}),
    )


def _rule(name: str, needle: str, item_type: ItemType, subsection: str, parse: GeometryParser) -> Rule:
    return Rule(name, contains(needle), item_type, subsection, parse)


TABLE = RuleTable(
    SECTION,
    [
        Rule(
            "soldier_pile",
            all_of(contains("soldier pile"), not_(contains("secant", "tangent", "supporting angle"))),
            ItemType.SOLDIER_PILE_DRILLED,
            SOLDIER_PILES,
            _soldier_pile,
            refine=_soldier_pile_type,
        ),
        _rule("primary_secant", "primary secant pile", ItemType.PRIMARY_SECANT_PILE, PRIMARY_SECANT, _pile),
        _rule("secondary_secant", "secondary secant pile", ItemType.SECONDARY_SECANT_PILE, SECONDARY_SECANT, _pile),
        _rule("tangent_pile", "tangent pile", ItemType.TANGENT_PILE, TANGENT, _pile),
        _rule("sheet_pile", "sheet pile", ItemType.SHEET_PILE, SHEET_PILES, _sheet_pile),
        Rule(
            "timber_lagging",
            all_of(contains("timber lagging"), not_(contains("supporting angle"))),
            ItemType.TIMBER_LAGGING,
            TIMBER_LAGGING,
            _timber,
        ),
        _rule("timber_sheeting", "timber sheeting", ItemType.TIMBER_SHEETING, TIMBER_SHEETING, _timber),
        _rule("waler", "waler", ItemType.WALER, WALERS, _member),
        _rule("upper_raker", "upper raker", ItemType.UPPER_RAKER, UPPER_RAKERS, _member),
        _rule("lower_raker", "lower raker", ItemType.LOWER_RAKER, LOWER_RAKERS, _member),
        _rule("raker", "raker", ItemType.RAKER, RAKERS, _member),
        _rule("stand_off", "stand off", ItemType.STAND_OFF, STAND_OFFS, _member),
        _rule("kicker", "kicker", ItemType.KICKER, KICKERS, _member),
        Rule(
            "channel",
            all_of(contains("channel"), not_(contains("bollard"))),
            ItemType.CHANNEL,
            CHANNELS,
            _member,
        ),
        _rule("roll_chock", "roll chock", ItemType.ROLL_CHOCK, ROLL_CHOCKS, _member),
        _rule("stud_beam", "stud beam", ItemType.STUD_BEAM, STUD_BEAMS, _member),
        _rule("inner_corner_brace", "inner corner brace", ItemType.INNER_CORNER_BRACE, INNER_CORNER_BRACES, _member),
        _rule("knee_brace", "knee brace", ItemType.KNEE_BRACE, KNEE_BRACES, _member),
    ],
)


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)


def mentions_backpacking(description: str) -> bool:
    return "backpacking" in description.lower()
