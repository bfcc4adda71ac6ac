from __future__ import annotations

import re

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import (
    parse_bracket_dimensions,
    parse_height_param,
    parse_thickness,
    parse_width_height_words,
)
from calcsheet.parsers.foundation import parse_foundation_pile

from .base import Classification, Rule, RuleTable, all_of, any_of, contains, equals, matches, not_, starts_with

"""Foundation rule table.

Piles come first so that "pile cap" and the SOE pile families never reach the
generic pile predicates. Pit families (elevator, sewage ejector, grease trap,
...) share one rule each and are refined into sump / wall / slab rows by the
keyword that follows the family name.
"""

__all__ = [
    "SECTION",
    "SUBSECTION_ORDER",
    "TABLE",
    "classify",
]

SECTION = "foundation"

PILES = "Piles"
PILE_CAPS = "Pile caps"
STRIP_FOOTINGS = "Strip footings"
ISOLATED_FOOTINGS = "Isolated footings"
PILASTERS = "Pilasters"
GRADE_BEAMS = "Grade beams"
TIE_BEAMS = "Tie beams"
STRAP_BEAMS = "Strap beams"
THICKENED_SLABS = "Thickened slab"
BUTTRESSES = "Buttresses"
PIERS = "Piers"
CORBELS = "Corbels"
FOUNDATION_WALLS = "Foundation walls"
RETAINING_WALLS = "Retaining walls"
BARRIER_WALLS = "Barrier walls"
STEM_WALLS = "Stem walls"
ELEVATOR_PIT = "Elevator pit"
SERVICE_ELEVATOR_PIT = "Service elevator pit"
DETENTION_TANK = "Detention tank"
DUPLEX_SEWAGE_EJECTOR_PIT = "Duplex sewage ejector pit"
DEEP_SEWAGE_EJECTOR_PIT = "Deep sewage ejector pit"
SUMP_PUMP_PIT = "Sump pump pit"
GREASE_TRAP = "Grease trap"
HOUSE_TRAP = "House trap"
MAT_SLABS = "Mat slab"
MUD_SLABS = "Mud slab"
SOG = "SOG"
ROG = "Ramp on grade"
STAIRS_ON_GRADE = "Stairs on grade"
ELECTRIC_CONDUIT = "Electric conduit"

SUBSECTION_ORDER = (
    PILES,
    PILE_CAPS,
    STRIP_FOOTINGS,
    ISOLATED_FOOTINGS,
    PILASTERS,
    GRADE_BEAMS,
    TIE_BEAMS,
    STRAP_BEAMS,
    THICKENED_SLABS,
    BUTTRESSES,
    PIERS,
    CORBELS,
    FOUNDATION_WALLS,
    RETAINING_WALLS,
    BARRIER_WALLS,
    STEM_WALLS,
    ELEVATOR_PIT,
    SERVICE_ELEVATOR_PIT,
    DETENTION_TANK,
    DUPLEX_SEWAGE_EJECTOR_PIT,
    DEEP_SEWAGE_EJECTOR_PIT,
    SUMP_PUMP_PIT,
    GREASE_TRAP,
    HOUSE_TRAP,
    MAT_SLABS,
    MUD_SLABS,
    SOG,
    ROG,
    STAIRS_ON_GRADE,
    ELECTRIC_CONDUIT,
)

STAIR_TREAD = 11 / 12
STAIR_RISER = 7 / 12

_PIT_PART_RE = re.compile(r"\b(sump|wall|slope|haunch|slab|mat)\b", re.IGNORECASE)


# geometry parsers

def _pile(text: str) -> ParsedGeometry:
    pile = parse_foundation_pile(text)
    return ParsedGeometry(
        height=pile.height,
        weight=pile.weight,
        weight2=pile.weight2,
        group_key=pile.group_key,
        manual=frozenset({"quantity"}) if pile.is_dual else frozenset(),
    )


def _box(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    if dims is None or len(dims.values) < 3:
        return ParsedGeometry()
    return ParsedGeometry(length=dims.length, width=dims.width, height=dims.height)


def _section(text: str) -> ParsedGeometry:
    # (width x height) cross sections: footings, beams, walls
    dims = parse_bracket_dimensions(text)
    if dims is not None and len(dims.values) >= 2:
        return ParsedGeometry(width=dims.first, height=dims.second)
    words = parse_width_height_words(text)
    if words is not None:
        return ParsedGeometry(width=words[0], height=words[1])
    return ParsedGeometry(width=dims.first if dims else None)


def _slab(text: str) -> ParsedGeometry:
    height = parse_height_param(text)
    if height is None:
        height = parse_thickness(text, inches_from_name=True)
    return ParsedGeometry(height=height)


def _manual_height(text: str) -> ParsedGeometry:
    return ParsedGeometry(manual=frozenset({"height"}))


def _pit(text: str) -> ParsedGeometry:
    kind = _pit_type(text)
    if kind is ItemType.PIT_WALL:
        return _section(text)
    if kind is ItemType.PIT_SLAB:
        return _slab(text)
    return ParsedGeometry()


def _sog(text: str) -> ParsedGeometry:
    lowered = text.lower()
    if "geotextile" in lowered:
        return ParsedGeometry()
    if "gravel" in lowered:
        height = parse_height_param(text)
        return ParsedGeometry(height=height) if height is not None else _manual_height(text)
    return _slab(text)


def _stairs(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    width = dims.first if dims else None
    return ParsedGeometry(
        length=STAIR_TREAD,
        width=width,
        height=STAIR_RISER,
        manual=frozenset() if width is not None else frozenset({"width"}),
    )


# type refiners

def _pit_type(text: str) -> ItemType:
    lowered = text.lower()
    if "sump pit" in lowered:
        return ItemType.PIT_SUMP
    m = _PIT_PART_RE.search(lowered)
    part = m.group(1) if m else "slab"
    if part == "sump":
        return ItemType.PIT_SUMP
    if part in ("wall", "slope", "haunch"):
        return ItemType.PIT_WALL
    return ItemType.PIT_SLAB


def _footing_type(text: str) -> ItemType:
    return ItemType.STAIR_FOOTING if text.strip().lower().startswith("st-") else ItemType.STRIP_FOOTING


# predicates

_drilled_pile = any_of(
    all_of(contains("drilled"), contains("foundation pile", "cassion pile", "caisson pile")),
    matches(r"\b(drilled|structural|foundation|fndt)\s+piles?\b"),
)
_soe_piles = contains("soldier pile", "secant pile", "tangent pile", "sheet pile")


_service_elevator = any_of(
    contains("sump pit @ service elevator", "service elev. pit", "service elevator pit"),
    matches(r"service\s+(elev\.?|elevator)\s+(slab|mat|wall|slope|haunch|sump)"),
)
_elevator = all_of(
    not_(contains("service elev")),
    any_of(
        contains("elev. pit", "elevator pit", "sump pit @ elevator"),
        equals("sump pit"),
        matches(r"(elev\.?|elevator)\s+(slab|mat|wall|slope|haunch|sump)"),
    ),
)
_pit_families = contains(
    "elevator pit",
    "elev. pit",
    "duplex sewage ejector",
    "deep sewage ejector",
    "sump pump pit",
    "grease trap",
    "house trap",
)


TABLE = RuleTable(
    SECTION,
    [
        Rule("drilled_pile", all_of(_drilled_pile, not_(_soe_piles)), ItemType.DRILLED_FOUNDATION_PILE, PILES, _pile),
        Rule("helical_pile", all_of(contains("helical"), contains("pile")), ItemType.HELICAL_FOUNDATION_PILE, PILES, _pile),
        Rule(
            "driven_pile",
            all_of(contains("driven"), contains("pile"), not_(_soe_piles)),
            ItemType.DRIVEN_FOUNDATION_PILE,
            PILES,
            _pile,
        ),
        Rule("stelcor_pile", all_of(contains("stelcor"), contains("displacement pile")), ItemType.STELCOR_PILE, PILES, _pile),
        Rule("cfa_pile", contains("cfa pile"), ItemType.CFA_PILE, PILES, _pile),
        Rule("pile_cap", any_of(contains("pile cap"), starts_with("pc-")), ItemType.PILE_CAP, PILE_CAPS, _box),
        Rule(
            "strip_footing",
            any_of(contains("strip footing", "wall footing"), starts_with("sf", "st-", "wf-")),
            ItemType.STRIP_FOOTING,
            STRIP_FOOTINGS,
            _section,
            refine=_footing_type,
        ),
        Rule(
            "isolated_footing",
            all_of(any_of(starts_with("f-"), contains("footing")), not_(contains("foundation"))),
            ItemType.ISOLATED_FOOTING,
            ISOLATED_FOOTINGS,
            _box,
        ),
        Rule("pilaster", contains("pilaster"), ItemType.PILASTER, PILASTERS, _box),
        Rule("grade_beam", any_of(contains("grade beam"), starts_with("gb")), ItemType.GRADE_BEAM, GRADE_BEAMS, _section),
        Rule("tie_beam", any_of(contains("tie beam"), starts_with("tb")), ItemType.TIE_BEAM, TIE_BEAMS, _section),
        Rule(
            "strap_beam",
            all_of(any_of(starts_with("st "), matches(r"^st\s*\("), contains("strap beam")), not_(starts_with("st-"))),
            ItemType.STRAP_BEAM,
            STRAP_BEAMS,
            _section,
        ),
        Rule("thickened_slab", contains("thickened slab"), ItemType.THICKENED_SLAB, THICKENED_SLABS, _section),
        Rule("buttress", contains("buttress"), ItemType.BUTTRESS, BUTTRESSES, _box),
        Rule("pier", starts_with("pier", "concrete pier"), ItemType.PIER, PIERS, _box),
        Rule("corbel", contains("corbel"), ItemType.CORBEL, CORBELS, _section),
        Rule(
            "foundation_wall",
            all_of(
                any_of(contains("foundation wall", "fndt wall", "linear wall", "liner wall"), starts_with("fw")),
                not_(contains("retaining")),
            ),
            ItemType.FOUNDATION_WALL,
            FOUNDATION_WALLS,
            _section,
        ),
        Rule(
            "retaining_wall",
            any_of(contains("retaining wall"), starts_with("rw")),
            ItemType.RETAINING_WALL,
            RETAINING_WALLS,
            _section,
        ),
        Rule("barrier_wall", contains("barrier wall", "vehicle barrier"), ItemType.BARRIER_WALL, BARRIER_WALLS, _section),
        Rule("stem_wall", contains("stem wall"), ItemType.STEM_WALL, STEM_WALLS, _section),
        Rule("service_elevator_pit", _service_elevator, ItemType.PIT_SLAB, SERVICE_ELEVATOR_PIT, _pit, refine=_pit_type),
        Rule("elevator_pit", _elevator, ItemType.PIT_SLAB, ELEVATOR_PIT, _pit, refine=_pit_type),
        Rule("detention_tank", contains("detention tank"), ItemType.PIT_SLAB, DETENTION_TANK, _pit, refine=_pit_type),
        Rule(
            "duplex_sewage_ejector_pit",
            contains("duplex sewage ejector"),
            ItemType.PIT_SLAB,
            DUPLEX_SEWAGE_EJECTOR_PIT,
            _pit,
            refine=_pit_type,
        ),
        Rule(
            "deep_sewage_ejector_pit",
            matches(r"(?:deep\s+sewage\s+)?ejector\s+(slab|mat|wall|slope|haunch|sump|pit)"),
            ItemType.PIT_SLAB,
            DEEP_SEWAGE_EJECTOR_PIT,
            _pit,
            refine=_pit_type,
        ),
        Rule("sump_pump_pit", contains("sump pump"), ItemType.PIT_SLAB, SUMP_PUMP_PIT, _pit, refine=_pit_type),
        Rule("grease_trap", contains("grease trap"), ItemType.PIT_SLAB, GREASE_TRAP, _pit, refine=_pit_type),
        Rule("house_trap", contains("house trap"), ItemType.PIT_SLAB, HOUSE_TRAP, _pit, refine=_pit_type),
        Rule(
            "mat_slab",
            all_of(
                not_(_pit_families),
                contains("mat"),
                any_of(contains("haunch"), matches(r"mat(?:[-\s]+slab)?[-\s]*\d+")),
            ),
            ItemType.MAT_SLAB,
            MAT_SLABS,
            _slab,
        ),
        Rule("mud_slab", equals("mud slab", "mud mat"), ItemType.MUD_SLAB_FOUNDATION, MUD_SLABS, _manual_height),
        Rule(
            "sog",
            all_of(not_(contains("demo")), contains("sog", "gravel", "geotextile filter fabric", "slab on grade")),
            ItemType.SOG,
            SOG,
            _sog,
        ),
        Rule(
            "rog",
            all_of(not_(contains("demo")), any_of(matches(r"\brog\b"), contains("ramp on grade"))),
            ItemType.ROG,
            ROG,
            _slab,
        ),
        Rule(
            "stairs_on_grade",
            contains("stairs on grade", "landings on grade"),
            ItemType.STAIRS_ON_GRADE,
            STAIRS_ON_GRADE,
            _stairs,
        ),
        Rule(
            "electric_conduit",
            contains("underground electric conduit", "electric conduit in slab", "trench drain", "perforated pipe"),
            ItemType.ELECTRIC_CONDUIT,
            ELECTRIC_CONDUIT,
        ),
    ],
)


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)
