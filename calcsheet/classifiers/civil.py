from __future__ import annotations

import re

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import (
    clean_text,
    parse_bracket_dimensions,
    parse_named_param,
    parse_thickness,
    to_feet,
)

from .base import Classification, Rule, RuleTable, all_of, any_of, contains, not_, starts_with

"""Site / civil rule table.

Existing site items (remove / protect / relocate existing ...) form the demo
subsection and are split by how they are measured: area (asphalt), linear
(curbs, walls, fences, pipes, rails) and each (signs, manholes, hydrants,
poles, valves, inlets). Proposed pavements and transformer pads are also dug
out, so they get a civil excavation companion row whose depth is the
pavement build-up.
"""

__all__ = [
    "SECTION",
    "SUBSECTION_ORDER",
    "TABLE",
    "classify",
    "excavation_companion",
]

SECTION = "civil"

DEMO = "Demo"
FENCE = "Fence"
SOIL_EROSION = "Soil erosion"
PADS = "Pads"
ASPHALT = "Asphalt"
CONCRETE_PAVEMENT = "Concrete pavement"
GRAVEL = "Gravel"
BOLLARDS = "Bollards"
DRAINS_AND_UTILITIES = "Drains & Utilities"
EXCAVATION = "Excavation"

SUBSECTION_ORDER = (
    DEMO,
    FENCE,
    SOIL_EROSION,
    PADS,
    ASPHALT,
    CONCRETE_PAVEMENT,
    GRAVEL,
    BOLLARDS,
    DRAINS_AND_UTILITIES,
    EXCAVATION,
)

DRAIN_KEYWORDS = (
    "storm sewer piping",
    "fire service lateral",
    "water service lateral",
    "gas service lateral",
    "sanitary sewer service",
    "underground water main",
    "electrical conduit",
    "underslab drainage",
    "sanitary invert",
    "backwater valve",
    "area drain",
    "floor drain",
)

_HEIGHT_WORD_RE = re.compile(r"""height\s*=\s*(\d+'\s*-?\s*\d*(?:\.\d+)?"?)""", re.IGNORECASE)
_LAYER_RE = re.compile(r"""(\d+(?:\.\d+)?)\s*"\s*(?:thick\s+)?(surface|base)""", re.IGNORECASE)
_BOLLARD_RE = re.compile(
    r"""\((\d+(?:\.\d+)?)\s*"\s*[∅Ø],\s*H\s*=\s*([0-9'"\- ]+)\)""",
    re.IGNORECASE,
)


def _height_word(text: str) -> float | None:
    m = _HEIGHT_WORD_RE.search(clean_text(text))
    if m:
        return to_feet(m.group(1).strip())
    return parse_named_param(text, "H")


def _fence(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=_height_word(text))


def _slab_thickness(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=parse_thickness(text))


def _asphalt(text: str) -> ParsedGeometry:
    layers = {kind.lower(): float(value) for value, kind in _LAYER_RE.findall(clean_text(text))}
    if layers:
        return ParsedGeometry(height=sum(layers.values()) / 12)
    return _slab_thickness(text)


def _gravel(text: str) -> ParsedGeometry:
    height = parse_thickness(text)
    if height is None:
        height = parse_named_param(text, "H")
    return ParsedGeometry(height=height) if height is not None else ParsedGeometry(manual=frozenset({"height"}))


def _bollard(text: str) -> ParsedGeometry:
    # the footing group wins over the post itself: it is what gets poured
    matches = _BOLLARD_RE.findall(clean_text(text))
    if not matches:
        return ParsedGeometry()
    diameter, height = matches[-1]
    size = float(diameter) / 12
    return ParsedGeometry(length=size, width=size, height=to_feet(height.strip()))


def _demo_linear(text: str) -> ParsedGeometry:
    dims = parse_bracket_dimensions(text)
    if dims is not None and dims.second is not None:
        return ParsedGeometry(width=dims.first, height=dims.second)
    return ParsedGeometry(height=_height_word(text))


def _demo_area(text: str) -> ParsedGeometry:
    return ParsedGeometry(height=parse_thickness(text) or _asphalt(text).height)


def _is_existing(text: str) -> bool:
    t = text.strip().lower()
    if "(add/alt)" in t and "utility pole" in t:
        return False
    if any(k in t for k in ("remove existing", "protect existing", "relocate existing")):
        return True
    return t.startswith("remove ")


_demo_area_item = any_of(
    contains("asphalt pavement"),
    all_of(contains("remove"), contains("asphalt"), not_(contains("curb"))),
)
_demo_linear_item = any_of(
    contains("curb", "fence", "pipe", "hdpe", "rcp", "stormwater main", "rail"),
    all_of(contains("wall"), not_(contains("stormwater"))),
)


TABLE = RuleTable(
    SECTION,
    [
        Rule("demo_area", all_of(_is_existing, _demo_area_item), ItemType.CIVIL_DEMO_AREA, DEMO, _demo_area),
        Rule("demo_linear", all_of(_is_existing, _demo_linear_item), ItemType.CIVIL_DEMO_LINEAR, DEMO, _demo_linear),
        Rule(
            "demo_each",
            all_of(_is_existing, contains("sign", "manhole", "fire hydrant", "pole", "valve", "inlet")),
            ItemType.CIVIL_DEMO_EACH,
            DEMO,
        ),
        Rule(
            "fence",
            any_of(
                contains("construction fence", "proposed guiderail"),
                all_of(contains("proposed fence"), contains("height=")),
            ),
            ItemType.CIVIL_FENCE,
            FENCE,
            _fence,
        ),
        Rule(
            "stabilized_entrance",
            contains("stabilized construction entrance"),
            ItemType.CIVIL_STABILIZED_ENTRANCE,
            SOIL_EROSION,
            _gravel,
        ),
        Rule("silt_fence", contains("silt fence"), ItemType.CIVIL_SILT_FENCE, SOIL_EROSION, _fence),
        Rule(
            "inlet_filter",
            all_of(contains("inlet filter"), not_(contains("protection"))),
            ItemType.CIVIL_INLET_FILTER,
            SOIL_EROSION,
        ),
        Rule(
            "transformer_pad",
            contains("transformer concrete pad"),
            ItemType.CIVIL_TRANSFORMER_PAD,
            PADS,
            _slab_thickness,
        ),
        Rule(
            "asphalt",
            any_of(all_of(contains("full depth asphalt pavement"), contains("surface course")), starts_with("asphalt")),
            ItemType.CIVIL_ASPHALT,
            ASPHALT,
            _asphalt,
        ),
        Rule(
            "concrete_pavement",
            contains("reinforced concrete sidewalk", "concrete pavement"),
            ItemType.CIVIL_CONCRETE_PAVEMENT,
            CONCRETE_PAVEMENT,
            _slab_thickness,
        ),
        Rule("gravel", contains("gravel"), ItemType.CIVIL_GRAVEL, GRAVEL, _gravel),
        Rule("bollard", contains("bollard"), ItemType.CIVIL_BOLLARD, BOLLARDS, _bollard),
        Rule(
            "utility_connection",
            all_of(contains("connection to existing"), contains("gas", "sanitary", "water", "utility pole")),
            ItemType.CIVIL_UTILITY_CONNECTION,
            DRAINS_AND_UTILITIES,
        ),
        Rule("drain", contains(*DRAIN_KEYWORDS), ItemType.CIVIL_DRAIN, DRAINS_AND_UTILITIES),
    ],
)

_EXCAVATED = {
    ItemType.CIVIL_TRANSFORMER_PAD,
    ItemType.CIVIL_ASPHALT,
    ItemType.CIVIL_CONCRETE_PAVEMENT,
}


def classify(description: str) -> Classification | None:
    return TABLE.classify(description)


def excavation_companion(primary: Classification, description: str) -> Classification | None:
    """Excavation row for a proposed pad or pavement, or None."""
    if primary.item_type not in _EXCAVATED or "proposed" not in description.lower():
        return None
    height = primary.geometry.height
    return Classification(
        section=SECTION,
        subsection=EXCAVATION,
        item_type=ItemType.CIVIL_EXCAVATION,
        geometry=ParsedGeometry(height=height) if height is not None else ParsedGeometry(manual=frozenset({"height"})),
        rule=f"{primary.rule}_excavation",
    )
