from __future__ import annotations

import pytest

from calcsheet.classifiers import (
    civil,
    demolition,
    excavation,
    foundation,
    rock_excavation,
    soe,
    superstructure,
    waterproofing,
)
from calcsheet.classifiers.base import Rule, RuleTable, contains, starts_with
from calcsheet.models.item_type import ItemType


def test_rule_table_first_match_wins():
    table = RuleTable(
        "test",
        [
            Rule("upper", contains("upper raker"), ItemType.UPPER_RAKER, "Upper"),
            Rule("generic", contains("raker"), ItemType.RAKER, "Raker"),
        ],
    )
    assert table.classify("Upper raker W12x40").item_type is ItemType.UPPER_RAKER
    assert table.classify("Raker W12x40").item_type is ItemType.RAKER
    assert table.subsections == ["Upper", "Raker"]


def test_rule_table_rejects_duplicate_names():
    with pytest.raises(ValueError):
        RuleTable("test", [Rule("a", contains("x"), ItemType.RAKER, "R"), Rule("a", contains("y"), ItemType.RAKER, "R")])


def test_rule_table_gate_and_blank_text():
    table = RuleTable("test", [Rule("any", contains(""), ItemType.DEMO_SLAB, "S")], accepts=starts_with("demo "))
    assert table.classify("") is None
    assert table.classify("   ") is None
    assert table.classify("SOG 4\" thick") is None
    assert table.classify("Demo SOG") is not None


# demolition


def test_demolition_requires_demo_prefix():
    assert demolition.classify("Demolition of SOG") is None
    assert demolition.classify("SOG 4\" thick") is None


def test_demo_slab_thickness_and_default():
    result = demolition.classify('Demo SOG 6" thick')
    assert result.item_type is ItemType.DEMO_SLAB
    assert result.geometry.height == pytest.approx(0.5)
    assert result.geometry.group_key == "THICK_6"
    default = demolition.classify("Demo slab on grade")
    assert default.geometry.height == pytest.approx(demolition.DEFAULT_SLAB_THICKNESS)


def test_demo_pilaster_uses_dimension_bracket():
    result = demolition.classify("Demo Pilaster (P3) (22\"x16\"x6'-0\")")
    assert result.item_type is ItemType.DEMO_PILASTER
    assert result.geometry.length == pytest.approx(22 / 12)
    assert result.geometry.width == pytest.approx(16 / 12)
    assert result.geometry.height == pytest.approx(6.0)


def test_demo_strip_footing_width_height():
    result = demolition.classify("Demo SF (2'-0\"x1'-0\")")
    assert result.item_type is ItemType.DEMO_STRIP_FOOTING
    assert (result.geometry.width, result.geometry.height) == (2.0, 1.0)


# excavation


def test_excavation_strip_footing_leaves_depth_manual():
    result = excavation.classify("SF (2'-0\"x1'-0\")")
    assert result.item_type is ItemType.EXC_STRIP_FOOTING
    assert result.subsection == excavation.SOIL
    assert result.geometry.width == pytest.approx(2.0)
    assert result.geometry.height is None
    assert result.geometry.is_available("height")


def test_excavation_area_height_param():
    result = excavation.classify("Exc (H=10'-0\")")
    assert result.item_type is ItemType.EXC_AREA
    assert result.geometry.height == pytest.approx(10.0)


def test_excavation_footing_plan_dimensions():
    result = excavation.classify("F-1 (5'-0\"x4'-0\"x2'-0\") w/ 4\" mud slab")
    assert result.item_type is ItemType.EXC_FOOTING
    assert (result.geometry.length, result.geometry.width) == (5.0, 4.0)


@pytest.mark.parametrize(
    "text",
    ["Rock excavation (H=5'-0\")", "Concrete pier (3'-0\"x3'-0\")", "Line drilling", "Gravel 6\" thick"],
)
def test_excavation_excludes_other_sections(text):
    assert excavation.classify(text) is None


def test_piping_backfill_companion():
    primary = excavation.classify("Underground piping")
    assert primary.item_type is ItemType.EXC_UNDERGROUND_PIPING
    assert (primary.geometry.width, primary.geometry.height) == (3.0, 2.5)
    companion = excavation.backfill_companion(primary, "Underground piping")
    assert companion.item_type is ItemType.BACKFILL_PIPING
    assert companion.subsection == excavation.BACKFILL
    assert (companion.geometry.width, companion.geometry.height) == (3.0, 2.0)


def test_mud_slab_companion():
    text = "F-1 (5'-0\"x4'-0\"x2'-0\") w/ 4\" mud slab"
    companion = excavation.mud_slab_companion(excavation.classify(text), text)
    assert companion.item_type is ItemType.MUD_SLAB
    assert companion.geometry.height == pytest.approx(4 / 12)
    assert excavation.mud_slab_companion(excavation.classify("SF (2'-0\"x1'-0\")"), "SF (2'-0\"x1'-0\")") is None


def test_sewage_pit_slab_merges():
    result = excavation.classify("Duplex sewage ejector pit slab")
    assert result.item_type is ItemType.EXC_PIT_SLAB
    assert result.merge is True


# rock excavation


def test_rock_rules():
    assert rock_excavation.classify("Line drilling (H=10'-0\")").item_type is ItemType.LINE_DRILLING
    pier = rock_excavation.classify("Concrete pier (3'-0\"x3'-0\")")
    assert pier.item_type is ItemType.ROCK_CONCRETE_PIER
    assert (pier.geometry.length, pier.geometry.width) == (3.0, 3.0)
    rock = rock_excavation.classify("Rock excavation (H=5'-0\")")
    assert rock.item_type is ItemType.ROCK_EXCAVATION
    assert rock.geometry.height == pytest.approx(5.0)
    assert rock_excavation.classify("Sump pit").item_type is ItemType.ROCK_SUMP_PIT
    assert rock_excavation.classify("Sump pit @ elevator") is None


# SOE


def test_soldier_pile_refined_by_designation():
    drilled = soe.classify("Drilled soldier pile 9-5/8\"Ø x 0.545 H=22'-0\", RS=5'-0\"")
    assert drilled.item_type is ItemType.SOLDIER_PILE_DRILLED
    assert drilled.geometry.height == 30.0
    hp = soe.classify("Soldier pile HP12x63 H=30'-0\"")
    assert hp.item_type is ItemType.SOLDIER_PILE_HP
    assert hp.geometry.weight == 63.0
    assert hp.geometry.group_key == "HP-30"


def test_secant_pile_is_not_soldier_pile():
    result = soe.classify("Secondary secant pile soldier pile W14x90 H=30'-0\"")
    assert result.item_type is ItemType.SECONDARY_SECANT_PILE


def test_timber_lagging_keeps_raw_height():
    result = soe.classify("Timber lagging H=12'-6\" w/ backpacking")
    assert result.item_type is ItemType.TIMBER_LAGGING
    assert result.geometry.height == pytest.approx(12.5)
    assert soe.mentions_backpacking("Timber lagging H=12'-6\" w/ backpacking")


def test_bracing_member_quantity():
    result = soe.classify("Waler W12x40 (4 No.)")
    assert result.item_type is ItemType.WALER
    assert result.geometry.weight == 40.0
    assert result.geometry.quantity == 4.0
    upper = soe.classify("Upper raker W12x40")
    assert upper.item_type is ItemType.UPPER_RAKER
    assert upper.geometry.quantity is None
    assert upper.geometry.is_available("quantity")


# foundation


def test_foundation_piles():
    single = foundation.classify("Drilled foundation pile 9-5/8\"Ø x0.545 H=40'-0\"")
    assert single.item_type is ItemType.DRILLED_FOUNDATION_PILE
    assert single.geometry.weight2 is None
    dual = foundation.classify("Drilled foundation pile 9-5/8\"Ø x0.545 & 16\"Ø isolation casing H=40'-0\"")
    assert dual.geometry.weight2 is not None
    assert "quantity" in dual.geometry.manual


def test_foundation_strip_footing_section():
    result = foundation.classify("SF (2'-0\"x1'-0\")")
    assert result.item_type is ItemType.STRIP_FOOTING
    assert (result.geometry.width, result.geometry.height) == (2.0, 1.0)


def test_foundation_sog_thickness():
    result = foundation.classify('SOG 6" thick')
    assert result.item_type is ItemType.SOG
    assert result.geometry.height == pytest.approx(0.5)
    assert foundation.classify('Demo SOG 6" thick') is None


# waterproofing


def test_exterior_wall_adds_lap():
    result = waterproofing.classify("FW (1'-0\"x10'-0\")")
    assert result.item_type is ItemType.WP_EXTERIOR_WALL
    assert result.geometry.height == pytest.approx(10.0 + waterproofing.EXTERIOR_LAP)


def test_pit_wall_gets_negative_side_companion():
    text = "Elevator pit wall (1'-0\"x8'-0\")"
    primary = waterproofing.classify(text)
    assert primary.item_type is ItemType.WP_EXTERIOR_PIT_WALL
    assert primary.geometry.height == pytest.approx(10.0)
    companion = waterproofing.negative_wall_companion(primary, text)
    assert companion.item_type is ItemType.WP_NEGATIVE_WALL
    assert companion.subsection == waterproofing.NEGATIVE_SIDE
    assert companion.geometry.height == pytest.approx(8.0)


def test_pit_slab_is_negative_slab():
    assert waterproofing.classify("Elevator pit slab").item_type is ItemType.WP_NEGATIVE_SLAB


# superstructure


def test_cip_slab_fixed_height_expression():
    result = superstructure.classify('CIP slab 8"')
    assert result.item_type is ItemType.CIP_SLAB
    assert result.geometry.height_formula == "8/12"


def test_slab_on_metal_deck_height_and_group():
    result = superstructure.classify('SOMD 4 1/2" LW concrete over 2" MD')
    assert result.item_type is ItemType.SLAB_ON_METAL_DECK
    assert result.geometry.height == pytest.approx(4.5 / 12)
    assert result.geometry.group_key == "SOMD_4.5_2"


def test_shear_wall_requires_dimensions():
    assert superstructure.classify("Shear wall") is None
    result = superstructure.classify("Shear wall (1'-0\"x10'-0\")")
    assert result.item_type is ItemType.SHEAR_WALL
    assert (result.geometry.width, result.geometry.height) == (1.0, 10.0)


# civil


def test_civil_demo_requires_existing_item():
    assert civil.classify("Remove existing concrete curb").item_type is ItemType.CIVIL_DEMO_LINEAR
    assert civil.classify("Remove existing asphalt pavement").item_type is ItemType.CIVIL_DEMO_AREA
    assert civil.classify("Proposed curb") is None


def test_asphalt_layers_and_excavation_companion():
    text = 'Asphalt pavement 2" surface, 4" base (proposed)'
    primary = civil.classify(text)
    assert primary.item_type is ItemType.CIVIL_ASPHALT
    assert primary.geometry.height == pytest.approx(0.5)
    companion = civil.excavation_companion(primary, text)
    assert companion.item_type is ItemType.CIVIL_EXCAVATION
    assert companion.geometry.height == pytest.approx(0.5)
    existing = 'Asphalt pavement 2" surface, 4" base'
    assert civil.excavation_companion(civil.classify(existing), existing) is None


def test_bollard_uses_footing_group():
    result = civil.classify('Bollard (6"Ø, H=4\'-0") footing (24"Ø, H=4\'-0")')
    assert result.item_type is ItemType.CIVIL_BOLLARD
    assert result.geometry.width == pytest.approx(2.0)
    assert result.geometry.height == pytest.approx(4.0)
