from __future__ import annotations

import pytest

from calcsheet.models.item_type import ItemType, RowKind
from calcsheet.services.assembler import generate_calculation_sheet
from calcsheet.services.context import EngineSettings


def _kinds(result, section):
    return [r.kind for r in result.rows if r.section == section]


def _data(result, section):
    return [r for r in result.rows if r.section == section and r.kind is RowKind.DATA]


def test_excavation_strip_footing_layout(raw_input):
    result = generate_calculation_sheet(raw_input((None, "SF (2'-0\"x1'-0\")", 12, "FT")))
    assert [r.kind for r in result.rows] == [
        RowKind.SECTION_HEADER,
        RowKind.SUBSECTION_HEADER,
        RowKind.DATA,
        RowKind.SUM,
        RowKind.DATA,
    ]
    header, subsection, data, total, havg = result.rows
    assert header.particulars == "Excavation"
    assert header.labels == {"K": "CY", "L": "1.3*CY"}
    assert subsection.particulars == "Soil excavation"
    assert data.item_type is ItemType.EXC_STRIP_FOOTING
    assert data.takeoff == 12.0
    assert data.raw_index == 0
    assert (total.first_id, total.last_id) == (data.row_id, data.row_id)
    assert havg.particulars == "Havg"
    assert havg.item_type is ItemType.EXC_HAVG
    assert havg.ref_id == total.row_id


def test_identical_pit_slab_rows_merge(raw_input):
    result = generate_calculation_sheet(
        raw_input(
            (None, "Duplex sewage ejector pit slab", 10, "SF"),
            (None, "Duplex sewage ejector pit slab", 5, "SF"),
        )
    )
    data = _data(result, "excavation")
    pit = [r for r in data if r.item_type is ItemType.EXC_PIT_SLAB]
    assert len(pit) == 1
    assert pit[0].takeoff == 15.0
    assert result.stats["used"] == 2
    assert result.unused_rows == []


def test_companion_rows_share_source_row(raw_input):
    result = generate_calculation_sheet(raw_input((None, "Underground piping", 40, "FT")))
    data = _data(result, "excavation")
    types = [r.item_type for r in data]
    assert ItemType.EXC_UNDERGROUND_PIPING in types
    assert ItemType.BACKFILL_PIPING in types
    backfill = next(r for r in data if r.item_type is ItemType.BACKFILL_PIPING)
    assert backfill.raw_index == 0
    assert backfill.subsection == "Backfill"


def test_rock_section_adds_sump_pit_and_line_drill_references(raw_input):
    result = generate_calculation_sheet(
        raw_input(
            (None, "Rock excavation (H=5'-0\")", 100, "SF"),
            (None, "Concrete pier (3'-0\"x3'-0\")", 4, "EA"),
        )
    )
    rows = [r for r in result.rows if r.section == "rock_excavation"]
    assert [r.particulars for r in rows if r.kind is not RowKind.SUM] == [
        "Rock Excavation",
        "Rock excavation",
        "Rock excavation (H=5'-0\")",
        "Concrete pier (3'-0\"x3'-0\")",
        "Sump pit",
        "Havg",
        "Line drill",
        "Line drill - Concrete pier (3'-0\"x3'-0\")",
        "Line drill - Sump pit",
    ]
    sump = next(r for r in rows if r.particulars == "Sump pit")
    assert sump.takeoff == 2.0
    assert sump.unit == "EA"
    assert sump.raw_index is None
    pier = next(r for r in rows if r.item_type is ItemType.ROCK_CONCRETE_PIER)
    pier_drill = next(r for r in rows if r.item_type is ItemType.LINE_DRILL_PIER)
    assert pier_drill.ref_id == pier.row_id
    sump_drill = next(r for r in rows if r.item_type is ItemType.LINE_DRILL_SUMP)
    assert sump_drill.ref_id == sump.row_id
    assert sum(1 for r in rows if r.kind is RowKind.SUM) == 2


def test_taken_off_sump_pit_is_not_duplicated(raw_input):
    result = generate_calculation_sheet(
        raw_input(
            (None, "Rock excavation (H=5'-0\")", 100, "SF"),
            (None, "Sump pit", 1, "EA"),
        )
    )
    sumps = [r for r in result.rows if r.item_type is ItemType.ROCK_SUMP_PIT]
    assert len(sumps) == 1
    assert sumps[0].raw_index == 1


def test_soldier_piles_grouped_drilled_before_hp(raw_input):
    result = generate_calculation_sheet(
        raw_input(
            (None, "Soldier pile HP12x63 H=30'-0\"", 10, "EA"),
            (None, "Drilled soldier pile 9-5/8\"Ø x 0.545 H=22'-0\", RS=5'-0\"", 8, "EA"),
            (None, "Soldier pile HP12x63 H=30'-0\" (north)", 6, "EA"),
        )
    )
    rows = [r for r in result.rows if r.section == "soe" and r.kind in (RowKind.DATA, RowKind.SUM)]
    assert [(r.kind, r.raw_index) for r in rows] == [
        (RowKind.DATA, 1),
        (RowKind.SUM, None),
        (RowKind.DATA, 0),
        (RowKind.DATA, 2),
        (RowKind.SUM, None),
    ]


def test_backpacking_follows_lagging_subtotal(raw_input):
    result = generate_calculation_sheet(raw_input((None, "Timber lagging H=12'-6\" w/ backpacking", 80, "FT")))
    rows = [r for r in result.rows if r.section == "soe"]
    total = next(r for r in rows if r.kind is RowKind.SUM)
    backpacking = rows[-1]
    assert backpacking.item_type is ItemType.BACKPACKING
    assert backpacking.particulars == "Backpacking"
    assert backpacking.ref_id == total.row_id
    assert backpacking.unit == "SQ FT"


def test_no_backpacking_row_without_mention(raw_input):
    result = generate_calculation_sheet(raw_input((None, "Timber lagging H=12'-6\"", 80, "FT")))
    assert not any(r.item_type is ItemType.BACKPACKING for r in result.rows)


def test_demolition_single_row_groups_fold_into_one_subtotal(raw_input):
    result = generate_calculation_sheet(
        raw_input(
            (None, 'Demo SOG 4" thick', 100, "SF"),
            (None, 'Demo SOG 6" thick', 50, "SF"),
        )
    )
    assert _kinds(result, "demolition").count(RowKind.SUM) == 1


def test_demolition_multi_row_group_keeps_own_subtotal(raw_input):
    result = generate_calculation_sheet(
        raw_input(
            (None, 'Demo SOG 4" thick', 100, "SF"),
            (None, 'Demo SOG 4" thick (area B)', 20, "SF"),
            (None, 'Demo SOG 6" thick', 50, "SF"),
        )
    )
    assert _kinds(result, "demolition").count(RowKind.SUM) == 2


def test_estimate_column_routes_rows(raw_input):
    result = generate_calculation_sheet(
        raw_input(
            ("Foundation", "SF (2'-0\"x1'-0\")", 12, "FT"),
            ("Waterproofing", "FW (1'-0\"x10'-0\")", 60, "FT"),
        )
    )
    assert [r.item_type for r in result.data_rows] == [ItemType.STRIP_FOOTING, ItemType.WP_EXTERIOR_WALL]
    assert not any(r.section == "excavation" for r in result.rows)


def test_unknown_estimate_label_is_left_unused(raw_input):
    result = generate_calculation_sheet(raw_input(("Misc", "SF (2'-0\"x1'-0\")", 12, "FT")))
    assert result.rows == []
    assert [u.row_index for u in result.unused_rows] == [0]


def test_disabled_section_leaves_rows_for_later_sections(raw_input):
    settings = EngineSettings(disabled_sections=frozenset({"excavation"}))
    result = generate_calculation_sheet(raw_input((None, "SF (2'-0\"x1'-0\")", 12, "FT")), settings)
    assert not any(r.section == "excavation" for r in result.rows)
    # foundation picks up the strip footing instead
    assert result.data_rows[0].item_type is ItemType.STRIP_FOOTING


def test_unknown_section_key_rejected():
    with pytest.raises(ValueError):
        EngineSettings(disabled_sections=frozenset({"plumbing"}))


def test_missing_required_columns_leave_everything_unused(raw_input):
    raw = raw_input(
        (None, "SF (2'-0\"x1'-0\")", 12, "FT"),
        headers=["Estimate", "Digitizer Item", "Amount", "Units"],
    )
    result = generate_calculation_sheet(raw)
    assert result.rows == []
    assert result.formulas == []
    assert [u.row_index for u in result.unused_rows] == [0]


def test_thk_label_normalized_in_particulars(raw_input):
    result = generate_calculation_sheet(raw_input((None, 'Demo SOG 4" thk', 100, "SF")))
    assert result.data_rows[0].particulars == 'Demo SOG 4" thick'
