from __future__ import annotations

import pytest

from calcsheet.models.item_type import ItemType, RowKind
from calcsheet.services.assembler import FIRST_POSITION, generate_calculation_sheet
from calcsheet.services.context import SECTION_ORDER

MIXED = (
    (None, 'Demo SOG 4" thick', 100, "SF"),
    (None, "SF (2'-0\"x1'-0\")", 12, "FT"),
    (None, "Underground piping", 40, "FT"),
    (None, "Rock excavation (H=5'-0\")", 100, "SF"),
    (None, "Concrete pier (3'-0\"x3'-0\")", 4, "No."),
    (None, "Soldier pile HP12x63 H=30'-0\"", 10, "EA"),
    (None, "Timber lagging H=12'-6\" w/ backpacking", 80, "FT"),
    (None, None, None, None),
    (None, "Drilled foundation pile 9-5/8\"Ø x0.545 H=40'-0\"", 20, "EA"),
    (None, 'CIP slab 8"', 5000, "SF"),
    (None, "Remove existing concrete curb", 30, "FT"),
    (None, "Scaffolding allowance", 1, "LS"),
    (None, "Waler W12x40 (4 No.)", 200, "FT"),
)


@pytest.fixture()
def mixed(raw_input):
    return raw_input(*MIXED)


def test_used_and_unused_partition_non_blank_rows(mixed):
    result = generate_calculation_sheet(mixed)
    used = {r.raw_index for r in result.rows if r.kind is RowKind.DATA and r.raw_index is not None}
    unused = {u.row_index for u in result.unused_rows}
    non_blank = {i for i, row in enumerate(mixed.rows) if any(c is not None for c in row)}
    assert used.isdisjoint(unused)
    assert used | unused == non_blank
    assert unused == {11}
    assert result.stats == {"total": 13, "used": 11, "unused": 1, "blank": 1}


def test_each_row_lands_in_one_section(mixed):
    result = generate_calculation_sheet(mixed)
    sections_by_row: dict[int, set[str]] = {}
    for row in result.data_rows:
        sections_by_row.setdefault(row.raw_index, set()).add(row.section)
    assert all(len(s) == 1 for s in sections_by_row.values())
    assert sections_by_row[0] == {"demolition"}
    assert sections_by_row[8] == {"foundation"}
    assert sections_by_row[9] == {"superstructure"}
    assert sections_by_row[10] == {"civil"}


def test_sections_follow_pipeline_order(mixed):
    result = generate_calculation_sheet(mixed)
    order = [SECTION_ORDER.index(r.section) for r in result.rows]
    assert order == sorted(order)
    headers = [r.section for r in result.rows if r.kind is RowKind.SECTION_HEADER]
    assert headers == ["demolition", "excavation", "rock_excavation", "soe", "foundation", "superstructure", "civil"]


def test_positions_are_dense(mixed):
    result = generate_calculation_sheet(mixed)
    assert [r.position for r in result.rows] == list(range(FIRST_POSITION, FIRST_POSITION + len(result.rows)))


def test_subtotals_cover_the_data_rows_right_above(mixed):
    result = generate_calculation_sheet(mixed)
    by_position = {r.position: r for r in result.rows}
    sums = {d.row: d for d in result.formulas if d.is_sum}
    sum_rows = [r for r in result.rows if r.kind is RowKind.SUM]
    assert sum_rows
    for row in sum_rows:
        directive = sums[row.position]
        assert directive.last_data_row == row.position - 1
        covered = [by_position[p] for p in range(directive.first_data_row, directive.last_data_row + 1)]
        assert all(c.kind is RowKind.DATA for c in covered)
        assert {c.subsection for c in covered} == {row.subsection}


def test_reference_directives_point_at_existing_rows(mixed):
    result = generate_calculation_sheet(mixed)
    positions = {r.position for r in result.rows}
    refs = [d for d in result.formulas if d.ref_row is not None]
    assert refs
    assert all(d.ref_row in positions and d.ref_row < d.row for d in refs)


def test_generation_is_idempotent(mixed):
    first = generate_calculation_sheet(mixed).to_dict()
    second = generate_calculation_sheet(mixed).to_dict()
    assert first == second


def test_unit_normalized_to_each(mixed):
    result = generate_calculation_sheet(mixed)
    pier = next(r for r in result.rows if r.item_type is ItemType.ROCK_CONCRETE_PIER)
    assert pier.unit == "EA"


def test_reviewer_flags_survive_regeneration(mixed):
    first = generate_calculation_sheet(mixed).to_dict()
    persisted = first["unusedRawDataRows"]
    persisted[0]["isUsed"] = True
    second = generate_calculation_sheet(mixed, persisted_unused=persisted)
    assert [(u.row_index, u.is_used) for u in second.unused_rows] == [(11, True)]
    assert second.unused_rows[0].row_data == list(MIXED[11])


def test_engine_never_sets_flags_itself(mixed):
    persisted = [{"rowIndex": 11, "isUsed": False}, {"rowIndex": 0, "isUsed": True}]
    result = generate_calculation_sheet(mixed, persisted_unused=persisted)
    assert [(u.row_index, u.is_used) for u in result.unused_rows] == [(11, False)]


def test_strip_footing_sheet_json(raw_input):
    out = generate_calculation_sheet(raw_input((None, "SF (2'-0\"x1'-0\")", 12, "FT"))).to_dict()
    assert [(r["position"], r["kind"]) for r in out["rows"]] == [
        (2, "section_header"),
        (3, "subsection_header"),
        (4, "data"),
        (5, "sum"),
        (6, "data"),
    ]
    data = out["rows"][2]
    assert data["geometry"] == {"width": 2.0, "manual": ["height"]}
    assert data["itemType"] == "exc_strip_footing"
    assert data["rawRowIndex"] == 0
    subtotal = next(f for f in out["formulas"] if f["row"] == 5)
    assert subtotal["firstDataRow"] == 4
    assert subtotal["lastDataRow"] == 4
    assert subtotal["multipliers"] == {"L": 1.3}
    assert len(out["columns"]) == len(out["columnConfigs"]) == 14


def test_dimension_bracket_preferred_over_code_tag(raw_input):
    result = generate_calculation_sheet(raw_input((None, "Demo Pilaster (P3) (22\"x16\"x6'-0\")", 3, "EA")))
    geometry = result.data_rows[0].geometry
    assert geometry.length == pytest.approx(22 / 12)
    assert geometry.height == pytest.approx(6.0)
