from __future__ import annotations

import math
from collections.abc import Callable, Iterable

from calcsheet.derivation.formulas import EXCAVATION_SWELL, LINE_DRILL_FACES
from calcsheet.models.calculation_row import CalculationRow
from calcsheet.models.item_type import ItemType

"""Section aggregate totals.

Plain numbers for consumers that display totals without evaluating the sheet.
They follow the same arithmetic as the derivation table but only use values
that were parsed; a height left for manual entry counts as zero here.
"""

__all__ = [
    "compute_aggregates",
]

CUBIC_FEET_PER_YARD = 27

RowMeasure = Callable[[CalculationRow], float]


def _v(value: float | None) -> float:
    return value if value is not None else 0.0


def _takeoff(row: CalculationRow) -> float:
    return _v(row.takeoff)


def _by_width(row: CalculationRow) -> float:
    return _takeoff(row) * _v(row.geometry.width)


def _by_plan(row: CalculationRow) -> float:
    return _takeoff(row) * _v(row.geometry.length) * _v(row.geometry.width)


def _sump(row: CalculationRow) -> float:
    return 16 * _takeoff(row)


_SOIL_AREA: dict[ItemType, RowMeasure] = {
    ItemType.EXC_UNDERGROUND_PIPING: _by_width,
    ItemType.EXC_STRIP_FOOTING: _by_width,
    ItemType.EXC_WALL_FOOTING: _by_width,
    ItemType.EXC_STAIR_FOOTING: _by_width,
    ItemType.EXC_HEEL_BLOCK: _by_plan,
    ItemType.EXC_PILE_CAP: _by_plan,
    ItemType.EXC_FOOTING: _by_plan,
    ItemType.EXC_AREA: _takeoff,
    ItemType.EXC_SLOPE: _takeoff,
    ItemType.EXC_AND_BACKFILL: _takeoff,
    ItemType.EXC_PIT_SLAB: _takeoff,
}

_BACKFILL_AREA: dict[ItemType, RowMeasure] = {
    ItemType.BACKFILL_PIPING: _by_width,
    ItemType.BACKFILL_AREA: _takeoff,
}

_ROCK_AREA: dict[ItemType, RowMeasure] = {
    ItemType.ROCK_CONCRETE_PIER: _by_plan,
    ItemType.ROCK_PIT_SLAB: _takeoff,
    ItemType.ROCK_EXCAVATION: _takeoff,
    ItemType.ROCK_SUMP_PIT: _sump,
}


def _volume(row: CalculationRow, area: float) -> float:
    if row.item_type is ItemType.ROCK_SUMP_PIT:
        return 1.3 * _takeoff(row)
    return area * _v(row.geometry.height) / CUBIC_FEET_PER_YARD


def _area_and_volume(rows: Iterable[CalculationRow], table: dict[ItemType, RowMeasure]) -> tuple[float, float]:
    area = volume = 0.0
    for row in rows:
        measure = table.get(row.item_type)
        if measure is None:
            continue
        a = measure(row)
        area += a
        volume += _volume(row, a)
    return area, volume


def _holes(height: float | None) -> int:
    return math.ceil(_v(height) / 2)


def _line_drill_length(row: CalculationRow, by_id: dict[int, CalculationRow]) -> float:
    if row.item_type is ItemType.LINE_DRILLING:
        return _holes(row.geometry.height) * _takeoff(row)
    ref = by_id.get(row.ref_id) if row.ref_id is not None else None
    if ref is None:
        return 0.0
    if row.item_type is ItemType.LINE_DRILL_PIER:
        perimeter = (_v(ref.geometry.width) + _v(ref.geometry.length)) * 2 * _takeoff(ref)
        return _holes(ref.geometry.height) * perimeter
    if row.item_type is ItemType.LINE_DRILL_PIT:
        perimeter = math.sqrt(max(_takeoff(ref), 0.0)) * 4
        return _holes(ref.geometry.height) * perimeter
    if row.item_type is ItemType.LINE_DRILL_SUMP:
        return _takeoff(ref) * 8
    return 0.0


def compute_aggregates(rows: list[CalculationRow]) -> dict[str, float]:
    data = [r for r in rows if r.is_data]
    by_id = {r.row_id: r for r in rows}

    soil_area, soil_volume = _area_and_volume(data, _SOIL_AREA)
    _, backfill_volume = _area_and_volume(data, _BACKFILL_AREA)
    rock_area, rock_volume = _area_and_volume(data, _ROCK_AREA)
    line_drill = sum(_line_drill_length(r, by_id) for r in data) * LINE_DRILL_FACES

    totals = {
        "soil_excavation_area": soil_area,
        "soil_excavation_volume": soil_volume,
        "soil_excavation_swelled_volume": soil_volume * EXCAVATION_SWELL,
        "backfill_volume": backfill_volume,
        "rock_excavation_area": rock_area,
        "rock_excavation_volume": rock_volume,
        "line_drilling_length": line_drill,
    }
    return {key: round(value, 2) for key, value in totals.items()}
