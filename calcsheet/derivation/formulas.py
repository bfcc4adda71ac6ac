from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from calcsheet.models.geometry import GEOMETRY_COLUMNS, ParsedGeometry
from calcsheet.models.item_type import ItemType

"""Derived-column table.

FORMULAS maps every ItemType to the formula bodies written into its data rows
and the columns summed on its subtotal row. Templates use `{r}` for the row
itself, `{ref}` for a referenced row and `{weight}` / `{weight2}` for the
steel weights parsed from the description.

A template is dropped when
- it reads a geometry column whose value is neither parsed nor left for manual
  entry,
- it reads a derived column of the same row that was itself dropped, or
- it needs a weight or a reference row that is not there.

Several templates may target one column; the first one that survives wins
(dual-section piles before single-section ones).

Columns: C takeoff, E qty, F length, G width, H height, I FT, J SQ FT, K LBS,
L CY, M QTY.
"""

__all__ = [
    "Cell",
    "SumColumn",
    "FormulaSpec",
    "FORMULAS",
    "derive_formulas",
    "derive_sum",
    "summed_columns",
]

logger = logging.getLogger(__name__)

EXCAVATION_SWELL = 1.3
CIVIL_EXCAVATION_SWELL = 1.25
LINE_DRILL_FACES = 2

_COLUMN_REF_RE = re.compile(r"([A-N])\{r\}")
_FIELD_BY_COLUMN = {column: name for name, column in GEOMETRY_COLUMNS.items()}


@dataclass(frozen=True)
class Cell:
    column: str
    template: str
    requires: tuple[str, ...] = ()  # geometry fields needed beyond the ones read


@dataclass(frozen=True)
class SumColumn:
    column: str
    source: str | None = None  # summed column when the subtotal lands elsewhere
    multiplier: float | None = None


@dataclass(frozen=True)
class FormulaSpec:
    cells: tuple[Cell, ...] = ()
    sums: tuple[SumColumn, ...] = ()

    @property
    def derived_columns(self) -> frozenset[str]:
        return frozenset(c.column for c in self.cells)


def _spec(*cells: str | Cell, sums: str = "", extra: tuple[SumColumn, ...] = ()) -> FormulaSpec:
    """Build a spec from "J=C{r}*G{r}" strings and a space separated sum list."""
    parsed: list[Cell] = []
    for cell in cells:
        if isinstance(cell, Cell):
            parsed.append(cell)
            continue
        column, _, template = cell.partition("=")
        parsed.append(Cell(column.strip(), template.strip()))
    summed = tuple(SumColumn(c) for c in sums.split()) + extra
    return FormulaSpec(tuple(parsed), summed)


VOLUME = "L=J{r}*H{r}/27"


# shared families
AREA_VOLUME = _spec("J=C{r}", VOLUME, sums="J L")
LINEAR_AREA_VOLUME = _spec("I=C{r}", "J=I{r}*H{r}", "L=J{r}*G{r}/27", sums="I J L")
LINEAR_AREA = _spec("I=C{r}", "J=I{r}*H{r}", sums="I J")
BOX_VOLUME_COUNT = _spec("J=C{r}*F{r}*G{r}", VOLUME, "M=C{r}", sums="J L M")
COUNT = _spec("M=C{r}", sums="M")
LENGTH = _spec("I=C{r}", sums="I")
AREA = _spec("J=C{r}", sums="J")

SOIL_SUMS = (SumColumn("J"), SumColumn("K"), SumColumn("L", source="K", multiplier=EXCAVATION_SWELL))
SOIL_WIDTH = _spec("J=C{r}*G{r}", "K=J{r}*H{r}/27", extra=SOIL_SUMS)
SOIL_PLAN = _spec("J=F{r}*G{r}*C{r}", "K=J{r}*H{r}/27", extra=SOIL_SUMS)
SOIL_AREA = _spec("J=C{r}", "K=J{r}*H{r}/27", extra=SOIL_SUMS)

LINE_DRILL_SUMS = (SumColumn("I", multiplier=LINE_DRILL_FACES),)
LINE_DRILL_HOLES = ("E=ROUNDUP(H{r}/2,0)", "I=E{r}*C{r}")

PILE = _spec(
    "I=H{r}*C{r}",
    "J=E{r}*C{r}",
    "K=(I{r}*{weight})+(J{r}*{weight2})",
    "K=I{r}*{weight}",
    "M=C{r}",
    sums="I J K M",
)
WEIGHTED_PILE = _spec("I=H{r}*C{r}", "K=I{r}*{weight}", "M=C{r}", sums="I K M")
MEMBER = _spec("I=C{r}", "K=I{r}*{weight}", "M=E{r}", sums="I K M")
HEIGHT_MEMBER = _spec("I=C{r}*H{r}", "K=I{r}*{weight}", "M=C{r}", sums="I K M")
CAP = _spec("J=C{r}*H{r}*G{r}", "L=J{r}*F{r}/27", "M=C{r}", sums="J L M")
SUMP = _spec("J=16*C{r}", "L=C{r}*1.3", "M=C{r}", sums="J L M")


FORMULAS: dict[ItemType, FormulaSpec] = {
    # Demolition
    ItemType.DEMO_SLAB: AREA_VOLUME,
    ItemType.DEMO_RAMP: AREA_VOLUME,
    ItemType.DEMO_STAIR: AREA_VOLUME,
    ItemType.DEMO_STRIP_FOOTING: _spec("J=C{r}*G{r}", VOLUME, sums="J L"),
    ItemType.DEMO_FOUNDATION_WALL: _spec("J=C{r}*G{r}", VOLUME, sums="J L"),
    ItemType.DEMO_RETAINING_WALL: _spec("J=C{r}*G{r}", VOLUME, sums="J L"),
    ItemType.DEMO_ISOLATED_FOOTING: _spec("J=F{r}*G{r}*C{r}", VOLUME, "M=C{r}", sums="J L M"),
    ItemType.DEMO_PILASTER: _spec("J=F{r}*G{r}*C{r}", VOLUME, "M=C{r}", sums="J L M"),
    # Excavation
    ItemType.EXC_UNDERGROUND_PIPING: SOIL_WIDTH,
    ItemType.EXC_STRIP_FOOTING: SOIL_WIDTH,
    ItemType.EXC_WALL_FOOTING: SOIL_WIDTH,
    ItemType.EXC_STAIR_FOOTING: SOIL_WIDTH,
    ItemType.EXC_HEEL_BLOCK: SOIL_PLAN,
    ItemType.EXC_PILE_CAP: SOIL_PLAN,
    ItemType.EXC_FOOTING: SOIL_PLAN,
    ItemType.EXC_AREA: SOIL_AREA,
    ItemType.EXC_SLOPE: SOIL_AREA,
    ItemType.EXC_AND_BACKFILL: SOIL_AREA,
    ItemType.EXC_PIT_SLAB: SOIL_AREA,
    ItemType.EXC_HAVG: _spec("C=(K{ref}*27)/J{ref}"),
    ItemType.BACKFILL_PIPING: _spec("J=C{r}*G{r}", VOLUME, sums="J L"),
    ItemType.BACKFILL_AREA: AREA_VOLUME,
    ItemType.MUD_SLAB: _spec("J=C{r}*1.2", VOLUME, sums="J L"),
    # Rock excavation
    ItemType.ROCK_CONCRETE_PIER: _spec("J=C{r}*F{r}*G{r}", VOLUME, sums="J L"),
    ItemType.ROCK_PIT_SLAB: AREA_VOLUME,
    ItemType.ROCK_EXCAVATION: AREA_VOLUME,
    ItemType.ROCK_SUMP_PIT: _spec("J=16*C{r}", "L=1.3*C{r}", sums="J L"),
    ItemType.ROCK_HAVG: _spec("C=(L{ref}*27)/J{ref}"),
    ItemType.LINE_DRILLING: _spec(*LINE_DRILL_HOLES, extra=LINE_DRILL_SUMS),
    ItemType.LINE_DRILL_PIER: _spec(
        "B=B{ref}",
        "C=((G{ref}+F{ref})*2)*C{ref}",
        "H=H{ref}",
        *LINE_DRILL_HOLES,
        extra=LINE_DRILL_SUMS,
    ),
    ItemType.LINE_DRILL_PIT: _spec("B=B{ref}", "C=SQRT(C{ref})*4", "H=H{ref}", *LINE_DRILL_HOLES, extra=LINE_DRILL_SUMS),
    ItemType.LINE_DRILL_SUMP: _spec("B=B{ref}", "C=C{ref}*8", "I=C{r}", extra=LINE_DRILL_SUMS),
    # SOE
    ItemType.SOLDIER_PILE_DRILLED: WEIGHTED_PILE,
    ItemType.SOLDIER_PILE_HP: WEIGHTED_PILE,
    ItemType.PRIMARY_SECANT_PILE: _spec("I=H{r}*C{r}", "M=C{r}", sums="I M"),
    ItemType.SECONDARY_SECANT_PILE: WEIGHTED_PILE,
    ItemType.TANGENT_PILE: _spec("I=H{r}*C{r}", "M=C{r}", sums="I M"),
    ItemType.SHEET_PILE: _spec("I=C{r}", "J=I{r}*H{r}", "K=J{r}*{weight}", sums="I J K"),
    ItemType.TIMBER_LAGGING: LINEAR_AREA,
    ItemType.TIMBER_SHEETING: LINEAR_AREA,
    ItemType.BACKPACKING: _spec("C=J{ref}", "J=C{r}", sums="J"),
    ItemType.WALER: MEMBER,
    ItemType.RAKER: _spec("I=C{r}*1.15", "K=I{r}*{weight}", "M=E{r}", sums="I K M"),
    ItemType.UPPER_RAKER: _spec("I=C{r}*1.15", "K=I{r}*{weight}", "M=E{r}", sums="I K M"),
    ItemType.LOWER_RAKER: _spec("I=C{r}*1.15", "K=I{r}*{weight}", "M=E{r}", sums="I K M"),
    ItemType.STAND_OFF: MEMBER,
    ItemType.KICKER: MEMBER,
    ItemType.CHANNEL: HEIGHT_MEMBER,
    ItemType.ROLL_CHOCK: HEIGHT_MEMBER,
    ItemType.STUD_BEAM: HEIGHT_MEMBER,
    ItemType.INNER_CORNER_BRACE: MEMBER,
    ItemType.KNEE_BRACE: HEIGHT_MEMBER,
    # Foundation
    ItemType.DRILLED_FOUNDATION_PILE: PILE,
    ItemType.HELICAL_FOUNDATION_PILE: PILE,
    ItemType.DRIVEN_FOUNDATION_PILE: PILE,
    ItemType.STELCOR_PILE: PILE,
    ItemType.CFA_PILE: _spec("I=H{r}*C{r}", "M=C{r}", sums="I M"),
    ItemType.PILE_CAP: CAP,
    ItemType.STRIP_FOOTING: _spec("I=C{r}", "J=G{r}*I{r}", VOLUME, sums="I J L"),
    ItemType.STAIR_FOOTING: _spec("I=C{r}", "J=H{r}*I{r}", "L=J{r}*G{r}/27", sums="I J L"),
    ItemType.ISOLATED_FOOTING: BOX_VOLUME_COUNT,
    ItemType.PILASTER: CAP,
    ItemType.PIER: BOX_VOLUME_COUNT,
    ItemType.GRADE_BEAM: LINEAR_AREA_VOLUME,
    ItemType.TIE_BEAM: LINEAR_AREA_VOLUME,
    ItemType.STRAP_BEAM: LINEAR_AREA_VOLUME,
    ItemType.THICKENED_SLAB: LINEAR_AREA_VOLUME,
    ItemType.BUTTRESS: CAP,
    ItemType.CORBEL: LINEAR_AREA_VOLUME,
    ItemType.FOUNDATION_WALL: LINEAR_AREA_VOLUME,
    ItemType.RETAINING_WALL: LINEAR_AREA_VOLUME,
    ItemType.BARRIER_WALL: LINEAR_AREA_VOLUME,
    ItemType.STEM_WALL: LINEAR_AREA_VOLUME,
    ItemType.PIT_SUMP: SUMP,
    ItemType.PIT_SLAB: AREA_VOLUME,
    ItemType.PIT_WALL: LINEAR_AREA_VOLUME,
    ItemType.MAT_SLAB: AREA_VOLUME,
    ItemType.MUD_SLAB_FOUNDATION: AREA_VOLUME,
    ItemType.SOG: AREA_VOLUME,
    ItemType.ROG: AREA_VOLUME,
    ItemType.STAIRS_ON_GRADE: _spec("J=C{r}*G{r}*F{r}", VOLUME, "M=C{r}", sums="J L M"),
    ItemType.ELECTRIC_CONDUIT: LENGTH,
    # Waterproofing
    ItemType.WP_EXTERIOR_WALL: LINEAR_AREA,
    ItemType.WP_EXTERIOR_PIT_WALL: LINEAR_AREA,
    ItemType.WP_NEGATIVE_WALL: LINEAR_AREA,
    ItemType.WP_NEGATIVE_SLAB: AREA,
    ItemType.WP_HORIZONTAL: AREA,
    ItemType.WP_INSULATION: AREA,
    # Superstructure
    ItemType.CIP_SLAB: AREA_VOLUME,
    ItemType.SLAB_STEP: LINEAR_AREA_VOLUME,
    ItemType.LW_CONCRETE_FILL: AREA_VOLUME,
    ItemType.SLAB_ON_METAL_DECK: AREA_VOLUME,
    ItemType.TOPPING_SLAB: AREA_VOLUME,
    ItemType.PATCH_SLAB: AREA_VOLUME,
    ItemType.RAISED_SLAB: AREA_VOLUME,
    ItemType.BUILT_UP_SLAB: AREA_VOLUME,
    ItemType.SHEAR_WALL: LINEAR_AREA_VOLUME,
    ItemType.PARAPET_WALL: LINEAR_AREA_VOLUME,
    ItemType.BEAM: LINEAR_AREA_VOLUME,
    ItemType.COLUMN: COUNT,
    ItemType.CONCRETE_POST: BOX_VOLUME_COUNT,
    ItemType.DROP_PANEL: _spec(
        "J=C{r}*F{r}*G{r}",
        "J=C{r}",
        VOLUME,
        Cell("M", "C{r}", requires=("length", "width")),
        sums="J L M",
    ),
    ItemType.CURB: LINEAR_AREA_VOLUME,
    ItemType.CONCRETE_PAD: _spec("J=C{r}", VOLUME, "M=E{r}", sums="J L M"),
    ItemType.NON_SHRINK_GROUT: COUNT,
    ItemType.REPAIR_SCOPE: LENGTH,
    # Site / civil
    ItemType.CIVIL_DEMO_AREA: AREA_VOLUME,
    ItemType.CIVIL_DEMO_LINEAR: LINEAR_AREA_VOLUME,
    ItemType.CIVIL_DEMO_EACH: COUNT,
    ItemType.CIVIL_FENCE: LINEAR_AREA,
    ItemType.CIVIL_STABILIZED_ENTRANCE: AREA_VOLUME,
    ItemType.CIVIL_SILT_FENCE: LINEAR_AREA,
    ItemType.CIVIL_INLET_FILTER: COUNT,
    ItemType.CIVIL_EXCAVATION: _spec(
        "J=C{r}",
        VOLUME,
        extra=(SumColumn("J"), SumColumn("L", multiplier=CIVIL_EXCAVATION_SWELL)),
    ),
    ItemType.CIVIL_TRANSFORMER_PAD: _spec("J=C{r}", VOLUME, "M=E{r}", sums="J L M"),
    ItemType.CIVIL_ASPHALT: AREA_VOLUME,
    ItemType.CIVIL_CONCRETE_PAVEMENT: AREA_VOLUME,
    ItemType.CIVIL_GRAVEL: AREA_VOLUME,
    ItemType.CIVIL_BOLLARD: _spec("J=G{r}*F{r}*C{r}", VOLUME, "M=C{r}", sums="J L M"),
    ItemType.CIVIL_DRAIN: COUNT,
    ItemType.CIVIL_UTILITY_CONNECTION: COUNT,
}

_missing = [t.name for t in ItemType if t not in FORMULAS]
if _missing:
    raise RuntimeError(f"no derivation entry for item types: {', '.join(_missing)}")


def _cell_available(
    cell: Cell,
    spec: FormulaSpec,
    geometry: ParsedGeometry,
    emitted: dict[str, str],
    ref_row: int | None,
) -> bool:
    for name in cell.requires:
        if not geometry.is_available(name):
            return False
    for column in _COLUMN_REF_RE.findall(cell.template):
        if column in spec.derived_columns and column != cell.column:
            if column not in emitted:
                return False
            continue
        field_name = _FIELD_BY_COLUMN.get(column)
        if field_name is not None and not geometry.is_available(field_name):
            return False
    if "{ref}" in cell.template and ref_row is None:
        return False
    if "{weight}" in cell.template and geometry.weight is None:
        return False
    if "{weight2}" in cell.template and geometry.weight2 is None:
        return False
    return True


def derive_formulas(
    item_type: ItemType,
    position: int,
    geometry: ParsedGeometry,
    ref_row: int | None = None,
) -> dict[str, str]:
    """Formula bodies for one data row, keyed by column letter.

    Pure lookup: the same arguments always give the same mapping. Columns whose
    inputs are missing are left out rather than written as zero.
    """
    spec = FORMULAS[item_type]
    cells: dict[str, str] = {}
    if geometry.height_formula is not None:
        cells["H"] = geometry.height_formula
    for cell in spec.cells:
        if cell.column in cells:
            continue
        if not _cell_available(cell, spec, geometry, cells, ref_row):
            logger.debug("%s row %d: %s=%s skipped", item_type.value, position, cell.column, cell.template)
            continue
        cells[cell.column] = cell.template.format(
            r=position,
            ref=ref_row,
            weight=f"{geometry.weight:.3f}" if geometry.weight is not None else "",
            weight2=f"{geometry.weight2:.3f}" if geometry.weight2 is not None else "",
        )
    return cells


def derive_sum(item_type: ItemType, first: int, last: int) -> tuple[dict[str, str], dict[str, float]]:
    """Subtotal formula bodies over rows first..last and the multipliers applied."""
    if first > last:
        raise ValueError(f"empty subtotal range {first}..{last}")
    cells: dict[str, str] = {}
    multipliers: dict[str, float] = {}
    for summed in FORMULAS[item_type].sums:
        source = summed.source or summed.column
        body = f"SUM({source}{first}:{source}{last})"
        if summed.multiplier is not None:
            body += f"*{summed.multiplier:g}"
            multipliers[summed.column] = summed.multiplier
        cells[summed.column] = body
    return cells, multipliers


def summed_columns(item_type: ItemType) -> tuple[str, ...]:
    return tuple(s.column for s in FORMULAS[item_type].sums)
