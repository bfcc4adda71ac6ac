from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from calcsheet.derivation.formulas import derive_formulas, derive_sum
from calcsheet.models.calculation_result import CalculationResult
from calcsheet.models.calculation_row import CalculationRow
from calcsheet.models.directive import DerivationDirective
from calcsheet.models.item_type import RowKind
from calcsheet.models.raw_input import RawInput
from calcsheet.models.unused_row import UnusedRowRecord
from calcsheet.sections import PROCESSORS
from calcsheet.services.aggregates import compute_aggregates
from calcsheet.services.context import EngineSettings, PipelineContext

"""Calculation sheet assembly.

One pass:
1. run every section processor in order over a fresh PipelineContext
2. number the concatenated rows from FIRST_POSITION (position 1 is the column
   title row)
3. turn row ids held by sum / reference rows into positions and emit the
   derivation directives
4. collect aggregates and the unused-row complement

Nothing survives between passes; re-running on the same raw input gives the
same rows, directives and unused rows.
"""

__all__ = [
    "FIRST_POSITION",
    "generate_calculation_sheet",
    "assign_positions",
    "build_directives",
    "merge_unused_rows",
]

logger = logging.getLogger(__name__)

FIRST_POSITION = 2


def assign_positions(rows: Iterable[CalculationRow]) -> list[CalculationRow]:
    return [dataclasses.replace(row, position=pos) for pos, row in enumerate(rows, start=FIRST_POSITION)]


def build_directives(rows: list[CalculationRow]) -> list[DerivationDirective]:
    """Directives for every positioned data row with derived columns and every subtotal row."""
    positions = {row.row_id: row.position for row in rows}
    directives: list[DerivationDirective] = []
    for row in rows:
        if row.item_type is None or row.position is None:
            continue
        if row.kind is RowKind.SUM:
            first = positions[row.first_id]
            last = positions[row.last_id]
            cells, multipliers = derive_sum(row.item_type, first, last)
            if not cells:
                continue
            directives.append(
                DerivationDirective(
                    row=row.position,
                    item_type=row.item_type.value,
                    section=row.section,
                    cells=dict(cells),
                    first_data_row=first,
                    last_data_row=last,
                    multipliers=multipliers,
                )
            )
        elif row.kind is RowKind.DATA:
            ref_row = positions.get(row.ref_id) if row.ref_id is not None else None
            cells = derive_formulas(row.item_type, row.position, row.geometry, ref_row)
            if not cells:
                continue
            directives.append(
                DerivationDirective(
                    row=row.position,
                    item_type=row.item_type.value,
                    section=row.section,
                    cells=dict(cells),
                    ref_row=ref_row,
                )
            )
    return directives


def merge_unused_rows(
    fresh: list[UnusedRowRecord],
    persisted: Iterable[UnusedRowRecord | Mapping[str, Any]] | None,
) -> list[UnusedRowRecord]:
    """Carry reviewer `isUsed=True` flags forward onto a freshly computed unused-row list.

    Matching is by row index only. Persisted entries whose row is no longer
    unused are dropped; the engine never sets a flag to True on its own.
    """
    if not persisted:
        return list(fresh)
    flagged: set[int] = set()
    for entry in persisted:
        record = entry if isinstance(entry, UnusedRowRecord) else UnusedRowRecord.from_dict(entry)
        if record.is_used:
            flagged.add(record.row_index)
    return [
        dataclasses.replace(rec, is_used=True) if rec.row_index in flagged else rec
        for rec in fresh
    ]


def generate_calculation_sheet(
    raw: RawInput,
    settings: EngineSettings | None = None,
    persisted_unused: Iterable[UnusedRowRecord | Mapping[str, Any]] | None = None,
) -> CalculationResult:
    ctx = PipelineContext.create(raw, settings)
    if not ctx.header.has_required:
        logger.warning("input header lacks Digitizer Item / Total; no section will claim rows")

    rows: list[CalculationRow] = []
    for processor in PROCESSORS:
        rows.extend(processor.process(ctx))

    rows = assign_positions(rows)
    directives = build_directives(rows)
    unused = merge_unused_rows(ctx.tracker.get_unused_rows(raw.rows), persisted_unused)
    stats = ctx.tracker.stats(raw.rows)
    logger.info(
        "sheet assembled: %d rows, %d directives, %d/%d input rows used",
        len(rows),
        len(directives),
        stats["used"],
        stats["total"] - stats["blank"],
    )
    return CalculationResult(
        rows=rows,
        formulas=directives,
        unused_rows=unused,
        aggregates=compute_aggregates(rows),
        stats=stats,
    )
