from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from calcsheet.classifiers.base import Classification, RuleTable
from calcsheet.models.calculation_row import CalculationRow
from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType, RowKind
from calcsheet.models.raw_input import InputRow
from calcsheet.parsers.dimensions import normalize_thickness_label, normalize_unit
from calcsheet.services.context import PipelineContext

"""Section processor base.

A processor walks the input rows still unclaimed, offers each one to its rule
table, marks accepted rows in the shared tracker and then lays the claimed
items out as:

    section header
      subsection header
        data rows of one group
        subtotal of that group
        ...

Subclasses hook in at three points: `companions` (extra rows derived from one
claimed row), `group` (how a subsection is split into subtotal groups) and
`after_group` (rows following a subtotal, e.g. Havg).
"""

__all__ = [
    "SheetItem",
    "SectionProcessor",
    "group_by_item_type",
    "group_by_key_merging_singletons",
]

logger = logging.getLogger(__name__)

MERGED_GROUP = "MERGED"


@dataclass
class SheetItem:
    """One claimed (or companion) row before it gets a sheet row id."""
    description: str
    takeoff: float | None
    unit: str
    classification: Classification
    raw_index: int | None

    @property
    def item_type(self) -> ItemType:
        return self.classification.item_type

    @property
    def subsection(self) -> str:
        return self.classification.subsection

    @property
    def geometry(self) -> ParsedGeometry:
        return self.classification.geometry

    @property
    def group_key(self) -> str:
        return self.geometry.group_key or "OTHER"

    def add_takeoff(self, value: float | None) -> None:
        if value is None:
            return
        self.takeoff = (self.takeoff or 0.0) + value


def group_by_item_type(items: list[SheetItem]) -> list[list[SheetItem]]:
    groups: dict[ItemType, list[SheetItem]] = {}
    for item in items:
        groups.setdefault(item.item_type, []).append(item)
    return list(groups.values())


def group_by_key_merging_singletons(items: list[SheetItem]) -> list[list[SheetItem]]:
    """Group by geometry group key; when several groups hold one row each, fold them into one."""
    groups: dict[str, list[SheetItem]] = {}
    for item in items:
        groups.setdefault(item.group_key, []).append(item)
    singles = [g for g in groups.values() if len(g) == 1]
    if len(singles) <= 1:
        return list(groups.values())
    multi = [g for g in groups.values() if len(g) > 1]
    merged = [g[0] for g in singles]
    logger.debug("merging %d single-row groups into %s", len(merged), MERGED_GROUP)
    return [*multi, merged]


class SectionProcessor:
    """Claims rows for one section and lays them out as sheet rows."""

    key: str = ""
    title: str = ""
    table: RuleTable
    subsection_order: tuple[str, ...] = ()
    header_labels: dict[str, str] | None = None

    # ---- claiming ----------------------------------------------------------

    def classify(self, description: str) -> Classification | None:
        return self.table.classify(description)

    def companions(self, item: SheetItem, row: InputRow) -> Iterable[SheetItem]:
        return ()

    def collect(self, ctx: PipelineContext) -> list[SheetItem]:
        items: list[SheetItem] = []
        merged: dict[tuple[str, ItemType], SheetItem] = {}
        for row in ctx.input_rows:
            if not ctx.offered_to(row, self.key):
                continue
            result = self.classify(row.description)
            if result is None:
                continue
            ctx.tracker.mark_used(row.index)
            item = SheetItem(
                description=row.description,
                takeoff=row.takeoff,
                unit=normalize_unit(row.unit),
                classification=result,
                raw_index=row.index,
            )
            for candidate in (item, *self.companions(item, row)):
                if candidate.classification.merge:
                    merge_key = (candidate.description, candidate.item_type)
                    existing = merged.get(merge_key)
                    if existing is not None:
                        existing.add_takeoff(candidate.takeoff)
                        logger.debug("%s: merged row %d into %r", self.key, row.index, existing.description)
                        continue
                    merged[merge_key] = candidate
                items.append(candidate)
        return items

    # ---- layout ------------------------------------------------------------

    def process(self, ctx: PipelineContext) -> list[CalculationRow]:
        if not ctx.header.has_required:
            logger.info("%s: required columns missing, section skipped", self.key)
            return []
        if not ctx.settings.is_enabled(self.key):
            logger.info("%s: disabled by configuration", self.key)
            return []
        items = self.collect(ctx)
        body = self.build(ctx, items)
        if not body:
            return []
        logger.info("%s: %d rows claimed, %d sheet rows", self.key, sum(1 for i in items if i.raw_index is not None), len(body))
        return [self.section_header(ctx), *body]

    def section_header(self, ctx: PipelineContext) -> CalculationRow:
        return CalculationRow(
            kind=RowKind.SECTION_HEADER,
            section=self.key,
            row_id=ctx.next_id(),
            particulars=self.title,
            labels=dict(self.header_labels) if self.header_labels else None,
        )

    def subsection_header(self, ctx: PipelineContext, subsection: str) -> CalculationRow:
        return CalculationRow(
            kind=RowKind.SUBSECTION_HEADER,
            section=self.key,
            row_id=ctx.next_id(),
            subsection=subsection,
            particulars=subsection,
        )

    def ordered_subsections(self, items: list[SheetItem]) -> list[str]:
        order = list(self.subsection_order)
        for item in items:
            if item.subsection not in order:
                order.append(item.subsection)
        return order

    def build(self, ctx: PipelineContext, items: list[SheetItem]) -> list[CalculationRow]:
        rows: list[CalculationRow] = []
        for subsection in self.ordered_subsections(items):
            members = [i for i in items if i.subsection == subsection]
            body = self.build_subsection(ctx, subsection, members)
            if body:
                rows.append(self.subsection_header(ctx, subsection))
                rows.extend(body)
        return rows

    def group(self, subsection: str, items: list[SheetItem]) -> list[list[SheetItem]]:
        return group_by_item_type(items)

    def build_subsection(self, ctx: PipelineContext, subsection: str, items: list[SheetItem]) -> list[CalculationRow]:
        rows: list[CalculationRow] = []
        for members in self.group(subsection, items):
            if not members:
                continue
            data = [self.data_row(ctx, item) for item in members]
            total = self.sum_row(ctx, subsection, data)
            rows.extend(data)
            rows.append(total)
            rows.extend(self.after_group(ctx, subsection, data, total))
        return rows

    def after_group(
        self,
        ctx: PipelineContext,
        subsection: str,
        data: list[CalculationRow],
        total: CalculationRow,
    ) -> list[CalculationRow]:
        return []

    # ---- row factories -----------------------------------------------------

    def data_row(self, ctx: PipelineContext, item: SheetItem, ref_id: int | None = None) -> CalculationRow:
        return CalculationRow(
            kind=RowKind.DATA,
            section=self.key,
            row_id=ctx.next_id(),
            subsection=item.subsection,
            particulars=normalize_thickness_label(item.description),
            takeoff=item.takeoff,
            unit=item.unit,
            geometry=item.geometry,
            item_type=item.item_type,
            raw_index=item.raw_index,
            ref_id=ref_id,
        )

    def synthetic_row(
        self,
        ctx: PipelineContext,
        subsection: str,
        particulars: str,
        item_type: ItemType,
        *,
        takeoff: float | None = None,
        unit: str = "",
        geometry: ParsedGeometry | None = None,
        ref_id: int | None = None,
    ) -> CalculationRow:
        """Data row with no source input row (Havg, manual sump pit, backpacking, ...)."""
        return CalculationRow(
            kind=RowKind.DATA,
            section=self.key,
            row_id=ctx.next_id(),
            subsection=subsection,
            particulars=particulars,
            takeoff=takeoff,
            unit=unit,
            geometry=geometry or ParsedGeometry(),
            item_type=item_type,
            ref_id=ref_id,
        )

    def sum_row(self, ctx: PipelineContext, subsection: str, data: list[CalculationRow]) -> CalculationRow:
        return CalculationRow(
            kind=RowKind.SUM,
            section=self.key,
            row_id=ctx.next_id(),
            subsection=subsection,
            item_type=data[0].item_type,
            first_id=data[0].row_id,
            last_id=data[-1].row_id,
        )


def companion_item(item: SheetItem, make: Callable[[Classification, str], Classification | None]) -> SheetItem | None:
    """Wrap a companion classification built from `item` in a SheetItem sharing its source row."""
    result = make(item.classification, item.description)
    if result is None:
        return None
    return replace(item, classification=result)
