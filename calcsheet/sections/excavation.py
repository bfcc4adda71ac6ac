from __future__ import annotations

from collections.abc import Iterable

from calcsheet.classifiers import excavation
from calcsheet.models.calculation_row import CalculationRow
from calcsheet.models.item_type import ItemType
from calcsheet.models.raw_input import InputRow
from calcsheet.services.context import PipelineContext

from .base import SectionProcessor, SheetItem, companion_item

"""Excavation section.

Each subsection is one subtotal group. The soil subtotal carries the 1.3 swell
on its CY column and is followed by a Havg row giving the average depth
`(K * 27) / J` of the unswelled subtotal.
"""

__all__ = ["ExcavationSection"]

HAVG_LABEL = "Havg"


class ExcavationSection(SectionProcessor):
    key = excavation.SECTION
    title = "Excavation"
    table = excavation.TABLE
    subsection_order = excavation.SUBSECTION_ORDER
    header_labels = {"K": "CY", "L": "1.3*CY"}

    def companions(self, item: SheetItem, row: InputRow) -> Iterable[SheetItem]:
        extra = (
            companion_item(item, excavation.backfill_companion),
            companion_item(item, excavation.mud_slab_companion),
        )
        return tuple(c for c in extra if c is not None)

    def group(self, subsection: str, items: list[SheetItem]) -> list[list[SheetItem]]:
        return [items]

    def after_group(
        self,
        ctx: PipelineContext,
        subsection: str,
        data: list[CalculationRow],
        total: CalculationRow,
    ) -> list[CalculationRow]:
        if subsection != excavation.SOIL:
            return []
        return [self.synthetic_row(ctx, subsection, HAVG_LABEL, ItemType.EXC_HAVG, ref_id=total.row_id)]
