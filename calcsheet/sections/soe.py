from __future__ import annotations

from calcsheet.classifiers import soe
from calcsheet.models.calculation_row import CalculationRow
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.soe import parse_soldier_pile
from calcsheet.services.context import PipelineContext

from .base import SectionProcessor, SheetItem, group_by_item_type

"""SOE section.

Soldier piles get one subtotal per pile size: drilled piles by diameter,
thickness, spacing pattern, embedment and rock socket; HP piles by height.
Groups are ordered drilled before HP, then by diameter, thickness and pattern.
"""

__all__ = ["SoeSection"]

BACKPACKING_LABEL = "Backpacking"


def _pile_order(group: list[SheetItem]) -> tuple:
    pile = parse_soldier_pile(group[0].description)
    if pile is None:
        return (2, 0.0, 0.0, 0)
    return pile.sort_key()


class SoeSection(SectionProcessor):
    key = soe.SECTION
    title = "SOE"
    table = soe.TABLE
    subsection_order = soe.SUBSECTION_ORDER

    def group(self, subsection: str, items: list[SheetItem]) -> list[list[SheetItem]]:
        if subsection != soe.SOLDIER_PILES:
            return group_by_item_type(items)
        groups: dict[str, list[SheetItem]] = {}
        for item in items:
            groups.setdefault(item.group_key, []).append(item)
        return sorted(groups.values(), key=_pile_order)

    def after_group(
        self,
        ctx: PipelineContext,
        subsection: str,
        data: list[CalculationRow],
        total: CalculationRow,
    ) -> list[CalculationRow]:
        if subsection != soe.TIMBER_LAGGING:
            return []
        if not any(soe.mentions_backpacking(row.particulars) for row in data):
            return []
        return [self.synthetic_row(ctx, subsection, BACKPACKING_LABEL, ItemType.BACKPACKING, unit="SQ FT", ref_id=total.row_id)]
