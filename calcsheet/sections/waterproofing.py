from __future__ import annotations

from collections.abc import Iterable

from calcsheet.classifiers import waterproofing
from calcsheet.models.raw_input import InputRow

from .base import SectionProcessor, SheetItem, companion_item, group_by_item_type, group_by_key_merging_singletons

"""Waterproofing section.

Exterior side walls are subtotalled per wall mark (FW, RW, ...); every exterior
pit wall also produces a negative side row from the same input row.
"""

__all__ = ["WaterproofingSection"]


class WaterproofingSection(SectionProcessor):
    key = waterproofing.SECTION
    title = "Waterproofing"
    table = waterproofing.TABLE
    subsection_order = waterproofing.SUBSECTION_ORDER

    def companions(self, item: SheetItem, row: InputRow) -> Iterable[SheetItem]:
        negative = companion_item(item, waterproofing.negative_wall_companion)
        return (negative,) if negative is not None else ()

    def group(self, subsection: str, items: list[SheetItem]) -> list[list[SheetItem]]:
        if subsection == waterproofing.EXTERIOR_SIDE:
            return group_by_key_merging_singletons(items)
        return group_by_item_type(items)
