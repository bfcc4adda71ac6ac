from __future__ import annotations

from calcsheet.classifiers import superstructure

from .base import SectionProcessor, SheetItem, group_by_item_type, group_by_key_merging_singletons

__all__ = ["SuperstructureSection"]


class SuperstructureSection(SectionProcessor):
    key = superstructure.SECTION
    title = "Superstructure"
    table = superstructure.TABLE
    subsection_order = superstructure.SUBSECTION_ORDER

    def group(self, subsection: str, items: list[SheetItem]) -> list[list[SheetItem]]:
        # slab on metal deck: one subtotal per concrete / deck depth pair
        if subsection == superstructure.SLAB_ON_METAL_DECK:
            return group_by_key_merging_singletons(items)
        return group_by_item_type(items)
