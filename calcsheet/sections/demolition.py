from __future__ import annotations

from calcsheet.classifiers import demolition

from .base import SectionProcessor, SheetItem, group_by_key_merging_singletons

"""Demolition section: rows grouped by their name prefix within each subsection."""

__all__ = ["DemolitionSection"]


class DemolitionSection(SectionProcessor):
    key = demolition.SECTION
    title = "Demolition"
    table = demolition.TABLE
    subsection_order = demolition.SUBSECTION_ORDER

    def group(self, subsection: str, items: list[SheetItem]) -> list[list[SheetItem]]:
        return group_by_key_merging_singletons(items)
