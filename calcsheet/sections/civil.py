from __future__ import annotations

from collections.abc import Iterable

from calcsheet.classifiers import civil
from calcsheet.models.raw_input import InputRow

from .base import SectionProcessor, SheetItem, companion_item

__all__ = ["CivilSection"]


class CivilSection(SectionProcessor):
    """Site / civil section; proposed pads and pavements add an excavation row."""

    key = civil.SECTION
    title = "Civil / Sitework"
    table = civil.TABLE
    subsection_order = civil.SUBSECTION_ORDER

    def companions(self, item: SheetItem, row: InputRow) -> Iterable[SheetItem]:
        excavation = companion_item(item, civil.excavation_companion)
        return (excavation,) if excavation is not None else ()
