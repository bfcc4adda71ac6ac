from __future__ import annotations

from calcsheet.classifiers import foundation

from .base import SectionProcessor

__all__ = ["FoundationSection"]


class FoundationSection(SectionProcessor):
    key = foundation.SECTION
    title = "Foundation"
    table = foundation.TABLE
    subsection_order = foundation.SUBSECTION_ORDER
