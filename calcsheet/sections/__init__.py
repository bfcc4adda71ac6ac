from __future__ import annotations

from .base import SectionProcessor
from .civil import CivilSection
from .demolition import DemolitionSection
from .excavation import ExcavationSection
from .foundation import FoundationSection
from .rock_excavation import RockExcavationSection
from .soe import SoeSection
from .superstructure import SuperstructureSection
from .waterproofing import WaterproofingSection

"""Section processors in pipeline order.

Order matters: a row claimed by an earlier section is never offered to a later
one, and the rock section's reference rows point back at its own data rows.
"""

__all__ = [
    "SectionProcessor",
    "PROCESSORS",
]

PROCESSORS: tuple[SectionProcessor, ...] = (
    DemolitionSection(),
    ExcavationSection(),
    RockExcavationSection(),
    SoeSection(),
    FoundationSection(),
    WaterproofingSection(),
    SuperstructureSection(),
    CivilSection(),
)
