from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property

from calcsheet.models.raw_input import HeaderIndex, InputRow, RawInput, iter_input_rows
from calcsheet.tracking.used_rows import UsedRowTracker

"""Per-pass pipeline context.

Everything a section processor may read or write during one pass lives here:
the raw input, the resolved header, the shared UsedRowTracker, and the rows
other sections registered for later reference. A new context is built for
every pass; nothing is kept at module level.
"""

__all__ = [
    "SECTION_ORDER",
    "DEFAULT_ESTIMATE_LABELS",
    "EngineSettings",
    "PipelineContext",
]

SECTION_ORDER: tuple[str, ...] = (
    "demolition",
    "excavation",
    "rock_excavation",
    "soe",
    "foundation",
    "waterproofing",
    "superstructure",
    "civil",
)

DEFAULT_ESTIMATE_LABELS: dict[str, tuple[str, ...]] = {
    "demolition": ("Demolition",),
    "excavation": ("Excavation",),
    "rock_excavation": ("Rock Excavation", "Excavation"),
    "soe": ("SOE",),
    "foundation": ("Foundation",),
    "waterproofing": ("Waterproofing",),
    "superstructure": ("Superstructure",),
    "civil": ("Civil / Sitework",),
}


@dataclass(frozen=True)
class EngineSettings:
    """Section routing knobs (see config `estimate_labels` / `disabled_sections`)."""
    estimate_labels: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_ESTIMATE_LABELS))
    disabled_sections: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        unknown = (set(self.estimate_labels) | set(self.disabled_sections)) - set(SECTION_ORDER)
        if unknown:
            raise ValueError(f"unknown section key(s): {', '.join(sorted(unknown))}")

    def labels_for(self, section: str) -> frozenset[str]:
        labels = self.estimate_labels.get(section, DEFAULT_ESTIMATE_LABELS[section])
        return frozenset(label.strip().lower() for label in labels)

    def is_enabled(self, section: str) -> bool:
        return section not in self.disabled_sections


@dataclass
class PipelineContext:
    raw: RawInput
    header: HeaderIndex
    tracker: UsedRowTracker
    settings: EngineSettings = field(default_factory=EngineSettings)
    _next_id: int = field(default=0, init=False, repr=False)

    @classmethod
    def create(cls, raw: RawInput, settings: EngineSettings | None = None) -> PipelineContext:
        return cls(
            raw=raw,
            header=HeaderIndex.resolve(raw.headers),
            tracker=UsedRowTracker(),
            settings=settings or EngineSettings(),
        )

    def next_id(self) -> int:
        self._next_id += 1
        return self._next_id

    @cached_property
    def input_rows(self) -> list[InputRow]:
        return list(iter_input_rows(self.raw, self.header))

    def offered_to(self, row: InputRow, section: str) -> bool:
        """True when the row is still unclaimed and its Estimate routes it to `section`.

        A blank Estimate cell, or no Estimate column at all, routes everywhere.
        """
        if self.tracker.is_used(row.index):
            return False
        if row.estimate is None:
            return True
        return row.estimate.strip().lower() in self.settings.labels_for(section)
