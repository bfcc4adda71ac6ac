from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from calcsheet.models.geometry import ParsedGeometry
from calcsheet.models.item_type import ItemType
from calcsheet.parsers.dimensions import parse_thickness, select_bracket_group

"""Ordered rule tables for the section classifiers.

A RuleTable is a list of Rule(predicate -> item type) pairs evaluated top to
bottom; the first rule whose predicate holds wins. Rule order is the priority an
estimator would apply by hand, so two rules that both match a description are
never compared by specificity.

Predicates receive the original description and do their own case folding.
"""

__all__ = [
    "Predicate",
    "GeometryParser",
    "Rule",
    "RuleTable",
    "Classification",
    "contains",
    "starts_with",
    "matches",
    "equals",
    "all_of",
    "any_of",
    "not_",
    "no_geometry",
    "group_key_for",
]

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]
GeometryParser = Callable[[str], ParsedGeometry]
TypeRefiner = Callable[[str], ItemType]


def contains(*needles: str) -> Predicate:
    lowered = tuple(n.lower() for n in needles)

    def predicate(text: str) -> bool:
        t = text.lower()
        return any(n in t for n in lowered)

    return predicate


def starts_with(*prefixes: str) -> Predicate:
    lowered = tuple(p.lower() for p in prefixes)

    def predicate(text: str) -> bool:
        return text.strip().lower().startswith(lowered)

    return predicate


def matches(pattern: str, flags: int = re.IGNORECASE) -> Predicate:
    compiled = re.compile(pattern, flags)

    def predicate(text: str) -> bool:
        return compiled.search(text.strip()) is not None

    return predicate


def equals(*values: str) -> Predicate:
    lowered = {v.lower() for v in values}

    def predicate(text: str) -> bool:
        return text.strip().lower() in lowered

    return predicate


def all_of(*predicates: Predicate) -> Predicate:
    def predicate(text: str) -> bool:
        return all(p(text) for p in predicates)

    return predicate


def any_of(*predicates: Predicate) -> Predicate:
    def predicate(text: str) -> bool:
        return any(p(text) for p in predicates)

    return predicate


def not_(inner: Predicate) -> Predicate:
    def predicate(text: str) -> bool:
        return not inner(text)

    return predicate


def no_geometry(text: str) -> ParsedGeometry:
    return ParsedGeometry()


def group_key_for(text: str) -> str:
    """Grouping key used for subtotals: thickness first, then the first bracket value."""
    thickness = parse_thickness(text)
    if thickness is not None:
        return f"THICK_{round(thickness * 12, 4):g}"
    group = select_bracket_group(text)
    if group:
        first = re.split(r"\s*[xX]\s*", group.strip())[0].strip()
        if first:
            return f"DIM_{first}"
    return "OTHER"


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Predicate
    item_type: ItemType
    subsection: str
    parse: GeometryParser = no_geometry
    refine: TypeRefiner | None = None  # picks a sibling item type from the text
    merge: bool = False  # identical particulars fold into one row

    def matches(self, text: str) -> bool:
        return bool(self.predicate(text))


@dataclass(frozen=True)
class Classification:
    section: str
    subsection: str
    item_type: ItemType
    geometry: ParsedGeometry
    rule: str
    merge: bool = False


class RuleTable:
    """First-match-wins rule list for one section.

    `accepts` is a section-wide gate (e.g. demolition rows start with "demo ")
    and `excludes` lists predicates that reject a row before any rule is tried.
    """

    def __init__(
        self,
        section: str,
        rules: Sequence[Rule],
        accepts: Predicate | None = None,
        excludes: Sequence[Predicate] = (),
    ) -> None:
        names = [r.name for r in rules]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate rule names in section {section!r}")
        self.section = section
        self.rules: tuple[Rule, ...] = tuple(rules)
        self._accepts = accepts
        self._excludes = tuple(excludes)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def subsections(self) -> list[str]:
        seen: list[str] = []
        for rule in self.rules:
            if rule.subsection not in seen:
                seen.append(rule.subsection)
        return seen

    def accepts(self, text: str) -> bool:
        if not text or not text.strip():
            return False
        if self._accepts is not None and not self._accepts(text):
            return False
        return not any(ex(text) for ex in self._excludes)

    def match(self, text: str) -> Rule | None:
        if not self.accepts(text):
            return None
        for rule in self.rules:
            if rule.matches(text):
                return rule
        return None

    def classify(self, text: str) -> Classification | None:
        rule = self.match(text)
        if rule is None:
            return None
        item_type = rule.refine(text) if rule.refine is not None else rule.item_type
        geometry = rule.parse(text)
        logger.debug("%s: %r -> %s (%s)", self.section, text, item_type.value, rule.name)
        return Classification(
            section=self.section,
            subsection=rule.subsection,
            item_type=item_type,
            geometry=geometry,
            rule=rule.name,
            merge=rule.merge,
        )
