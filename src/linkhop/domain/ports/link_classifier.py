"""Ports for turning terminal page content into grouped link records."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from linkhop.domain.entities.links import (
    CandidateLink,
    ContentUnit,
    QualityGroup,
    UnitHints,
)


@runtime_checkable
class LinkClassifierPort(Protocol):
    def classify(self, html: str, *, base_url: str = "") -> list[CandidateLink]:
        """Return deduplicated, filtered, tier-ordered candidates."""
        ...


@runtime_checkable
class UnitAggregatorPort(Protocol):
    def aggregate(
        self,
        candidates: Sequence[CandidateLink],
        hints: UnitHints | None = None,
    ) -> list[ContentUnit]:
        """Group candidates into content units and quality groups."""
        ...

    def select_preferred(self, group: QualityGroup) -> CandidateLink | None:
        """Return the single Preferred-tier candidate, if exactly one exists."""
        ...
