"""Groups classified candidates into content units and quality groups.

Unit assignment per candidate:
- Batch when the label mentions a batch keyword, or the section heading
  does. "season" in a heading is weak: it yields to an episode number in
  the same heading ("Season 4 Episode 3" is an episode).
- Episode(n) when an episode number is found in the section or label.
- Single otherwise.

Units are ordered Single, episodes ascending, Batch; quality groups keep
first-seen order within their unit.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from linkhop.domain.entities.links import (
    CandidateLink,
    ContentUnit,
    HostTier,
    QualityGroup,
    UnitHints,
    UnitKind,
)
from linkhop.infrastructure.aggregation.quality import (
    UNKNOWN_QUALITY,
    estimate_size,
    normalize_quality,
)
from linkhop.infrastructure.common.parsers import find_episode
from linkhop.infrastructure.config.schema import AggregatorConfig

log = structlog.get_logger(__name__)

_WEAK_SECTION_KEYWORDS = frozenset({"season"})


@dataclass
class _GroupBuilder:
    quality: str
    links: list[CandidateLink] = field(default_factory=list)


@dataclass
class _UnitBuilder:
    kind: UnitKind
    episode: int | None = None
    groups: dict[str, _GroupBuilder] = field(default_factory=dict)


def _unit_order(unit: ContentUnit) -> tuple[int, int]:
    rank = {UnitKind.SINGLE: 0, UnitKind.EPISODE: 1, UnitKind.BATCH: 2}[unit.kind]
    return rank, unit.episode or 0


class UnitAggregator:
    """Quality & unit aggregation over classifier output."""

    def __init__(self, config: AggregatorConfig | None = None) -> None:
        config = config or AggregatorConfig()
        self._keywords = tuple(k.lower() for k in config.batch_keywords)
        self._default_ranges = {
            normalize_quality(quality): size
            for quality, size in config.default_size_ranges.items()
        }
        self._unknown_size = config.unknown_size

    def classify_unit(self, candidate: CandidateLink) -> tuple[UnitKind, int | None]:
        label = candidate.label.lower()
        section = candidate.section.lower()
        episode = find_episode(candidate.section) or find_episode(candidate.label)

        if any(k in label for k in self._keywords):
            return UnitKind.BATCH, None
        for keyword in self._keywords:
            if keyword not in section:
                continue
            weak = keyword in _WEAK_SECTION_KEYWORDS
            if not weak or episode is None:
                return UnitKind.BATCH, None

        if episode is not None:
            return UnitKind.EPISODE, episode
        return UnitKind.SINGLE, None

    def aggregate(
        self,
        candidates: Sequence[CandidateLink],
        hints: UnitHints | None = None,
    ) -> list[ContentUnit]:
        hints = hints or UnitHints()
        wanted = normalize_quality(hints.quality) if hints.quality else None
        units: dict[tuple[UnitKind, int | None], _UnitBuilder] = {}
        filtered = 0

        for candidate in candidates:
            kind, episode = self.classify_unit(candidate)
            if kind is UnitKind.BATCH and not hints.include_batches:
                continue
            unit = units.setdefault((kind, episode), _UnitBuilder(kind, episode))

            # Links without a quality label inherit the requested one.
            quality = candidate.quality or hints.quality or UNKNOWN_QUALITY
            key = normalize_quality(quality)
            if wanted is not None and key != wanted:
                filtered += 1
                continue
            group = unit.groups.setdefault(key, _GroupBuilder(quality))
            group.links.append(candidate)

        result = sorted(
            (self._build_unit(u) for u in units.values()),
            key=_unit_order,
        )
        log.debug(
            "units_aggregated",
            units=len(result),
            empty_units=sum(1 for u in result if u.is_empty),
            filtered=filtered,
            quality_filter=hints.quality,
        )
        return result

    def select_preferred(self, group: QualityGroup) -> CandidateLink | None:
        """The group's only Preferred-tier link; ``None`` when zero or several."""
        preferred = [c for c in group.servers if c.host_tier is HostTier.PREFERRED]
        return preferred[0] if len(preferred) == 1 else None

    def _build_unit(self, unit: _UnitBuilder) -> ContentUnit:
        groups = tuple(
            QualityGroup(
                quality=g.quality,
                size_estimate=estimate_size(
                    (c.size for c in g.links),
                    g.quality,
                    default_ranges=self._default_ranges,
                    unknown=self._unknown_size,
                ),
                servers=tuple(g.links),
            )
            for g in unit.groups.values()
        )
        return ContentUnit(kind=unit.kind, groups=groups, episode=unit.episode)
