"""Domain entities for hop resolution and link classification.

Pure value objects: no framework dependencies, no I/O. Everything here is
built fresh per resolution request and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from linkhop.domain.entities.errors import LinkhopError
from linkhop.domain.entities.routing import DEFAULT_TITLE, PLACEHOLDER_POSTER

ResolveAction = Literal["stream", "download"]


class HostTier(str, Enum):
    """Reliability tier of the host a candidate link points to."""

    PREFERRED = "preferred"
    TRUSTED = "trusted"
    OTHER = "other"
    BLACKLISTED = "blacklisted"

    @property
    def is_elevated(self) -> bool:
        return self in (HostTier.PREFERRED, HostTier.TRUSTED)


class ExtractionStrategyKind(str, Enum):
    """Which extraction strategy produced a next-hop URL."""

    VARIABLE_ASSIGNMENT = "variable_assignment"
    ANCHOR_TOKEN = "anchor_token"
    REDIRECT_PAYLOAD = "redirect_payload"
    LAYERED_PAYLOAD = "layered_payload"


class UnitKind(str, Enum):
    """Granularity links are grouped at."""

    SINGLE = "single"
    EPISODE = "episode"
    BATCH = "batch"


@dataclass(frozen=True)
class FetchedPage:
    """Raw page content returned by a page fetcher."""

    url: str  # final URL after redirects
    html: str
    status_code: int = 200


@dataclass(frozen=True)
class HopResult:
    """Outcome of one fetch-then-extract step."""

    next_url: str
    strategy_used: ExtractionStrategyKind
    hop_index: int  # 1-based
    source_url: str = ""


@dataclass(frozen=True)
class TerminalPage:
    """The page reached at the end of the redirect chain."""

    url: str
    html: str
    title: str
    is_archive_only: bool
    start_url: str
    hops: tuple[HopResult, ...] = ()


@dataclass(frozen=True)
class CandidateLink:
    """A destination link found on a terminal page.

    ``size`` and ``quality`` are raw text as published by the remote page
    (untrusted, display only).
    """

    label: str
    raw_text: str
    url: str
    host_tier: HostTier = HostTier.OTHER
    server: str = ""
    section: str = ""
    size: str | None = None
    quality: str | None = None


@dataclass(frozen=True)
class QualityGroup:
    """Candidates of one content unit sharing a normalized quality label."""

    quality: str
    size_estimate: str
    servers: tuple[CandidateLink, ...] = ()


@dataclass(frozen=True)
class ContentUnit:
    """A whole title, one episode, or a batch package."""

    kind: UnitKind
    groups: tuple[QualityGroup, ...] = ()
    episode: int | None = None

    @property
    def is_empty(self) -> bool:
        """True when filtering left nothing to offer ("no links available")."""
        return not self.groups

    @property
    def key(self) -> str:
        if self.kind is UnitKind.EPISODE:
            return f"episode:{self.episode}"
        return self.kind.value


@dataclass(frozen=True)
class UnitHints:
    """Request-level hints for grouping."""

    quality: str | None = None
    include_batches: bool = True


@dataclass(frozen=True)
class PreferredSelection:
    """An auto-selected link plus the routing token for the next step."""

    unit: str
    quality: str
    link: CandidateLink
    token: str


@dataclass(frozen=True)
class ResolutionResult:
    """Everything the renderer needs, including partial failures."""

    start_url: str
    last_url: str
    title: str = DEFAULT_TITLE
    poster: str = PLACEHOLDER_POSTER
    terminal_title: str = ""
    is_archive_only: bool = False
    units: tuple[ContentUnit, ...] = ()
    hops: tuple[HopResult, ...] = ()
    selections: tuple[PreferredSelection, ...] = ()
    action: ResolveAction | None = None
    error: LinkhopError | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def stream_available(self) -> bool:
        """Archives are download-only."""
        return self.ok and not self.is_archive_only
