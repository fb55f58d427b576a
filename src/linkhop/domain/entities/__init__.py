from .errors import (
    DecodeError,
    ExtractionError,
    FetchError,
    LinkhopError,
    NoLinksError,
    ResolutionError,
)
from .links import (
    CandidateLink,
    ContentUnit,
    ExtractionStrategyKind,
    FetchedPage,
    HopResult,
    HostTier,
    PreferredSelection,
    QualityGroup,
    ResolutionResult,
    ResolveAction,
    TerminalPage,
    UnitHints,
    UnitKind,
)
from .routing import (
    DEFAULT_RECONSTRUCTION_TEMPLATE,
    DEFAULT_TITLE,
    PLACEHOLDER_POSTER,
    RoutingContext,
)

__all__ = [
    "CandidateLink",
    "ContentUnit",
    "DEFAULT_RECONSTRUCTION_TEMPLATE",
    "DEFAULT_TITLE",
    "DecodeError",
    "ExtractionError",
    "ExtractionStrategyKind",
    "FetchError",
    "FetchedPage",
    "HopResult",
    "HostTier",
    "LinkhopError",
    "NoLinksError",
    "PLACEHOLDER_POSTER",
    "PreferredSelection",
    "QualityGroup",
    "ResolutionError",
    "ResolutionResult",
    "ResolveAction",
    "RoutingContext",
    "TerminalPage",
    "UnitHints",
    "UnitKind",
]
