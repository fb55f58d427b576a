"""Resolve use case: routing token -> grouped, ranked destination links."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import replace

import structlog

from linkhop.domain.entities import (
    DEFAULT_RECONSTRUCTION_TEMPLATE,
    DEFAULT_TITLE,
    PLACEHOLDER_POSTER,
    ContentUnit,
    DecodeError,
    NoLinksError,
    PreferredSelection,
    ResolutionError,
    ResolutionResult,
    ResolveAction,
    RoutingContext,
    UnitHints,
)
from linkhop.domain.ports import (
    HopResolverPort,
    LinkClassifierPort,
    RoutingCodecPort,
    UnitAggregatorPort,
)

log = structlog.get_logger(__name__)


class ResolveLinksUseCase:
    """Decodes a routing token, follows its hop chain and groups the links.

    Flow:
        1. Decode the token (legacy query parameters as fallback)
        2. Build the start URL and follow the hop chain
        3. Classify the terminal page's action buttons
        4. Group by unit and quality, honouring quality filter and action
        5. Mint next-step tokens for auto-selectable links

    Engine errors never escape ``execute``: they are returned in
    ``ResolutionResult.error``.
    """

    def __init__(
        self,
        codec: RoutingCodecPort,
        resolver: HopResolverPort,
        classifier: LinkClassifierPort,
        aggregator: UnitAggregatorPort,
        *,
        reconstruction_template: str = DEFAULT_RECONSTRUCTION_TEMPLATE,
    ) -> None:
        self.codec = codec
        self.resolver = resolver
        self.classifier = classifier
        self.aggregator = aggregator
        self._template = reconstruction_template

    def decode(
        self,
        token: str | None,
        legacy_params: Mapping[str, str] | None = None,
    ) -> RoutingContext | DecodeError:
        """Token first; legacy parameters when the token is absent or bad."""
        decoded: RoutingContext | DecodeError = DecodeError("No routing token given")
        if token:
            decoded = self.codec.decode(token)
        if isinstance(decoded, DecodeError) and legacy_params:
            fallback = self.codec.decode_params(legacy_params)
            if isinstance(fallback, RoutingContext):
                return fallback
        return decoded

    async def execute(
        self,
        token: str | None,
        *,
        quality: str | None = None,
        action: ResolveAction | None = None,
        legacy_params: Mapping[str, str] | None = None,
    ) -> ResolutionResult:
        t0 = time.perf_counter()
        context = self.decode(token, legacy_params)
        if isinstance(context, DecodeError):
            log.warning("resolve_decode_failed", error=str(context))
            return ResolutionResult(
                start_url="",
                last_url="",
                title=DEFAULT_TITLE,
                poster=PLACEHOLDER_POSTER,
                action=action,
                error=context,
            )

        start = context.start_url(self._template)
        base = ResolutionResult(
            start_url=start,
            last_url=start,
            title=context.title or DEFAULT_TITLE,
            poster=context.poster_ref or PLACEHOLDER_POSTER,
            action=action,
        )
        log.info("resolution_started", start_url=start, action=action)

        try:
            terminal = await self.resolver.resolve(start)
        except ResolutionError as e:
            log.warning(
                "resolution_failed",
                kind=e.kind,
                hop=e.hop,
                url=e.url,
                error=str(e),
            )
            return replace(base, last_url=e.url, hops=tuple(e.hops), error=e)

        result = replace(
            base,
            last_url=terminal.url,
            terminal_title=terminal.title,
            is_archive_only=terminal.is_archive_only,
            hops=terminal.hops,
        )

        candidates = self.classifier.classify(terminal.html, base_url=terminal.url)
        if not candidates:
            log.info("resolution_no_links", url=terminal.url)
            return replace(result, error=NoLinksError(url=terminal.url))

        hints = UnitHints(
            quality=quality or context.quality_hint,
            include_batches=action != "stream",
        )
        units = tuple(self.aggregator.aggregate(candidates, hints))
        if not units:
            log.info("resolution_no_streamable_links", url=terminal.url)
            return replace(
                result,
                error=NoLinksError(
                    "Only batch downloads on the terminal page, nothing to stream",
                    url=terminal.url,
                ),
            )
        selections = tuple(self._mint_selections(context, units))

        duration_ms = int((time.perf_counter() - t0) * 1000)
        log.info(
            "resolution_completed",
            start_url=start,
            last_url=terminal.url,
            hops=len(terminal.hops),
            candidates=len(candidates),
            units=len(units),
            selections=len(selections),
            archive=terminal.is_archive_only,
            duration_ms=duration_ms,
        )
        return replace(result, units=units, selections=selections)

    def _mint_selections(
        self,
        context: RoutingContext,
        units: tuple[ContentUnit, ...],
    ) -> list[PreferredSelection]:
        selections: list[PreferredSelection] = []
        for unit in units:
            for group in unit.groups:
                link = self.aggregator.select_preferred(group)
                if link is None:
                    continue
                next_context = replace(
                    context,
                    destination_ref=link.url,
                    server_hint=link.server or None,
                    quality_hint=group.quality,
                )
                selections.append(
                    PreferredSelection(
                        unit=unit.key,
                        quality=group.quality,
                        link=link,
                        token=self.codec.encode(next_context),
                    )
                )
        return selections
