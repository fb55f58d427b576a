"""JSON rendering of resolution results (camelCase keys for the web client)."""

from __future__ import annotations

from typing import Any

from linkhop.domain.entities import (
    CandidateLink,
    ContentUnit,
    HopResult,
    LinkhopError,
    PreferredSelection,
    QualityGroup,
    ResolutionError,
    ResolutionResult,
    RoutingContext,
)
from linkhop.domain.entities.errors import DecodeError, FetchError


def render_link(link: CandidateLink) -> dict[str, Any]:
    return {
        "label": link.label,
        "text": link.raw_text,
        "url": link.url,
        "tier": link.host_tier.value,
        "server": link.server,
        "section": link.section,
        "size": link.size,
        "quality": link.quality,
    }


def render_group(group: QualityGroup) -> dict[str, Any]:
    return {
        "quality": group.quality,
        "sizeEstimate": group.size_estimate,
        "servers": [render_link(link) for link in group.servers],
    }


def render_unit(unit: ContentUnit) -> dict[str, Any]:
    return {
        "kind": unit.kind.value,
        "key": unit.key,
        "episode": unit.episode,
        "isEmpty": unit.is_empty,
        "groups": [render_group(g) for g in unit.groups],
    }


def render_hop(hop: HopResult) -> dict[str, Any]:
    return {
        "hop": hop.hop_index,
        "sourceUrl": hop.source_url,
        "nextUrl": hop.next_url,
        "strategy": hop.strategy_used.value,
    }


def render_selection(selection: PreferredSelection) -> dict[str, Any]:
    return {
        "unit": selection.unit,
        "quality": selection.quality,
        "link": render_link(selection.link),
        "token": selection.token,
    }


def render_error(error: LinkhopError) -> dict[str, Any]:
    """Error payload; hop details are included for manual continuation."""
    payload: dict[str, Any] = {"kind": error.kind, "message": str(error)}
    if isinstance(error, ResolutionError):
        payload["hop"] = error.hop
        payload["url"] = error.url
    if isinstance(error, FetchError):
        payload["cause"] = error.cause
        payload["statusCode"] = error.status_code
    if isinstance(error, DecodeError) and error.token is not None:
        payload["tokenLength"] = len(error.token)
    return payload


def render_result(result: ResolutionResult) -> dict[str, Any]:
    return {
        "ok": result.ok,
        "title": result.title,
        "poster": result.poster,
        "startUrl": result.start_url,
        "lastUrl": result.last_url,
        "terminalTitle": result.terminal_title,
        "isArchiveOnly": result.is_archive_only,
        "streamAvailable": result.stream_available,
        "action": result.action,
        "hops": [render_hop(h) for h in result.hops],
        "units": [render_unit(u) for u in result.units],
        "selections": [render_selection(s) for s in result.selections],
        "error": render_error(result.error) if result.error else None,
    }


def render_context(context: RoutingContext) -> dict[str, Any]:
    return {
        "destinationRef": context.destination_ref,
        "title": context.title,
        "posterRef": context.poster_ref,
        "contentId": context.content_id,
        "season": context.season,
        "serverHint": context.server_hint,
        "qualityHint": context.quality_hint,
    }
