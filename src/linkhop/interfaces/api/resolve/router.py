"""Resolve endpoint: routing token (or legacy parameters) -> grouped links."""

from __future__ import annotations

from typing import Literal, Optional, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from linkhop.interfaces.api.resolve.presenter import render_result
from linkhop.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["resolve"])

_LEGACY_PARAMS = (
    "id",
    "url",
    "link",
    "driveid",
    "title",
    "poster",
    "tmdbid",
    "season",
    "server",
)


@router.get("/resolve")
async def resolve(
    request: Request,
    key: Optional[str] = Query(default=None, description="Routing token."),
    quality: Optional[str] = Query(default=None, description="Quality filter."),
    action: Optional[Literal["stream", "download"]] = Query(default=None),
) -> JSONResponse:
    """Resolve a routing token to classified, grouped destination links.

    Legacy discrete parameters (``id``, ``url``, ``title``, ...) are used
    when ``key`` is absent or cannot be decoded. Engine failures are
    reported with status 200 and an ``error`` object so the client can
    offer manual continuation via ``lastUrl``.
    """
    state = cast(AppState, request.app.state)

    legacy = {
        name: value
        for name in _LEGACY_PARAMS
        if (value := request.query_params.get(name))
    }
    if quality:
        legacy["quality"] = quality

    result = await state.resolve_uc.execute(
        key,
        quality=quality,
        action=action,
        legacy_params=legacy or None,
    )
    log.info(
        "resolve_request",
        ok=result.ok,
        error=result.error.kind if result.error else None,
        units=len(result.units),
        action=action,
    )
    return JSONResponse(content=render_result(result))
