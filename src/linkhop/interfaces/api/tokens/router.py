"""Routing token mint/inspect endpoints."""

from __future__ import annotations

from typing import Optional, cast

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field, model_validator

from linkhop.domain.entities import DEFAULT_TITLE, DecodeError, RoutingContext
from linkhop.interfaces.api.resolve.presenter import render_context
from linkhop.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/tokens", tags=["tokens"])


class RoutingContextBody(BaseModel):
    """Request body for minting a routing token."""

    destination_ref: Optional[str] = Field(default=None, alias="destinationRef")
    title: str = Field(default=DEFAULT_TITLE)
    poster_ref: Optional[str] = Field(default=None, alias="posterRef")
    content_id: Optional[str] = Field(default=None, alias="contentId")
    season: Optional[str] = None
    server_hint: Optional[str] = Field(default=None, alias="serverHint")
    quality_hint: Optional[str] = Field(default=None, alias="qualityHint")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _require_destination(self) -> "RoutingContextBody":
        if not self.destination_ref and not self.content_id:
            raise ValueError("destinationRef or contentId is required")
        return self

    def to_context(self) -> RoutingContext:
        return RoutingContext(
            destination_ref=self.destination_ref,
            title=self.title,
            poster_ref=self.poster_ref,
            content_id=self.content_id,
            season=self.season,
            server_hint=self.server_hint,
            quality_hint=self.quality_hint,
        )


@router.post("")
async def mint_token(body: RoutingContextBody, request: Request) -> dict[str, str]:
    """Encode a routing context into a compact URL-safe token."""
    state = cast(AppState, request.app.state)
    token = state.codec.encode(body.to_context())
    log.info("routing_token_minted", token_length=len(token))
    return {"token": token}


@router.get("/{token}")
async def inspect_token(token: str, request: Request) -> dict:
    """Decode a token; 400 with the decode error when it is malformed."""
    state = cast(AppState, request.app.state)
    decoded = state.codec.decode(token)
    if isinstance(decoded, DecodeError):
        raise HTTPException(
            status_code=400,
            detail={"kind": decoded.kind, "message": str(decoded)},
        )
    start = decoded.start_url(state.config.resolver.reconstruction_url_template)
    return {"context": render_context(decoded), "startUrl": start}
