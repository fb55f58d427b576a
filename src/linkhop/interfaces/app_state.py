"""Typed ``app.state`` for the linkhop service."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from linkhop.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from linkhop.application.use_cases import ResolveLinksUseCase
    from linkhop.domain.ports import RoutingCodecPort


class AppState(State):
    """Resources shared by all requests.

    ``config`` is set by ``create_app``; everything else is created and torn
    down by ``composition.lifespan``. Routers read it via
    ``cast(AppState, request.app.state)``.
    """

    config: AppConfig

    # Shared connection pool for every hop fetch
    http_client: httpx.AsyncClient

    codec: RoutingCodecPort
    resolve_uc: ResolveLinksUseCase
