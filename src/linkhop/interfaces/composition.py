"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from linkhop.application.use_cases import ResolveLinksUseCase
from linkhop.infrastructure.aggregation import UnitAggregator
from linkhop.infrastructure.classification import LinkClassifier
from linkhop.infrastructure.codec import RoutingCodec
from linkhop.infrastructure.common.retry_transport import RetryTransport
from linkhop.infrastructure.config.schema import AppConfig
from linkhop.infrastructure.resolution import (
    HopResolver,
    HttpxPageFetcher,
    build_strategies,
)
from linkhop.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    transport = RetryTransport(
        wrapped=httpx.AsyncHTTPTransport(),
        max_retries=config.http_max_retries,
        backoff_base=config.http_backoff_base,
        max_backoff=config.http_max_backoff,
    )
    return httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )


def build_resolve_use_case(
    config: AppConfig,
    http_client: httpx.AsyncClient,
    codec: RoutingCodec | None = None,
) -> ResolveLinksUseCase:
    """Wire fetcher, strategies, classifier and aggregator from *config*."""
    resolver_cfg = config.resolver
    fetcher = HttpxPageFetcher(
        http_client,
        hop_timeout=resolver_cfg.hop_timeout_seconds,
    )
    resolver = HopResolver(
        fetcher,
        build_strategies(resolver_cfg),
        max_hops=resolver_cfg.max_hops,
        archive_extensions=resolver_cfg.archive_extensions,
    )
    return ResolveLinksUseCase(
        codec=codec or RoutingCodec(),
        resolver=resolver,
        classifier=LinkClassifier(config.classifier),
        aggregator=UnitAggregator(config.aggregator),
        reconstruction_template=resolver_cfg.reconstruction_url_template,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP Client (shared connection pool for all hop fetches)
        2. Routing codec (stateless)
        3. Resolve use case (uses HTTP client + codec)
    """
    state = cast(AppState, app.state)
    config = state.config

    state.http_client = build_http_client(config)
    log.info(
        "http_client_initialized",
        timeout=config.http_timeout_seconds,
        max_retries=config.http_max_retries,
    )

    state.codec = RoutingCodec()
    state.resolve_uc = build_resolve_use_case(config, state.http_client, state.codec)
    log.info(
        "resolver_initialized",
        max_hops=config.resolver.max_hops,
        hop_timeout=config.resolver.hop_timeout_seconds,
        strategies=config.resolver.strategies,
    )

    log.info("app_startup_complete", app_name=config.app_name)
    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")
        log.info("app_shutdown_complete")
