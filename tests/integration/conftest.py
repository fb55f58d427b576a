"""Shared fixtures for integration tests.

These tests use real infrastructure components (HttpxPageFetcher,
HopResolver, LinkClassifier, UnitAggregator) with mocked HTTP via respx.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from linkhop.application.use_cases import ResolveLinksUseCase
from linkhop.infrastructure.config.schema import AppConfig
from linkhop.interfaces.composition import build_resolve_use_case


@pytest.fixture()
async def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def resolve_uc(
    app_config: AppConfig, http_client: httpx.AsyncClient
) -> ResolveLinksUseCase:
    """Fully wired use case over the real infrastructure."""
    return build_resolve_use_case(app_config, http_client)
