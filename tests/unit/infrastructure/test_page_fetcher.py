"""Tests for HttpxPageFetcher."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from linkhop.domain.entities import FetchError
from linkhop.infrastructure.resolution.page_fetcher import HttpxPageFetcher

URL = "https://vcloud.zip/abc"


@pytest.fixture()
async def fetcher() -> HttpxPageFetcher:
    async with httpx.AsyncClient(follow_redirects=True) as client:
        yield HttpxPageFetcher(client, hop_timeout=2.0)


class TestHttpxPageFetcher:
    @respx.mock
    async def test_returns_page(self, fetcher: HttpxPageFetcher) -> None:
        respx.get(URL).respond(200, text="<html>ok</html>")
        page = await fetcher.fetch(URL, hop=1)
        assert page.url == URL
        assert page.html == "<html>ok</html>"
        assert page.status_code == 200

    @respx.mock
    async def test_follows_redirects(self, fetcher: HttpxPageFetcher) -> None:
        respx.get(URL).respond(302, headers={"Location": "https://vcloud.zip/final"})
        respx.get("https://vcloud.zip/final").respond(200, text="final")
        page = await fetcher.fetch(URL, hop=1)
        assert page.url == "https://vcloud.zip/final"
        assert page.html == "final"

    @respx.mock
    async def test_non_2xx_raises(self, fetcher: HttpxPageFetcher) -> None:
        respx.get(URL).respond(404, text="gone")
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL, hop=2)
        assert exc_info.value.hop == 2
        assert exc_info.value.url == URL
        assert exc_info.value.status_code == 404
        assert exc_info.value.cause == "http_status"

    @respx.mock
    async def test_timeout_raises(self, fetcher: HttpxPageFetcher) -> None:
        respx.get(URL).mock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL, hop=1)
        assert exc_info.value.cause == "timeout"

    @respx.mock
    async def test_connect_error_raises(self, fetcher: HttpxPageFetcher) -> None:
        respx.get(URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL, hop=1)
        assert exc_info.value.cause == "ConnectError"

    @respx.mock
    async def test_challenge_page_raises(self, fetcher: HttpxPageFetcher) -> None:
        respx.get(URL).respond(
            403, text="<html><head><title>Just a moment...</title></head></html>"
        )
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL, hop=1)
        assert exc_info.value.cause == "challenge"
        assert exc_info.value.status_code == 403

    @respx.mock
    async def test_redirect_not_followed_when_client_disables_it(self) -> None:
        respx.get(URL).respond(302, headers={"Location": "https://vcloud.zip/final"})
        final = respx.get("https://vcloud.zip/final").respond(200, text="final")

        async with httpx.AsyncClient(follow_redirects=False) as client:
            with pytest.raises(FetchError) as exc_info:
                await HttpxPageFetcher(client).fetch(URL, hop=1)

        assert exc_info.value.cause == "http_status"
        assert exc_info.value.status_code == 302
        assert not final.called

    async def test_hop_timeout_bounds_the_whole_request(self) -> None:
        async def slow_get(*args: object, **kwargs: object) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, text="late")

        client = MagicMock(spec=httpx.AsyncClient)
        client.get = AsyncMock(side_effect=slow_get)

        with pytest.raises(FetchError) as exc_info:
            await HttpxPageFetcher(client, hop_timeout=0.05).fetch(URL, hop=1)

        assert exc_info.value.cause == "timeout"

    async def test_invalid_url_raises_fetch_error(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.get = AsyncMock(side_effect=httpx.InvalidURL("Invalid port"))

        with pytest.raises(FetchError) as exc_info:
            await HttpxPageFetcher(client).fetch("https://host.example:x/", hop=1)

        assert exc_info.value.cause == "invalid_url"
