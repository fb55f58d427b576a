"""Tests for HopResolver (bounded redirect chain)."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from linkhop.domain.entities import (
    ExtractionError,
    ExtractionStrategyKind,
    FetchedPage,
    FetchError,
)
from linkhop.infrastructure.config.schema import ResolverConfig
from linkhop.infrastructure.resolution import (
    HopResolver,
    HttpxPageFetcher,
    build_strategies,
)
from linkhop.infrastructure.resolution.hop_resolver import (
    is_archive_title,
    page_title,
)

START = "https://vcloud.zip/abc"
NEXT = "https://gamerxyt.com/hubcloud.php?host=vcloud&id=abc&token=xyz"


def _resolver(client: httpx.AsyncClient, **kwargs) -> HopResolver:
    return HopResolver(
        HttpxPageFetcher(client, hop_timeout=2.0),
        build_strategies(ResolverConfig()),
        **kwargs,
    )


class TestPageTitle:
    def test_title_tag(self) -> None:
        assert page_title("<title> Show.S01.zip </title>") == "Show.S01.zip"

    def test_h1_fallback(self) -> None:
        assert page_title("<body><h1>Movie.mkv</h1></body>") == "Movie.mkv"

    def test_archive_detection_case_insensitive(self) -> None:
        assert is_archive_title("Pack.ZIP", [".zip"]) is True
        assert is_archive_title("Movie.mkv", [".zip"]) is False


class TestHopResolver:
    @respx.mock
    async def test_two_hop_chain(self, hop_page_var: str, terminal_page: str) -> None:
        respx.get(START).respond(200, text=hop_page_var)
        respx.get(NEXT).respond(200, text=terminal_page)

        async with httpx.AsyncClient() as client:
            terminal = await _resolver(client).resolve(START)

        assert terminal.url == NEXT
        assert terminal.start_url == START
        assert terminal.title == "Show.S01.720p.WEB-DL.mkv"
        assert terminal.is_archive_only is False
        assert len(terminal.hops) == 1
        hop = terminal.hops[0]
        assert hop.hop_index == 1
        assert hop.next_url == NEXT
        assert hop.strategy_used is ExtractionStrategyKind.VARIABLE_ASSIGNMENT
        assert hop.source_url == START

    @respx.mock
    async def test_zip_terminal_is_archive_only(self, hop_page_var: str) -> None:
        respx.get(START).respond(200, text=hop_page_var)
        respx.get(NEXT).respond(
            200, text="<title>Show.S01.Complete.720p.zip</title><a class='btn'>x</a>"
        )

        async with httpx.AsyncClient() as client:
            terminal = await _resolver(client).resolve(START)

        assert terminal.is_archive_only is True

    @respx.mock
    async def test_extraction_failure_reports_hop_and_url(self) -> None:
        respx.get(START).respond(200, text="<html><p>nothing here</p></html>")

        async with httpx.AsyncClient() as client:
            with pytest.raises(ExtractionError) as exc_info:
                await _resolver(client).resolve(START)

        assert exc_info.value.hop == 1
        assert exc_info.value.url == START
        assert exc_info.value.hops == ()

    @respx.mock
    async def test_fetch_failure_on_second_hop_keeps_completed_hops(
        self, hop_page_var: str
    ) -> None:
        respx.get(START).respond(200, text=hop_page_var)
        respx.get(NEXT).respond(500)

        async with httpx.AsyncClient() as client:
            with pytest.raises(FetchError) as exc_info:
                await _resolver(client).resolve(START)

        err = exc_info.value
        assert err.hop == 2
        assert err.url == NEXT
        assert len(err.hops) == 1
        assert err.hops[0].next_url == NEXT

    @respx.mock
    async def test_single_hop_treats_start_as_terminal(
        self, terminal_page: str
    ) -> None:
        route = respx.get(START).respond(200, text=terminal_page)

        async with httpx.AsyncClient() as client:
            terminal = await _resolver(client, max_hops=1).resolve(START)

        assert route.call_count == 1
        assert terminal.url == START
        assert terminal.hops == ()

    async def test_three_hops_with_mock_fetcher(self) -> None:
        pages = {
            "https://a.example/": "<script>var url = 'https://b.example/';</script>",
            "https://b.example/": '<a href="/c?token=1">go</a>',
            "https://b.example/c?token=1": "<title>done</title>",
        }
        fetcher = AsyncMock()
        fetcher.fetch.side_effect = lambda url, hop: FetchedPage(url, pages[url])
        resolver = HopResolver(
            fetcher, build_strategies(ResolverConfig()), max_hops=3
        )

        terminal = await resolver.resolve("https://a.example/")

        assert terminal.title == "done"
        assert [h.strategy_used for h in terminal.hops] == [
            ExtractionStrategyKind.VARIABLE_ASSIGNMENT,
            ExtractionStrategyKind.ANCHOR_TOKEN,
        ]
        assert [c.kwargs["hop"] for c in fetcher.fetch.await_args_list] == [1, 2, 3]

    def test_rejects_zero_hops(self) -> None:
        with pytest.raises(ValueError):
            HopResolver(AsyncMock(), [], max_hops=0)
