"""Bounded redirect-chain resolution.

``max_hops`` counts page fetches. Every page but the last must yield a
next-hop URL; the last one fetched is the terminal page.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from linkhop.domain.entities.errors import ExtractionError, ResolutionError
from linkhop.domain.entities.links import HopResult, TerminalPage
from linkhop.domain.ports.page_fetcher import PageFetcherPort
from linkhop.infrastructure.common.html_selectors import first_text, parse_html
from linkhop.infrastructure.resolution.strategies import (
    NamedStrategy,
    extract_next_url,
)

log = structlog.get_logger(__name__)


def page_title(html: str) -> str:
    """``<title>`` text, else the first ``<h1>``; empty when neither exists."""
    return first_text(parse_html(html), "title", "h1")


def is_archive_title(title: str, archive_extensions: Sequence[str]) -> bool:
    lowered = title.strip().lower()
    return any(lowered.endswith(ext.lower()) for ext in archive_extensions)


class HopResolver:
    """Follows extraction hops from a start URL to the terminal page."""

    def __init__(
        self,
        fetcher: PageFetcherPort,
        strategies: Sequence[NamedStrategy],
        *,
        max_hops: int = 2,
        archive_extensions: Sequence[str] = (".zip",),
    ) -> None:
        if max_hops < 1:
            raise ValueError("max_hops must be >= 1")
        self._fetcher = fetcher
        self._strategies = list(strategies)
        self._max_hops = max_hops
        self._archive_extensions = tuple(archive_extensions)

    async def resolve(self, start_url: str) -> TerminalPage:
        """Raises ``FetchError``/``ExtractionError`` for the failing hop.

        The raised error carries the hops completed before it in ``hops``.
        """
        hops: list[HopResult] = []
        try:
            return await self._follow(start_url, hops)
        except ResolutionError as e:
            e.hops = tuple(hops)
            raise

    async def _follow(self, start_url: str, hops: list[HopResult]) -> TerminalPage:
        url = start_url
        for hop in range(1, self._max_hops):
            page = await self._fetcher.fetch(url, hop=hop)
            found = extract_next_url(page.html, page.url, self._strategies)
            if found is None:
                log.warning("hop_extraction_failed", hop=hop, url=page.url)
                raise ExtractionError(
                    "No next-hop URL found on the page", hop=hop, url=page.url
                )
            next_url, kind = found
            hops.append(
                HopResult(
                    next_url=next_url,
                    strategy_used=kind,
                    hop_index=hop,
                    source_url=page.url,
                )
            )
            log.info("hop_extracted", hop=hop, strategy=kind.value, next_url=next_url)
            url = next_url

        terminal = await self._fetcher.fetch(url, hop=self._max_hops)
        title = page_title(terminal.html)
        is_archive = is_archive_title(title, self._archive_extensions)
        log.info(
            "terminal_page_reached",
            url=terminal.url,
            hops=len(hops),
            title=title,
            is_archive_only=is_archive,
        )
        return TerminalPage(
            url=terminal.url,
            html=terminal.html,
            title=title,
            is_archive_only=is_archive,
            start_url=start_url,
            hops=tuple(hops),
        )
