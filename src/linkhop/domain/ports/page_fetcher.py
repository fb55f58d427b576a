"""Port for retrieving page content during hop resolution."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from linkhop.domain.entities.links import FetchedPage


@runtime_checkable
class PageFetcherPort(Protocol):
    """Fetches a single page for one hop of a redirect chain.

    Implementations raise ``FetchError`` (with the given *hop*) on network
    failures, timeouts and unusable responses.
    """

    async def fetch(self, url: str, *, hop: int) -> FetchedPage:
        """GET *url* and return its content."""
        ...
