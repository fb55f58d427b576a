"""Port for resolving a redirect chain to its terminal page."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from linkhop.domain.entities.links import TerminalPage


@runtime_checkable
class HopResolverPort(Protocol):
    async def resolve(self, start_url: str) -> TerminalPage:
        """Follow hops from *start_url* until the terminal page.

        Raises ``FetchError`` or ``ExtractionError`` on the failing hop.
        """
        ...
