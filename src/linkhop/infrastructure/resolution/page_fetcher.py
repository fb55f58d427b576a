"""httpx-backed page fetcher for hop resolution."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from linkhop.domain.entities.errors import FetchError
from linkhop.domain.entities.links import FetchedPage

log = structlog.get_logger(__name__)

# Anti-bot interstitials are served with 200/403/503 and no usable content.
_CHALLENGE_MARKERS = (
    "Just a moment...",
    "cf-browser-verification",
    "challenge-platform",
)


def _is_challenge_page(html: str) -> bool:
    head = html[:4096]
    return any(marker in head for marker in _CHALLENGE_MARKERS)


class HttpxPageFetcher:
    """Fetches hop pages through a shared ``httpx.AsyncClient``.

    Every hop is bounded by *hop_timeout* seconds in total, redirects and
    body included. Redirects follow the client's ``follow_redirects``
    setting. No retries happen here; retry on 429/503 is the transport's
    job (``RetryTransport``).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        hop_timeout: float = 8.0,
        user_agent: str | None = None,
    ) -> None:
        self._http = http_client
        self._timeout = hop_timeout
        self._headers = {"User-Agent": user_agent} if user_agent else {}

    async def fetch(self, url: str, *, hop: int) -> FetchedPage:
        try:
            async with asyncio.timeout(self._timeout):
                resp = await self._http.get(
                    url, headers=self._headers, timeout=self._timeout
                )
        except (httpx.TimeoutException, TimeoutError) as e:
            log.warning("hop_fetch_failed", hop=hop, url=url, cause="timeout")
            raise FetchError(
                f"Timed out after {self._timeout:g}s", hop=hop, url=url, cause="timeout"
            ) from e
        except httpx.InvalidURL as e:
            log.warning("hop_fetch_failed", hop=hop, url=url, cause="invalid_url")
            raise FetchError(
                f"Invalid URL: {e}", hop=hop, url=url, cause="invalid_url"
            ) from e
        except httpx.HTTPError as e:
            log.warning("hop_fetch_failed", hop=hop, url=url, cause=type(e).__name__)
            raise FetchError(
                f"Request failed: {e}", hop=hop, url=url, cause=type(e).__name__
            ) from e

        html = resp.text
        if _is_challenge_page(html):
            log.warning(
                "hop_fetch_failed",
                hop=hop,
                url=url,
                cause="challenge",
                status=resp.status_code,
            )
            raise FetchError(
                "Blocked by an anti-bot challenge page",
                hop=hop,
                url=url,
                cause="challenge",
                status_code=resp.status_code,
            )

        if not resp.is_success:
            log.warning(
                "hop_fetch_failed",
                hop=hop,
                url=url,
                cause="http_status",
                status=resp.status_code,
            )
            raise FetchError(
                f"HTTP {resp.status_code}",
                hop=hop,
                url=url,
                cause="http_status",
                status_code=resp.status_code,
            )

        log.debug("hop_fetched", hop=hop, url=url, final_url=str(resp.url))
        return FetchedPage(url=str(resp.url), html=html, status_code=resp.status_code)
