"""Error taxonomy for token decoding and link resolution.

Errors are regular exceptions so the hop resolver can raise them, but the
resolve use case never lets them escape: every one of them ends up as the
``error`` field of a ``ResolutionResult``.
"""

from __future__ import annotations

from typing import Any


class LinkhopError(Exception):
    """Base error for the resolution engine."""

    kind = "error"


class DecodeError(LinkhopError):
    """Routing token (or legacy parameters) could not be decoded."""

    kind = "decode_error"

    def __init__(self, message: str, *, token: str | None = None) -> None:
        super().__init__(message)
        self.token = token


class ResolutionError(LinkhopError):
    """A hop of the redirect chain failed.

    Carries the 1-based ``hop`` index and the ``url`` that was being
    processed so callers can offer manual continuation. ``hops`` holds the
    steps completed before the failure (filled in by the hop resolver).
    """

    kind = "resolution_error"

    def __init__(self, message: str, *, hop: int, url: str) -> None:
        super().__init__(message)
        self.hop = hop
        self.url = url
        self.hops: tuple[Any, ...] = ()


class FetchError(ResolutionError):
    """Network failure, timeout or unusable HTTP response at a hop."""

    kind = "fetch_error"

    def __init__(
        self,
        message: str,
        *,
        hop: int,
        url: str,
        cause: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hop=hop, url=url)
        self.cause = cause
        self.status_code = status_code


class ExtractionError(ResolutionError):
    """No extraction strategy found a next-hop URL on the page."""

    kind = "extraction_error"


class NoLinksError(LinkhopError):
    """The terminal page yielded zero usable candidate links."""

    kind = "no_links"

    def __init__(
        self,
        message: str = "No usable links on the terminal page",
        *,
        url: str = "",
    ) -> None:
        super().__init__(message)
        self.url = url
