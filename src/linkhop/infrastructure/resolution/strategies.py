"""Next-hop URL extraction strategies.

Each strategy is a pure function ``(html, page_url) -> str | None``. They
are tried in configured order and the first non-``None`` result wins, so
supporting a new distribution format means appending one more strategy.
"""

from __future__ import annotations

import base64
import binascii
import codecs
import json
import re
from collections.abc import Callable, Sequence
from typing import NamedTuple
from urllib.parse import parse_qs, urlsplit

from linkhop.domain.entities.links import ExtractionStrategyKind
from linkhop.infrastructure.common.html_selectors import (
    absolute_url,
    is_usable_href,
    parse_html,
)
from linkhop.infrastructure.config.schema import ResolverConfig

Strategy = Callable[[str, str], str | None]

_REDIRECT_PAYLOAD_PATTERNS = (
    re.compile(r"""reurl\s*=\s*["']https?://[^"']*\?r=([^"']+)["']"""),
    re.compile(r"""["']https?://hubcdn\.fans/[^"']*\?r=([^"']+)["']"""),
    re.compile(r"\?r=([A-Za-z0-9+/=_-]{16,})"),
)
_REDIRECT_WRAPPER_KEY = "link="

_LAYERED_PAYLOAD_PATTERNS = (
    re.compile(r"""['"]o['"],\s*'([^']+)',\s*\d+\s*\*\s*1000"""),
    re.compile(r"""['"]o['"],\s*"([^"]+)",\s*\d+\s*\*\s*1000"""),
)


class NamedStrategy(NamedTuple):
    kind: ExtractionStrategyKind
    extract: Strategy


def _b64decode_text(value: str) -> str:
    """Decode standard or URL-safe base64 (padding optional) to UTF-8 text."""
    value = value.strip()
    padded = value + "=" * (-len(value) % 4)
    if "-" in value or "_" in value:
        raw = base64.urlsafe_b64decode(padded)
    else:
        raw = base64.b64decode(padded)
    return raw.decode("utf-8")


def _looks_like_url(value: str) -> bool:
    return value.lower().startswith(("http://", "https://", "/"))


def variable_assignment_strategy(variable_names: Sequence[str]) -> Strategy:
    """Match ``var url = '...'`` style assignments of a quoted URL."""
    names = "|".join(re.escape(name) for name in variable_names)
    pattern = re.compile(
        rf"""\b(?:var|let|const)\s+(?:{names})\s*=\s*(["'])(.*?)\1"""
    )

    def extract(html: str, page_url: str) -> str | None:
        for match in pattern.finditer(html):
            value = match.group(2).strip()
            url = absolute_url(value, page_url) if _looks_like_url(value) else None
            if url:
                return url
        return None

    return extract


def anchor_token_strategy(token_query_key: str) -> Strategy:
    """First anchor whose href carries the token query key."""
    selector = f'a[href*="{token_query_key}="]'

    def extract(html: str, page_url: str) -> str | None:
        soup = parse_html(html)
        for anchor in soup.select(selector):
            href = anchor.get("href")
            if isinstance(href, str) and is_usable_href(href):
                query = parse_qs(urlsplit(href).query)
                url = absolute_url(href, page_url)
                if token_query_key in query and url:
                    return url
        return None

    return extract


def redirect_payload_strategy(html: str, page_url: str) -> str | None:
    """Base64 ``?r=`` payload, unwrapping a ``/dl/?link=`` wrapper."""
    for pattern in _REDIRECT_PAYLOAD_PATTERNS:
        match = pattern.search(html)
        if not match:
            continue
        try:
            decoded = _b64decode_text(match.group(1))
        except (binascii.Error, ValueError, UnicodeDecodeError):
            continue
        if _REDIRECT_WRAPPER_KEY in decoded and "/dl/" in decoded:
            decoded = decoded.split(_REDIRECT_WRAPPER_KEY, 1)[1]
        url = absolute_url(decoded, page_url) if _looks_like_url(decoded) else None
        if url:
            return url
    return None


def decode_layered_payload(payload: str) -> str:
    """base64 -> base64 -> ROT13 -> base64 -> JSON; ``o`` holds the base64 URL.

    Raises ``ValueError`` when any layer is malformed.
    """
    try:
        layer = _b64decode_text(payload)
        layer = _b64decode_text(layer)
        layer = codecs.decode(layer, "rot_13")
        data = json.loads(_b64decode_text(layer))
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"malformed layered payload: {e}") from e
    if not isinstance(data, dict) or not data.get("o"):
        raise ValueError("layered payload has no 'o' link")
    try:
        return _b64decode_text(str(data["o"]))
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"malformed 'o' link: {e}") from e


def layered_payload_strategy(html: str, page_url: str) -> str | None:
    """``'o', '<payload>', N*1000`` timer payload."""
    for pattern in _LAYERED_PAYLOAD_PATTERNS:
        match = pattern.search(html)
        if not match:
            continue
        try:
            url = decode_layered_payload(match.group(1))
        except ValueError:
            continue
        resolved = absolute_url(url, page_url) if _looks_like_url(url) else None
        if resolved:
            return resolved
    return None


def build_strategies(config: ResolverConfig) -> list[NamedStrategy]:
    """Instantiate the configured strategies in priority order."""
    factories: dict[str, Callable[[], Strategy]] = {
        "variable_assignment": lambda: variable_assignment_strategy(
            config.variable_names
        ),
        "anchor_token": lambda: anchor_token_strategy(config.token_query_key),
        "redirect_payload": lambda: redirect_payload_strategy,
        "layered_payload": lambda: layered_payload_strategy,
    }
    return [
        NamedStrategy(ExtractionStrategyKind(name), factories[name]())
        for name in config.strategies
    ]


def extract_next_url(
    html: str,
    page_url: str,
    strategies: Sequence[NamedStrategy],
) -> tuple[str, ExtractionStrategyKind] | None:
    """Run *strategies* in order; stop at the first one yielding a URL."""
    for strategy in strategies:
        url = strategy.extract(html, page_url)
        if url:
            return url, strategy.kind
    return None
