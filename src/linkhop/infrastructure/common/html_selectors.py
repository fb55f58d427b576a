"""BeautifulSoup helpers shared by hop extraction and link classification."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

_INVALID_HREFS = ("", "#")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def element_text(element: Tag) -> str:
    """Whitespace-normalized text content of *element*."""
    return " ".join(element.get_text(" ").split())


def first_text(root: BeautifulSoup | Tag, *selectors: str) -> str:
    """Text of the first element matched by any selector, in order."""
    for sel in selectors:
        match = root.select_one(sel)
        if match:
            text = element_text(match)
            if text:
                return text
    return ""


def is_usable_href(href: str | None) -> bool:
    """False for empty, ``#``-placeholder, ``javascript:`` and unparseable URLs."""
    if href is None:
        return False
    value = href.strip()
    if value in _INVALID_HREFS or value.startswith("#"):
        return False
    if value.lower().startswith("javascript:"):
        return False
    return _parses(value)


def _parses(url: str) -> bool:
    try:
        urlsplit(url).port
    except ValueError:
        return False
    return True


def absolute_url(href: str, base_url: str = "") -> str | None:
    """Resolve *href* against *base_url* (no-op without a base).

    Returns None when either side does not parse as a URL, e.g. an
    unbalanced IPv6 bracket (``http://[broken/x``) or a non-numeric port.
    """
    href = href.strip()
    try:
        url = urljoin(base_url, href) if base_url else href
    except ValueError:
        return None
    return url if _parses(url) else None
