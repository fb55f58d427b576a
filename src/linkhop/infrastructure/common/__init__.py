"""Common infrastructure utilities."""

from __future__ import annotations

from .html_selectors import parse_html
from .parsers import format_size_mb, parse_size_to_mb
from .retry_transport import RetryTransport

__all__ = [
    "RetryTransport",
    "format_size_mb",
    "parse_html",
    "parse_size_to_mb",
]
