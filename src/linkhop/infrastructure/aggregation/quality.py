"""Quality label normalization and size estimation."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from linkhop.infrastructure.common.parsers import format_size_mb, parse_size_to_mb

UNKNOWN_QUALITY = "Unknown"
UNKNOWN_SIZE = "Unknown"
RANGE_SEPARATOR = "–"

_NORMALIZE_RE = re.compile(r"[\s_\-]+")


def normalize_quality(label: str) -> str:
    """Lowercase and drop whitespace, dashes and underscores.

    Labels are only ever compared for exact equality after this, so
    "720p" and "720p HEVC" stay distinct while "1080 P" == "1080p".
    """
    return _NORMALIZE_RE.sub("", label.lower())


def estimate_size(
    sizes: Iterable[str | None],
    quality: str,
    *,
    default_ranges: Mapping[str, str] | None = None,
    unknown: str = UNKNOWN_SIZE,
) -> str:
    """Size range for a quality group.

    ``min–max`` of the parseable sizes (a single value when they render the
    same), else the static default for *quality*, else *unknown*.
    """
    parsed = [mb for mb in (parse_size_to_mb(s) for s in sizes) if mb is not None]
    if not parsed:
        return (default_ranges or {}).get(normalize_quality(quality), unknown)

    low = format_size_mb(min(parsed))
    high = format_size_mb(max(parsed))
    if low == high:
        return low
    return f"{low}{RANGE_SEPARATOR}{high}"
