"""Parsing utilities for size, quality and episode strings.

Everything here operates on untrusted text scraped from remote pages and
never raises: unparseable input yields ``None``.
"""

from __future__ import annotations

import math
import re

# "1,200" and "1,200.5" are thousands-grouped; "1,5" is a decimal comma.
_NUMBER = r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:[.,]\d+)?"
_THOUSANDS_RE = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?")
_SIZE_RE = re.compile(rf"({_NUMBER})\s*([KMGT]i?B)?\b", re.IGNORECASE)
_SIZE_IN_TEXT_RE = re.compile(rf"((?:{_NUMBER})\s*[KMGT]i?B)\b", re.IGNORECASE)
_QUALITY_RE = re.compile(
    r"\b(\d{3,4}\s?p(?:\s+(?:10\s?bit|hevc|x265|x264|hdr|4k|sdr|dv))*|4k|uhd)\b",
    re.IGNORECASE,
)
_EPISODE_PATTERNS = (
    re.compile(r"-?:?\s*episodes?\s*:?\s*(\d+)", re.IGNORECASE),
    re.compile(r"\bep(?:isode)?\.?\s*(\d+)\b", re.IGNORECASE),
    re.compile(r"\bS\d{1,2}\s?E(\d{1,3})\b", re.IGNORECASE),
)

_MB_MULTIPLIERS = {
    "KB": 1 / 1024,
    "KIB": 1 / 1024,
    "MB": 1.0,
    "MIB": 1.0,
    "GB": 1024.0,
    "GIB": 1024.0,
    "TB": 1024.0**2,
    "TIB": 1024.0**2,
}


def _to_float(number: str) -> float:
    if _THOUSANDS_RE.fullmatch(number):
        return float(number.replace(",", ""))
    return float(number.replace(",", "."))


def parse_size_to_mb(size_str: str | None) -> float | None:
    """Parse a size string to megabytes.

    Supports formats:
        - "700MB", "700 mb"
        - "1.2GB", "1,2 GB"
        - "1,200 MB" (thousands separator)
        - "512 KB"
        - "900" (unit-less, treated as MB)

    Returns ``None`` for empty, "unknown" or otherwise unparseable input
    and for non-positive values.
    """
    if not size_str:
        return None

    match = _SIZE_RE.search(size_str.strip())
    if not match:
        return None

    try:
        value = _to_float(match.group(1))
    except ValueError:
        return None

    unit = (match.group(2) or "MB").upper()
    size_mb = value * _MB_MULTIPLIERS.get(unit, 1.0)
    if size_mb <= 0:
        return None
    return size_mb


def format_size_mb(size_mb: float) -> str:
    """Render megabytes as "1.2GB" (>= 1 GB, one decimal) or "700MB"."""
    if size_mb >= 1024:
        return f"{size_mb / 1024:.1f}GB"
    # Half-up rounding; round() would round 700.5 to 700.
    return f"{math.floor(size_mb + 0.5)}MB"


def find_size(text: str | None) -> str | None:
    """Return the first "<number><unit>" size token found in *text*."""
    if not text:
        return None
    match = _SIZE_IN_TEXT_RE.search(text)
    return match.group(1).strip() if match else None


def find_quality(text: str | None) -> str | None:
    """Return the quality label in *text*, including variant suffixes.

    "Season 4 720p HEVC [1.2GB]" -> "720p HEVC".
    """
    if not text:
        return None
    match = _QUALITY_RE.search(text)
    return " ".join(match.group(1).split()) if match else None


def find_episode(text: str | None) -> int | None:
    """Parse an episode number from headings like "-:Episodes: 3:-" or "EP 03"."""
    if not text:
        return None
    for pattern in _EPISODE_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None
