"""Tests for quality normalization and size estimation."""

from __future__ import annotations

import pytest

from linkhop.infrastructure.aggregation import estimate_size, normalize_quality
from linkhop.infrastructure.config.schema import AggregatorConfig

DEFAULTS = {
    normalize_quality(q): s for q, s in AggregatorConfig().default_size_ranges.items()
}


class TestNormalizeQuality:
    def test_variant_stays_distinct(self) -> None:
        assert normalize_quality("720p") != normalize_quality("720p HEVC")

    def test_spacing_and_case(self) -> None:
        assert normalize_quality("1080 P") == normalize_quality("1080p")

    def test_dash_and_underscore(self) -> None:
        assert normalize_quality("720p-10_bit") == "720p10bit"


class TestEstimateSize:
    def test_range(self) -> None:
        assert estimate_size(["700MB", "1.2GB"], "720p") == "700MB–1.2GB"

    def test_single_value(self) -> None:
        assert estimate_size(["900MB"], "720p") == "900MB"

    def test_equal_values_collapse(self) -> None:
        assert estimate_size(["1.2GB", "1.2 GB"], "720p") == "1.2GB"

    def test_unparseable_excluded(self) -> None:
        assert estimate_size(["Unknown", None, "850MB"], "720p") == "850MB"

    @pytest.mark.parametrize(
        ("quality", "expected"),
        [
            ("2160p", "8–12GB"),
            ("4K", "8–12GB"),
            ("1080p", "2–4GB"),
            ("720p", "1–2GB"),
            ("480p", "500–800MB"),
            ("720p HEVC", "Unknown"),
            ("Unknown", "Unknown"),
        ],
    )
    def test_defaults_without_sizes(self, quality: str, expected: str) -> None:
        assert estimate_size([], quality, default_ranges=DEFAULTS) == expected

    def test_no_defaults_configured(self) -> None:
        assert estimate_size([], "1080p") == "Unknown"
