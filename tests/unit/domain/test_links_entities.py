"""Tests for domain entities (routing context, units, results)."""

from __future__ import annotations

import pytest

from linkhop.domain.entities import (
    DEFAULT_TITLE,
    ContentUnit,
    DecodeError,
    ExtractionError,
    FetchError,
    HostTier,
    NoLinksError,
    QualityGroup,
    ResolutionError,
    ResolutionResult,
    RoutingContext,
    UnitKind,
)

TEMPLATE = "https://vcloud.zip/{id}"


class TestRoutingContext:
    def test_requires_destination_or_content_id(self) -> None:
        with pytest.raises(ValueError):
            RoutingContext(destination_ref=None)

    def test_content_id_alone_is_enough(self) -> None:
        context = RoutingContext(destination_ref=None, content_id="42")
        assert context.title == DEFAULT_TITLE
        assert context.needs_reconstruction is True

    def test_full_url_used_as_is(self) -> None:
        context = RoutingContext(destination_ref="HTTPS://host.example/x")
        assert context.has_url is True
        assert context.start_url(TEMPLATE) == "HTTPS://host.example/x"

    def test_opaque_id_reconstructed(self) -> None:
        context = RoutingContext(destination_ref="abc123")
        assert context.start_url(TEMPLATE) == "https://vcloud.zip/abc123"

    def test_content_id_reconstructed(self) -> None:
        context = RoutingContext(destination_ref=None, content_id="777")
        assert context.start_url(TEMPLATE) == "https://vcloud.zip/777"

    def test_frozen(self, routing_context: RoutingContext) -> None:
        with pytest.raises(AttributeError):
            routing_context.title = "changed"  # type: ignore[misc]


class TestHostTier:
    @pytest.mark.parametrize(
        ("tier", "elevated"),
        [
            (HostTier.PREFERRED, True),
            (HostTier.TRUSTED, True),
            (HostTier.OTHER, False),
            (HostTier.BLACKLISTED, False),
        ],
    )
    def test_is_elevated(self, tier: HostTier, elevated: bool) -> None:
        assert tier.is_elevated is elevated


class TestContentUnit:
    def test_keys(self) -> None:
        assert ContentUnit(kind=UnitKind.SINGLE).key == "single"
        assert ContentUnit(kind=UnitKind.EPISODE, episode=4).key == "episode:4"
        assert ContentUnit(kind=UnitKind.BATCH).key == "batch"

    def test_is_empty(self) -> None:
        group = QualityGroup(quality="720p", size_estimate="1–2GB")
        assert ContentUnit(kind=UnitKind.SINGLE).is_empty is True
        assert ContentUnit(kind=UnitKind.SINGLE, groups=(group,)).is_empty is False


class TestResolutionResult:
    def test_ok_and_stream_available(self) -> None:
        result = ResolutionResult(start_url="a", last_url="b")
        assert result.ok is True
        assert result.stream_available is True

    def test_archive_is_download_only(self) -> None:
        result = ResolutionResult(start_url="a", last_url="b", is_archive_only=True)
        assert result.ok is True
        assert result.stream_available is False

    def test_error_disables_stream(self) -> None:
        result = ResolutionResult(
            start_url="a", last_url="b", error=NoLinksError(url="b")
        )
        assert result.ok is False
        assert result.stream_available is False


class TestErrors:
    def test_kinds(self) -> None:
        assert DecodeError("x").kind == "decode_error"
        assert FetchError("x", hop=1, url="u").kind == "fetch_error"
        assert ExtractionError("x", hop=1, url="u").kind == "extraction_error"
        assert NoLinksError().kind == "no_links"

    def test_resolution_errors_share_base(self) -> None:
        err = FetchError("boom", hop=2, url="u", cause="timeout", status_code=None)
        assert isinstance(err, ResolutionError)
        assert err.hop == 2
        assert err.url == "u"
        assert err.hops == ()
