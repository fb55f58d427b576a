"""Shared test fixtures for the linkhop test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from linkhop.domain.entities import CandidateLink, HostTier, RoutingContext
from linkhop.infrastructure.codec import RoutingCodec
from linkhop.infrastructure.config.schema import AppConfig

# ---------------------------------------------------------------------------
# HTML fixtures
# ---------------------------------------------------------------------------

HOP_PAGE_VAR = """
<html><head><title>Generating link...</title></head>
<body>
<script>
  var url = 'https://gamerxyt.com/hubcloud.php?host=vcloud&id=abc&token=xyz';
  setTimeout(function () { window.location.href = url; }, 3000);
</script>
<a class="btn" href="/other?token=zzz">Continue</a>
</body></html>
"""

HOP_PAGE_ANCHOR = """
<html><head><title>Please wait</title></head>
<body>
<a href="/faq">FAQ</a>
<a id="download" href="/gen.php?id=42&token=abc123">Generate Direct Download Link</a>
</body></html>
"""

TERMINAL_PAGE = """
<html><head><title>Show.S01.720p.WEB-DL.mkv</title></head>
<body>
<div class="card">
<h3>Season 1 720p [1.2GB]</h3>
<a class="btn btn-success" href="https://pub-1234abcd.r2.dev/file.mkv">
  Download [Server : 10Gbps]</a>
<a class="btn btn-danger" href="https://pixeldrain.dev/api/file/abc">
  Download [PixelServer : 2]</a>
<a class="btn btn-primary" href="https://fsl.blockxpiracy.org/dl/abc">
  Download [FSL Server]</a>
<a class="btn" href="https://example-host.net/dl/abc">Download [Server : 1]</a>
<a class="btn" href="https://t.me/joinchat/abc">Join our Telegram</a>
<a class="btn" href="#">Download [Broken]</a>
<a class="btn" href="https://pixeldrain.dev/api/file/abc">Download [Mirror]</a>
</div>
</body></html>
"""


@pytest.fixture()
def hop_page_var() -> str:
    return HOP_PAGE_VAR


@pytest.fixture()
def hop_page_anchor() -> str:
    return HOP_PAGE_ANCHOR


@pytest.fixture()
def terminal_page() -> str:
    return TERMINAL_PAGE


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def routing_context() -> RoutingContext:
    """Fully populated RoutingContext."""
    return RoutingContext(
        destination_ref="https://vcloud.zip/abc123",
        title="Some Show (2024)",
        poster_ref="https://image.tmdb.org/t/p/w500/poster.jpg",
        content_id="12345",
        season="1",
        server_hint="V-Cloud",
        quality_hint="720p",
    )


@pytest.fixture()
def make_candidate() -> Callable[..., CandidateLink]:
    """Factory for CandidateLink with sensible defaults."""

    def _make(
        url: str = "https://host.example/file",
        *,
        label: str = "Server 1",
        tier: HostTier = HostTier.OTHER,
        section: str = "",
        size: str | None = None,
        quality: str | None = None,
        server: str = "",
    ) -> CandidateLink:
        return CandidateLink(
            label=label,
            raw_text=f"Download [{label}]",
            url=url,
            host_tier=tier,
            server=server or label,
            section=section,
            size=size,
            quality=quality,
        )

    return _make


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def codec() -> RoutingCodec:
    return RoutingCodec()


@pytest.fixture()
def app_config() -> AppConfig:
    """Test config: console logging, default engine settings."""
    return AppConfig(environment="test")
