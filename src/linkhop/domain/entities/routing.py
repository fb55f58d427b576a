"""Routing context carried between navigation steps.

Pure value object: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TITLE = "Unknown Title"
PLACEHOLDER_POSTER = "/placeholder.svg"
DEFAULT_RECONSTRUCTION_TEMPLATE = "https://vcloud.zip/{id}"


@dataclass(frozen=True)
class RoutingContext:
    """Navigation state encoded into a routing token.

    ``destination_ref`` is either a full URL or an opaque host-side id.
    When it is missing, ``content_id`` must be present and the start URL
    has to be reconstructed (legacy links).
    """

    destination_ref: str | None
    title: str = DEFAULT_TITLE
    poster_ref: str | None = None
    content_id: str | None = None
    season: str | None = None
    server_hint: str | None = None
    quality_hint: str | None = None

    def __post_init__(self) -> None:
        if not self.destination_ref and not self.content_id:
            raise ValueError("RoutingContext needs destination_ref or content_id")

    @property
    def has_url(self) -> bool:
        """True when ``destination_ref`` is a full http(s) URL."""
        ref = (self.destination_ref or "").lower()
        return ref.startswith(("http://", "https://"))

    @property
    def needs_reconstruction(self) -> bool:
        """True when the start URL must be built from an id."""
        return not self.has_url

    def start_url(self, template: str = DEFAULT_RECONSTRUCTION_TEMPLATE) -> str:
        """First URL of the hop chain.

        Full http(s) destinations are used as-is; an opaque id (or a bare
        ``content_id`` on legacy links) is substituted into *template* at
        ``{id}``.
        """
        if not self.needs_reconstruction and self.destination_ref:
            return self.destination_ref
        ref = self.destination_ref or self.content_id or ""
        return template.replace("{id}", ref)
