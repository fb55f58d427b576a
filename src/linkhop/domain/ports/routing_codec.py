"""Port for encoding/decoding routing tokens."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from linkhop.domain.entities.errors import DecodeError
from linkhop.domain.entities.routing import RoutingContext


@runtime_checkable
class RoutingCodecPort(Protocol):
    """Reversible, URL-safe codec for ``RoutingContext``.

    Decoding never raises for malformed input; it returns ``DecodeError``.
    """

    def encode(self, context: RoutingContext) -> str: ...

    def decode(self, token: str) -> RoutingContext | DecodeError: ...

    def decode_params(self, params: Mapping[str, str]) -> RoutingContext | DecodeError:
        """Decode legacy discrete query parameters."""
        ...
