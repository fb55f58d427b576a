"""Compact, URL-safe routing tokens.

Current format: short-keyed JSON, zlib-compressed, unpadded URL-safe
base64. Older links carry uncompressed base64 JSON with long keys, or the
same long keys as discrete query parameters; both are still accepted.
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from collections.abc import Mapping
from typing import Any

import structlog

from linkhop.domain.entities.errors import DecodeError
from linkhop.domain.entities.routing import DEFAULT_TITLE, RoutingContext

log = structlog.get_logger(__name__)

# RoutingContext field -> compact token key.
_SHORT_KEYS: dict[str, str] = {
    "destination_ref": "d",
    "title": "t",
    "poster_ref": "p",
    "content_id": "c",
    "season": "s",
    "server_hint": "v",
    "quality_hint": "q",
}
_FIELDS_BY_SHORT_KEY = {short: name for name, short in _SHORT_KEYS.items()}

# Legacy long keys; the first present key of each tuple wins.
_LEGACY_KEYS: dict[str, tuple[str, ...]] = {
    "destination_ref": ("url", "link", "id", "driveid"),
    "title": ("title",),
    "poster_ref": ("poster",),
    "content_id": ("tmdbid",),
    "season": ("season",),
    "server_hint": ("server",),
    "quality_hint": ("quality",),
}


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(token: str) -> bytes:
    padded = token + "=" * (-len(token) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _is_url(value: str) -> bool:
    return value.lower().startswith(("http://", "https://"))


def _legacy_destination(data: Mapping[str, Any]) -> str | None:
    """Prefer a full ``url``/``link`` over an opaque ``id``/``driveid``."""
    candidates = [
        str(data[key]) for key in _LEGACY_KEYS["destination_ref"] if data.get(key)
    ]
    for value in candidates:
        if _is_url(value):
            return value
    return candidates[0] if candidates else None


def _context_from_legacy(data: Mapping[str, Any]) -> RoutingContext:
    values: dict[str, Any] = {"destination_ref": _legacy_destination(data)}
    for name, keys in _LEGACY_KEYS.items():
        if name == "destination_ref":
            continue
        for key in keys:
            if data.get(key) not in (None, ""):
                values[name] = str(data[key])
                break
    values["title"] = values.get("title") or DEFAULT_TITLE
    return RoutingContext(**values)


class RoutingCodec:
    """Reversible encoder/decoder for ``RoutingContext`` tokens."""

    def encode(self, context: RoutingContext) -> str:
        record = {
            short: getattr(context, name)
            for name, short in _SHORT_KEYS.items()
            if getattr(context, name) is not None
        }
        payload = json.dumps(record, separators=(",", ":"), ensure_ascii=False)
        return _b64encode(zlib.compress(payload.encode("utf-8"), 9))

    def decode(self, token: str) -> RoutingContext | DecodeError:
        """Decode a token; never raises for malformed input."""
        token = (token or "").strip()
        if not token:
            return DecodeError("Empty routing token", token=token)

        try:
            raw = _b64decode(token)
        except (binascii.Error, ValueError) as e:
            return self._failed(token, f"Not URL-safe base64: {e}")

        try:
            return self._decode_compact(raw)
        except (zlib.error, ValueError, TypeError, UnicodeDecodeError):
            pass

        try:
            data = json.loads(raw.decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as e:
            return self._failed(token, f"Unrecognized token payload: {e}")
        if not isinstance(data, dict):
            return self._failed(token, "Token payload is not an object")

        try:
            context = _context_from_legacy(data)
        except ValueError as e:
            return self._failed(token, str(e))
        log.debug("routing_token_legacy_decoded", keys=sorted(data))
        return context

    def decode_params(self, params: Mapping[str, str]) -> RoutingContext | DecodeError:
        """Decode legacy discrete query parameters (``id``, ``url``, ...)."""
        try:
            return _context_from_legacy(params)
        except ValueError as e:
            log.info("routing_params_decode_failed", reason=str(e))
            return DecodeError(str(e))

    def _decode_compact(self, raw: bytes) -> RoutingContext:
        record = json.loads(zlib.decompress(raw).decode("utf-8"))
        if not isinstance(record, dict):
            raise ValueError("compact payload is not an object")
        values: dict[str, Any] = {}
        for short, value in record.items():
            name = _FIELDS_BY_SHORT_KEY.get(short)
            if name is None:
                raise ValueError(f"unknown token key {short!r}")
            values[name] = _as_optional_str(value)
        values.setdefault("destination_ref", None)
        values.setdefault("title", DEFAULT_TITLE)
        if values["title"] is None:
            values["title"] = DEFAULT_TITLE
        return RoutingContext(**values)

    @staticmethod
    def _failed(token: str, reason: str) -> DecodeError:
        log.info("routing_token_decode_failed", reason=reason, token_length=len(token))
        return DecodeError(reason, token=token)
