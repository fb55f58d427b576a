"""Layered configuration loading.

Every source is first brought into the sectioned shape of ``config.yaml``
(``http.*``, ``logging.*``, ``resolver.*``, ...) and then merged in order
of precedence:

    defaults < YAML file < environment (incl. .env) < CLI overrides

The merged mapping is validated once, by ``AppConfig``.
"""

from __future__ import annotations

from collections.abc import Iterable
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

log = structlog.get_logger(__name__)

_SECTIONS = ("http", "logging", "resolver", "classifier", "aggregator")
_TOP_LEVEL = ("app_name", "environment")

# Flat override keys (env vars, CLI flags) -> (section, key).
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "http_max_retries": ("http", "max_retries"),
    "http_backoff_base": ("http", "backoff_base"),
    "http_max_backoff": ("http", "max_backoff"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "max_hops": ("resolver", "max_hops"),
    "hop_timeout_seconds": ("resolver", "hop_timeout_seconds"),
    "reconstruction_url_template": ("resolver", "reconstruction_url_template"),
}


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Nested mappings merge key by key; any other value (lists too) replaces."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = deepcopy(value)


def _sectioned(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape; unknown keys are dropped."""
    layer: dict[str, Any] = {
        key: data[key] for key in _TOP_LEVEL if key in data
    }
    for section in _SECTIONS:
        block = data.get(section)
        if isinstance(block, Mapping):
            layer[section] = dict(block)
    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in data:
            layer.setdefault(section, {})[key] = data[flat_key]
    return layer


def _unknown_keys(data: Mapping[str, Any]) -> list[str]:
    known = set(_TOP_LEVEL) | set(_SECTIONS) | set(_FLAT_KEYS)
    return sorted(str(k) for k in data if k not in known)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    unknown = _unknown_keys(parsed)
    if unknown:
        log.warning("config_unknown_keys", path=str(path), keys=unknown)
    return parsed


def _layers(
    config_path: Path | None,
    cli_overrides: Mapping[str, Any],
) -> Iterable[dict[str, Any]]:
    yield _sectioned(DEFAULT_CONFIG)
    if config_path is not None:
        yield _sectioned(_read_yaml(config_path))
    yield _sectioned(EnvOverrides().to_update_dict())
    yield _sectioned(cli_overrides)


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig`` from all configuration sources.

    A ``.env`` file is loaded into the process environment first (existing
    variables win), so it participates as part of the environment layer.
    Nothing is written to disk.

    Raises:
        FileNotFoundError: *config_path* or *dotenv_path* does not exist.
        ValueError: the YAML document is not a mapping.
        pydantic.ValidationError: the merged values are invalid.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    merged: dict[str, Any] = {}
    for layer in _layers(config_path, cli_overrides or {}):
        _merge_into(merged, layer)
    return AppConfig.model_validate(merged)
