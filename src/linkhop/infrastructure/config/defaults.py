"""Lowest configuration layer; every other source overrides these."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "linkhop",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "max_retries": 0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # console or json, picked by environment
    },
    "resolver": {
        "max_hops": 2,
        "hop_timeout_seconds": 8.0,
        "variable_names": ["url"],
        "token_query_key": "token",
        "strategies": ["variable_assignment", "anchor_token"],
        "archive_extensions": [".zip"],
    },
}
