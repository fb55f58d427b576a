"""Tests for the structlog/dictConfig builder."""

from __future__ import annotations

import logging

import structlog

from linkhop.infrastructure.config.schema import AppConfig
from linkhop.infrastructure.logging.setup import _LevelBand, build_logging_config


class TestBuildLoggingConfig:
    def test_level_applied_except_httpx(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="WARNING"))
        assert cfg["root"]["level"] == "WARNING"
        assert cfg["loggers"]["uvicorn"]["level"] == "WARNING"
        assert cfg["loggers"]["httpx"]["level"] == "WARNING"

    def test_debug_unmutes_httpx(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="DEBUG"))
        assert cfg["loggers"]["httpx"]["level"] == "DEBUG"

    def test_json_renderer_in_prod(self) -> None:
        cfg = build_logging_config(AppConfig(environment="prod"))
        renderer = cfg["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)

    def test_console_renderer_in_dev(self) -> None:
        cfg = build_logging_config(AppConfig(environment="dev"))
        renderer = cfg["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_base_config_not_mutated(self) -> None:
        build_logging_config(AppConfig(log_level="ERROR"))
        cfg = build_logging_config(AppConfig(log_level="INFO"))
        assert cfg["loggers"]["uvicorn"]["level"] == "INFO"

    def test_httpcore_muted_like_httpx(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="INFO"))
        assert cfg["loggers"]["httpcore"]["level"] == "WARNING"


class TestLevelBand:
    def _record(self, level: int) -> logging.LogRecord:
        return logging.LogRecord("linkhop", level, __file__, 1, "msg", None, None)

    def test_stdout_band_stops_at_warning(self) -> None:
        band = _LevelBand(high=logging.WARNING)
        assert band.filter(self._record(logging.WARNING))
        assert not band.filter(self._record(logging.ERROR))

    def test_stderr_band_starts_at_error(self) -> None:
        band = _LevelBand(low=logging.ERROR)
        assert band.filter(self._record(logging.CRITICAL))
        assert not band.filter(self._record(logging.INFO))
