"""structlog + stdlib logging wiring.

structlog events and foreign stdlib records (uvicorn, httpx) share one
renderer. Records are handed to a queue and written by a background
thread, so a resolve request never waits on stream I/O while it is
walking a hop chain.
"""

from __future__ import annotations

import atexit
import copy
import logging
import logging.config
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional

import structlog
from structlog.typing import EventDict, Processor

from linkhop.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Third-party loggers that stay quieter than ours unless DEBUG is asked for.
_NOISY_LOGGERS = ("httpx", "httpcore")


def _drop_color_message(_: Any, __: Any, event_dict: EventDict) -> EventDict:
    # uvicorn duplicates the message as "color_message".
    event_dict.pop("color_message", None)
    return event_dict


def _stamp_record_time(_: Any, __: Any, event_dict: EventDict) -> EventDict:
    """Use the LogRecord's creation time, not the time it was dequeued."""
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = created.isoformat().replace("+00:00", "Z")
    return event_dict


def _renderer(log_format: Optional[str]) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _formatter_spec(log_format: Optional[str]) -> dict[str, Any]:
    """Keyword arguments for ``ProcessorFormatter`` (also usable in dictConfig)."""
    return {
        "foreign_pre_chain": [
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            _stamp_record_time,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        "processors": [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_format),
        ],
    }


def _logger_levels(level: str) -> dict[str, dict[str, Any]]:
    loggers: dict[str, dict[str, Any]] = {
        "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.error": {"level": level},
        "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
    }
    for name in _NOISY_LOGGERS:
        loggers[name] = {"level": level if level == "DEBUG" else "WARNING"}
    return loggers


def build_logging_config(config: AppConfig) -> dict[str, Any]:
    """
    dictConfig for uvicorn, rendered through structlog.

    ``config.log_level`` applies to the root and uvicorn loggers; httpx and
    httpcore stay at WARNING unless DEBUG is requested.
    """
    level = config.log_level
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                **_formatter_spec(config.log_format),
            }
        },
        "handlers": {
            "default": {
                "formatter": "structlog",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
            },
            "access": {
                "formatter": "structlog",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": _logger_levels(level),
        "root": {"handlers": ["default"], "level": level},
    }


class _LevelBand(logging.Filter):
    """Passes records whose level lies in ``[low, high]``."""

    def __init__(self, low: int = logging.NOTSET, high: int = logging.CRITICAL) -> None:
        super().__init__()
        self.low = low
        self.high = high

    def filter(self, record: logging.LogRecord) -> bool:
        return self.low <= record.levelno <= self.high


class _DictSafeQueueHandler(QueueHandler):
    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The base class formats record.msg into a string; ProcessorFormatter
        # needs structlog's event dict intact.
        return copy.copy(record)


class _BackgroundEmitter:
    """Owns the queue listener that writes every record.

    Up to WARNING goes to stdout, ERROR and above to stderr.
    """

    def __init__(self) -> None:
        self._listener: Optional[QueueListener] = None

    @property
    def running(self) -> bool:
        return self._listener is not None

    def start(self, config: AppConfig) -> None:
        self.stop()
        formatter = structlog.stdlib.ProcessorFormatter(
            **_formatter_spec(config.log_format)
        )
        targets = []
        for stream, band in (
            (sys.stdout, _LevelBand(high=logging.WARNING)),
            (sys.stderr, _LevelBand(low=logging.ERROR)),
        ):
            handler = logging.StreamHandler(stream=stream)
            handler.setFormatter(formatter)
            handler.addFilter(band)
            targets.append(handler)

        records: queue.Queue[logging.LogRecord] = queue.Queue()

        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(_DictSafeQueueHandler(records))
        root.setLevel(config.log_level)
        # Loggers configured by dictConfig (uvicorn.*) must reach the queue too.
        for name in list(logging.root.manager.loggerDict):
            existing = logging.getLogger(name)
            existing.handlers.clear()
            existing.propagate = True

        self._listener = QueueListener(
            records, *targets, respect_handler_level=True
        )
        self._listener.start()

    def stop(self) -> None:
        listener, self._listener = self._listener, None
        if listener is not None:
            listener.stop()


_EMITTER = _BackgroundEmitter()
atexit.register(_EMITTER.stop)


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """
    Configure structlog and stdlib logging for the process.

    Returns the dictConfig to hand to ``uvicorn.run``; records are emitted
    by the background queue listener.
    """
    structlog.configure(
        processors=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    cfg = build_logging_config(config)
    logging.config.dictConfig(cfg)
    _EMITTER.start(config)

    log.info(
        "logging_configured", log_format=config.log_format, log_level=config.log_level
    )
    return cfg
