"""
QuakeBot Logging Subsystem

Purpose
-------
One logging setup for every gateway handler:

- JSON lines in production (or when LOG_JSON is set), plain text otherwise.
- `LogContext` stamps the guild/channel/user/command of the event being
  handled onto each record, per task, via a ContextVar.
- Records pass through a bounded queue to a listener thread, so console and
  file writes never run on the event loop.

`setup_logging()` is called by the entry point; importing this module has
no side effects, which leaves pytest's log capture alone.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from typing import Any, Dict, Optional

from quakebot.core.config.config import Config

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "quakebot.json.log"
QUEUE_MAX_SIZE = 10_000

# Fields LogContext may set; every record gets all of them, "N/A" when unset
CONTEXT_FIELDS = ("guild_id", "channel_id", "user_id", "command", "operation")

_event_context: ContextVar[Dict[str, str]] = ContextVar("event_context", default={})
_queue_listener: Optional[QueueListener] = None


def _log_level() -> int:
    return getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO)


def _use_json() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return bool(Config.LOG_JSON)


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _event_context.get()
        for field in CONTEXT_FIELDS:
            setattr(record, field, context.get(field, "N/A"))
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; caller `extra=` fields nest under ``extra``."""

    _RECORD_ATTRS = frozenset(
        logging.LogRecord("", 0, "", 0, "", None, None).__dict__
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value not in (None, "N/A"):
                data[field] = value

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._RECORD_ATTRS
            and key not in CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            data["extra"] = extra

        return json.dumps(data, ensure_ascii=False, default=str)


class _DroppingQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write("QuakeBot logging queue full; dropping log record.\n")


# ============================================================================
# Global Setup
# ============================================================================


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if _use_json():
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler() -> logging.Handler:
    logs_dir = Config.LOGS_DIR.resolve()
    logs_dir.mkdir(parents=True, exist_ok=True)

    handler = TimedRotatingFileHandler(
        filename=str(logs_dir / LOG_FILENAME),
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    global _queue_listener

    root = logging.getLogger()
    if _queue_listener is not None:
        return

    level = _log_level()
    root.setLevel(level)
    root.handlers.clear()

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)
    _queue_listener = QueueListener(log_queue, _console_handler(), _file_handler())
    _queue_listener.start()

    # The filter runs on the emitting task, where the ContextVar is visible
    queue_handler = _DroppingQueueHandler(log_queue)
    queue_handler.setLevel(level)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    for noisy in ("discord", "asyncio", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "log_level": logging.getLevelName(level),
            "json": _use_json(),
            "logs_dir": str(Config.LOGS_DIR),
        },
    )


def shutdown_logging() -> None:
    global _queue_listener

    if _queue_listener is None:
        return

    logging.getLogger(__name__).info("Shutting down logging subsystem.")
    _queue_listener.stop()
    _queue_listener = None

    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Bind the event being handled to every log record emitted inside the block.

    >>> async with LogContext(user_id=1, guild_id=2, command="/averages"):
    ...     logger.info("handling command")
    """

    def __init__(
        self,
        user_id: Optional[int] = None,
        guild_id: Optional[int] = None,
        channel_id: Optional[int] = None,
        command: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        values = {
            "user_id": user_id,
            "guild_id": guild_id,
            "channel_id": channel_id,
            "command": command,
            "operation": operation,
        }
        self.context: Dict[str, str] = {
            key: str(value) for key, value in values.items() if value is not None
        }
        self._token: Optional[Token[Dict[str, str]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _event_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _event_context.reset(self._token)

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
