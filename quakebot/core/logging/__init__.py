"""
QuakeBot Logging Infrastructure

Queue-backed JSON/text logging plus `LogContext` for per-event fields.
"""

from quakebot.core.logging.logger import (
    LogContext,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "LogContext",
]
