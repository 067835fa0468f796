"""
Domain exceptions for QuakeBot.

Purpose
-------
Define the structured exception hierarchy for failures that are part of
normal domain operation: the advent leaderboard upstream being unreachable
or returning something other than the documented document. Handlers turn
these into a short human-readable reply.

Design Notes
------------
- All domain exceptions inherit from `QuakeDomainException`.
- Each exception carries `message`, `details`, `severity`, `is_retryable`
  and `error_code`, mirroring the infrastructure exceptions in
  `quakebot.core.exceptions`.
- A grammar miss is not an exception; `parse()` returns None.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from quakebot.core.exceptions import ErrorSeverity


class QuakeDomainException(Exception):
    """
    Base exception for all QuakeBot domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"


class UpstreamFetchError(QuakeDomainException):
    """
    Raised when the leaderboard endpoint cannot be reached or answers
    with a non-success status.

    Args:
        url: Endpoint that was requested
        reason: What went wrong (exception text or status line)
        status: HTTP status, when a response was received
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(
            f"Failed to fetch {url}: {reason}",
            details={"url": url, "reason": reason, "status": status},
            error_code="UPSTREAM_FETCH_FAILED",
        )


class MalformedUpstreamDataError(QuakeDomainException):
    """
    Raised when the leaderboard body is not JSON or not the documented shape.

    The whole request is abandoned; nothing is partially rendered.

    Args:
        reason: Which part of the document was unexpected
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Malformed leaderboard data: {reason}",
            details={"reason": reason},
            error_code="MALFORMED_UPSTREAM_DATA",
        )


# Utility functions for exception handling patterns


def is_transient_error(exc: Exception) -> bool:
    """True if the exception says the operation could be retried later."""
    if isinstance(exc, QuakeDomainException):
        return exc.is_retryable
    return False
