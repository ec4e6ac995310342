# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from typing import Any


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """
    Current time as a timezone-aware UTC datetime.

    Used as the default clock for created_at/updated_at stamps and for
    failure envelope timestamps. Services accept a clock argument so tests
    can pin the value.
    """
    return datetime.now(timezone.utc)


def isoformat_utc(value: datetime) -> str:
    """
    Render a datetime as an ISO-8601 string in UTC.

    Naive datetimes are assumed to already be UTC.

    Example:
        isoformat_utc(datetime(2024, 1, 15, 10, 30))  # "2024-01-15T10:30:00+00:00"
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result
