# =============================================================================
# core/models/failure.py - Failure Envelope Schema
# =============================================================================
# Every recoverable error (bad input, missing record, conflict, auth) is
# returned to clients in one shape, so they need a single parsing path:
#
#   {
#       "success": false,
#       "code": "INVALID_INPUT",
#       "summary": "Validation failed",
#       "problems": ["Username is required."],
#       "timestamp": "2024-01-15T10:30:00+00:00"
#   }
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """
    Error taxonomy for failure envelopes.

    Each kind maps to exactly one HTTP status (see `status_code`).
    """
    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    FailureKind.INVALID_INPUT: 400,
    FailureKind.UNAUTHORIZED: 401,
    FailureKind.FORBIDDEN: 403,
    FailureKind.NOT_FOUND: 404,
    FailureKind.CONFLICT: 409,
    FailureKind.INTERNAL_ERROR: 500,
}


class FailureEnvelope(BaseModel):
    """Uniform structured failure returned by services and exception handlers."""

    success: bool = Field(default=False, description="Always false for failures")

    code: FailureKind = Field(
        ...,
        description="Machine-readable failure kind"
    )

    summary: str = Field(
        ...,
        description="Short human-readable description of what went wrong"
    )

    # Ordered by field inspection order, so messages are stable
    problems: list[str] = Field(
        default_factory=list,
        description="Every individual problem found"
    )

    timestamp: str = Field(
        ...,
        description="ISO-8601 UTC time the failure was produced"
    )

    @property
    def status_code(self) -> int:
        return self.code.status_code
