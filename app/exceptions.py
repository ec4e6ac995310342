# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Every error leaves the API as a failure envelope:
#   {"success": false, "code": ..., "summary": ..., "problems": [...], "timestamp": ...}
#
# Services return envelopes for expected failures; routes hand them to
# failure_response(). Exceptions (auth, uploads, framework errors) are
# converted by the handlers registered in app/main.py.
# =============================================================================

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.models.failure import FailureEnvelope, FailureKind
from core.validation import failure

logger = logging.getLogger(__name__)

_KIND_BY_STATUS = {kind.status_code: kind for kind in FailureKind}


def failure_response(envelope: FailureEnvelope) -> JSONResponse:
    """Render a failure envelope with the HTTP status of its kind."""
    return JSONResponse(
        status_code=envelope.status_code,
        content=envelope.model_dump(mode="json"),
    )


class StorefrontException(Exception):
    """
    Base exception for the Storefront API.

    All custom exceptions inherit from this class. The suggestion and
    details are logged and carried on the instance; the response itself
    is a plain failure envelope.
    """

    def __init__(
        self,
        message: str,
        kind: FailureKind = FailureKind.INTERNAL_ERROR,
        problems: list[str] | None = None,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.problems = problems if problems is not None else [message]
        self.suggestion = suggestion
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_envelope(self) -> FailureEnvelope:
        """Convert exception to a failure envelope."""
        return failure(self.kind, self.message, self.problems)


class RequestFailed(StorefrontException):
    """Carries a failure envelope returned by a service out of a route."""

    def __init__(self, envelope: FailureEnvelope):
        super().__init__(envelope.summary, kind=envelope.code, problems=envelope.problems)
        self.envelope = envelope

    def to_envelope(self) -> FailureEnvelope:
        return self.envelope


def unwrap(result: Any) -> Any:
    """
    Return a service result, or raise RequestFailed if it is a failure envelope.

    Usage:
        product = unwrap(await service.get(product_id))
    """
    if isinstance(result, FailureEnvelope):
        raise RequestFailed(result)
    return result


# =============================================================================
# Auth Exceptions
# =============================================================================

class AuthenticationError(StorefrontException):
    """Raised when the bearer token is missing, malformed or expired."""

    def __init__(self, reason: str):
        super().__init__(
            message="Authentication required",
            kind=FailureKind.UNAUTHORIZED,
            problems=[reason],
            suggestion="Log in via POST /api/v1/auth/login and send the token as 'Authorization: Bearer <token>'",
        )


class PermissionDeniedError(StorefrontException):
    """Raised when an authenticated caller lacks the required role."""

    def __init__(self, required_role: str):
        super().__init__(
            message="Insufficient permissions",
            kind=FailureKind.FORBIDDEN,
            problems=[f"This action requires the '{required_role}' role."],
            details={"required_role": required_role},
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(StorefrontException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message="Invalid file type",
            kind=FailureKind.INVALID_INPUT,
            problems=[f"File '{filename}' must be one of: {', '.join(allowed)}."],
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(StorefrontException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message="File too large",
            kind=FailureKind.INVALID_INPUT,
            problems=[f"File is {size_mb:.1f}MB (max: {max_mb}MB)."],
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class EmptyFileError(StorefrontException):
    """Raised when an upload carries no content."""

    def __init__(self, filename: str):
        super().__init__(
            message="Empty file",
            kind=FailureKind.INVALID_INPUT,
            problems=[f"File '{filename}' is empty."],
        )


class StorageUploadError(StorefrontException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to upload file to storage",
            kind=FailureKind.INTERNAL_ERROR,
            problems=["The file could not be stored. Try again later."],
            suggestion="Check STORAGE_BUCKET exists and is public",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def storefront_exception_handler(
    request: Request,
    exc: StorefrontException
) -> JSONResponse:
    """Convert StorefrontException to a failure envelope response."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
    return failure_response(exc.to_envelope())


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle framework HTTP errors (unknown route, wrong method, missing bearer).

    Statuses without a failure kind fall back to INVALID_INPUT (4xx) or
    INTERNAL_ERROR (5xx), but keep their original status code.
    """
    kind = _KIND_BY_STATUS.get(exc.status_code)
    if kind is None:
        kind = FailureKind.INTERNAL_ERROR if exc.status_code >= 500 else FailureKind.INVALID_INPUT
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    envelope = failure(kind, detail, [detail])
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request body errors caught before the services run.

    Only malformed bodies reach this (e.g. a JSON array where an object is
    expected); field-level rules are applied by the services themselves.
    """
    problems = []
    for error in jsonable_encoder(exc.errors()):
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg", "Invalid request"))
    return failure_response(failure(FailureKind.INVALID_INPUT, "Malformed request", problems))


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Catch-all for unexpected errors.

    The cause is logged; the client only sees an opaque INTERNAL_ERROR.
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return failure_response(
        failure(
            FailureKind.INTERNAL_ERROR,
            "Internal server error",
            ["An unexpected error occurred."],
        )
    )
