"""
Unified exception handling for the Infographix engine.

This module provides:
- The generation error taxonomy (configuration, transient backend,
  malformed output, terminal generation failure, unknown provider)
- Standardized error response format
- Exception handlers for FastAPI
"""

from __future__ import annotations

from typing import Any, Optional, Dict
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Standardized error detail."""
    code: str
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Standardized error response format."""
    success: bool = False
    error: ErrorDetail
    request_id: Optional[str] = None


# =============================================================================
# Custom Exception Classes
# =============================================================================

class InfographixException(Exception):
    """Base exception for the Infographix engine."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.field = field
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to standardized error response."""
        return ErrorResponse(
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                field=self.field,
                details=self.details,
            )
        )


# --- Provider Errors ---

class ConfigurationError(InfographixException):
    """Missing or invalid provider credential. Never retried."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(
            message=message,
            code="PROVIDER_NOT_CONFIGURED",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"provider": provider} if provider else None,
        )
        self.provider = provider


class UnknownProviderError(InfographixException):
    """Requested provider id is not registered."""

    def __init__(self, provider: str, available: Optional[list] = None):
        message = f"Unknown provider: {provider}"
        if available:
            message += f". Available providers: {', '.join(available)}"
        super().__init__(
            message=message,
            code="UNKNOWN_PROVIDER",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"provider": provider, "available": available or []},
        )
        self.provider = provider


# --- Generation Errors ---

class TransientBackendError(InfographixException):
    """Network failure or non-2xx backend response during one attempt."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        details: Dict[str, Any] = {}
        if provider:
            details["provider"] = provider
        if status_code is not None:
            details["backend_status"] = status_code
        super().__init__(
            message=message,
            code="BACKEND_ERROR",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details or None,
        )
        self.backend_status = status_code


class MalformedOutputError(InfographixException):
    """The stream completed but no valid report could be recovered."""

    def __init__(
        self,
        message: str = "Failed to generate valid JSON report. The model output was likely incomplete.",
        text_length: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            code="MALFORMED_OUTPUT",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"text_length": text_length} if text_length is not None else None,
        )


class GenerationFailedError(InfographixException):
    """Terminal failure after the retry policy was exhausted."""

    def __init__(
        self,
        attempts: int,
        last_error: Optional[BaseException] = None,
        provider: Optional[str] = None,
    ):
        last_message = str(last_error) if last_error is not None else "Unknown error"
        super().__init__(
            message=f"Failed after {attempts} attempts. Last error: {last_message}",
            code="GENERATION_FAILED",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={
                "attempts": attempts,
                "provider": provider,
                "last_error": last_message,
                "last_error_type": type(last_error).__name__ if last_error is not None else None,
            },
        )
        self.attempts = attempts
        self.last_error = last_error
        self.provider = provider


# --- Request Errors ---

class ValidationError(InfographixException):
    """A request value was rejected (empty topic, blank API key, ...)."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", 422, details=details, field=field)


class NotFoundError(InfographixException):
    """History item or other resource does not exist."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        suffix = f" with ID '{resource_id}'" if resource_id else ""
        super().__init__(
            f"{resource}{suffix} not found",
            "RESOURCE_NOT_FOUND",
            status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id},
        )


# =============================================================================
# Exception Handlers for FastAPI
# =============================================================================

HTTP_ERROR_CODES: Dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
}

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def _error_json(
    status_code: int,
    code: str,
    message: str,
    field: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, field=field, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def infographix_exception_handler(request: Request, exc: InfographixException) -> JSONResponse:
    """Render an InfographixException as the standard envelope."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"[API] {request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}",
        extra={"details": exc.details},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_json(exc.status_code, HTTP_ERROR_CODES.get(exc.status_code, "UNKNOWN_ERROR"), str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/path validation failures, reported against the first offending field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    return _error_json(
        422,
        "VALIDATION_ERROR",
        first.get("msg", "Invalid request"),
        field=".".join(loc) or None,
        details={"errors": len(errors)},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected: log with traceback, answer with a generic 500."""
    logger.error(
        f"[API] Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app) -> None:
    app.add_exception_handler(InfographixException, infographix_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
