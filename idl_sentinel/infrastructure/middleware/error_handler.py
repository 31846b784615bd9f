"""Exception handlers for the trigger and admin API.

Every AppError becomes ``{"error": {...}}`` with a status chosen by its
family. Run-level failures carry the aborted ``run_id`` so the scheduler
log can be matched against the run log.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from idl_sentinel.domain.errors import (
    AppError,
    AuthError,
    DatabaseError,
    FatalSetupError,
    ProviderError,
    ValidationError,
)
from idl_sentinel.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


def error_handler_middleware(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        status_code = _get_status_code(exc)
        _log_app_error(exc, status_code, request.url.path)

        return JSONResponse(
            status_code=status_code,
            content={"error": _error_body(exc)},
            headers=_error_headers(exc),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            f"Unhandled exception: {str(exc)}",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "details": {},
                    "retryable": False,
                }
            },
        )


def _get_status_code(error: AppError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, AuthError):
        return 401
    if isinstance(error, ProviderError):
        return 502
    if isinstance(error, FatalSetupError):
        return 503
    return 500


def _error_body(error: AppError) -> dict[str, Any]:
    details = dict(error.details)
    if isinstance(error, FatalSetupError) and error.run_id:
        details["run_id"] = error.run_id
    return {
        "code": error.code,
        "message": error.message,
        "details": details,
        "retryable": error.retryable,
    }


def _error_headers(error: AppError) -> dict[str, str] | None:
    if isinstance(error, AuthError):
        return {"WWW-Authenticate": "Bearer"}
    return None


def _log_app_error(error: AppError, status_code: int, path: str) -> None:
    fields: dict[str, Any] = {
        "error_code": error.code,
        "error_details": error.details,
        "retryable": error.retryable,
        "status_code": status_code,
        "path": path,
    }
    if isinstance(error, DatabaseError):
        fields["operation"] = error.operation
        logger.error(f"Persistence failure: {error.message}", extra=fields)
        return
    if isinstance(error, ProviderError):
        fields["provider"] = error.provider
        fields["operation"] = error.operation
    if isinstance(error, FatalSetupError):
        fields["run_id"] = error.run_id

    if status_code < 500:
        logger.warning(f"Request rejected: {error.message}", extra=fields)
    else:
        logger.error(f"Application error: {error.message}", extra=fields)
