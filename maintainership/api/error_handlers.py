"""Error Handlers — global exception handlers for the maintainers API.

Invariants:
    - MaintainershipError → structured JSON with code, kind, message, severity
    - StorageUnavailableError logs its internal cause; the response only says the
      operation failed
    - RequestValidationError → field-level error details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Three-layer handler: domain (MaintainershipError), validation (Pydantic), catch-all
    - Log level follows the error class: expected business outcomes are not errors
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from maintainership.core.errors import (
    ErrorCategory, ErrorSeverity, MaintainershipError, StorageUnavailableError,
)

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorCategory.NOT_FOUND: logging.INFO,
    ErrorCategory.CONFLICT: logging.INFO,
    ErrorCategory.VALIDATION: logging.INFO,
    ErrorCategory.AUTHORIZATION: logging.WARNING,
    ErrorCategory.INFRASTRUCTURE: logging.ERROR,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register maintainership domain/infrastructure error handler."""

    @app.exception_handler(MaintainershipError)
    async def maintainership_error_handler(
        request: Request, exc: MaintainershipError,
    ):
        """Handle all maintainership domain/infrastructure errors."""
        detail = exc.message
        if isinstance(exc, StorageUnavailableError):
            detail = f"{exc.message} cause={exc.cause}"
        logger.log(
            _LOG_LEVELS.get(exc.category, logging.ERROR),
            f"MaintainershipError: {detail}",
            extra={
                "error_code": exc.code,
                "error_kind": exc.kind.value if exc.kind else None,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "kind": None,
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "kind": None,
            "message": "Invalid request data",
            "category": ErrorCategory.VALIDATION.value,
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
