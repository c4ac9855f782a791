"""Error Handlers — global exception handlers for dynamically compiled routes.

Invariants:
    - DynamicApiError → structured JSON with error code, message, severity, http_status
    - Exception (catch-all) → 500, never leaks internal details
    - Client-side failures (4xx) log at WARNING, server-side (5xx) at ERROR

Design Decisions:
    - Two-layer handler: domain (DynamicApiError), catch-all (Exception)
    - Target-operation errors reach the catch-all unwrapped
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from dynamic_api.core.errors import DynamicApiError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_dynamic_api_error_handler(app)
    _register_generic_error_handler(app)


def _register_dynamic_api_error_handler(app: FastAPI) -> None:

    @app.exception_handler(DynamicApiError)
    async def dynamic_api_error_handler(request: Request, exc: DynamicApiError):
        """Handle binding, payload and configuration errors."""
        level = logging.WARNING if exc.http_status < 500 else logging.ERROR
        logger.log(
            level,
            f"DynamicApiError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "operation": exc.context.operation,
                "parameter": exc.context.parameter,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

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
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )
