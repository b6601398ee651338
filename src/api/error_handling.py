"""Exception handlers rendering service errors as JSON envelopes."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.errors import ServiceError
from src.models.response import ErrorResponse, ValidationIssue

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, error: str, code: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=error, code=code, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _client_details(status_code: int, details):
    """Server-side failure detail is only shown to clients in development."""
    if status_code >= 500 and not get_settings().is_development:
        return None
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for service, validation and unexpected errors."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "service_error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error_code=exc.code,
            message=exc.message,
            details=exc.details,
        )
        return _error_response(
            exc.status_code,
            exc.message,
            exc.code,
            _client_details(exc.status_code, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Return 400 with one entry per failing field."""
        issues = [
            ValidationIssue(
                field=".".join(str(loc) for loc in err.get("loc", ()) if loc != "body") or "root",
                message=err.get("msg", "Validation failed"),
                code=err.get("type", "invalid"),
            ).model_dump()
            for err in exc.errors()
        ]

        logger.warning(
            "validation_error",
            path=request.url.path,
            method=request.method,
            issues=issues,
        )
        return _error_response(400, "Validation error", "VALIDATION_ERROR", issues)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
            error=str(exc),
            exc_info=exc,
        )
        return _error_response(
            500,
            "Internal server error",
            "INTERNAL_ERROR",
            _client_details(500, str(exc)),
        )
