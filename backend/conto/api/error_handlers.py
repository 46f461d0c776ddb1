"""Error Handlers — global exception handlers for the gateway API.

Invariants:
    - ContoError → {status, code, category, message, requestId} with the
      HTTP status derived from the code range
    - RequestValidationError → 400, code 401 (missing field), 402 (bad value)
      or 400 (body not parseable)
    - Exception (catch-all) → 500, code 601, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (ContoError), validation (Pydantic), catch-all (Exception)
    - Kept out of main.py so the app module only wires things together
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from conto.core.errors import ContoError, ErrorCode
from conto.infrastructure.observability import get_correlation_id

logger = logging.getLogger(__name__)

_MISSING_TYPES = frozenset({"missing"})
_MALFORMED_TYPES = frozenset({"json_invalid", "model_attributes_type", "model_type"})


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_conto_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_conto_error_handler(app: FastAPI) -> None:
    """Register gateway domain/infrastructure error handler."""

    @app.exception_handler(ContoError)
    async def conto_error_handler(request: Request, exc: ContoError):
        """Handle all gateway errors, including those replied by workers."""
        if exc.context.correlation_id is None:
            exc.context.correlation_id = get_correlation_id()
        logger.error(
            f"ContoError: {exc.message}",
            extra={"error_code": int(exc.code), "path": request.url.path},
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
            extra={"path": request.url.path},
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
                "status": "ERROR",
                "code": int(ErrorCode.INTERNAL_ERROR),
                "category": "internal",
                "message": "An unexpected error occurred",
                "requestId": get_correlation_id(),
            },
        )


def validation_code_for(errors: list[dict]) -> ErrorCode:
    """Pick the classification for a list of pydantic error entries."""
    types = {e.get("type") for e in errors}
    if types & _MALFORMED_TYPES:
        return ErrorCode.VALIDATION_INVALID_REQUEST
    if types and types <= _MISSING_TYPES:
        return ErrorCode.VALIDATION_MISSING_PARAMETER
    return ErrorCode.VALIDATION_INVALID_VALUE


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    errors = exc.errors()
    code = validation_code_for(errors)
    return {
        "status": "ERROR",
        "code": int(code),
        "category": "validation",
        "message": f"ErrorCode {int(code)} - Invalid request data",
        "requestId": get_correlation_id(),
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in errors
        ],
    }
