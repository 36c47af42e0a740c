"""
Exception handlers mapping auth errors to the failure envelope.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth.errors import AuthError, StoreUnavailableError
from auth.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, code: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=error, code=code, details=details or [])
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        if isinstance(exc, StoreUnavailableError):
            logger.error("%s %s — user store unavailable", request.method, request.url.path)
        else:
            logger.debug("%s %s — %s", request.method, request.url.path, exc.code)
        return error_response(exc.status_code, exc.error, exc.code, exc.details())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # Unparseable bodies; field-level rules are reported by AuthError above.
        details = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Validation failed", "validation_failed", details
        )
