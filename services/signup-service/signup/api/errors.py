"""Exception-to-response mapping for the signup API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.errors import RegistrationError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


async def handle_registration_error(request: Request, exc: RegistrationError) -> JSONResponse:
    """Answer a failed registration with the error's own status and code."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    else:
        logger.warning("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    return _error_response(exc.status_code, exc.message, exc.code)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed or incomplete request bodies as 400s."""
    locations = (".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors())
    fields = sorted({location for location in locations if location})
    detail = "malformed request body"
    if fields:
        detail = f"{detail}: {', '.join(fields)}"
    return _error_response(status.HTTP_400_BAD_REQUEST, detail, "invalid_request")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error", RegistrationError.code
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the signup error mapping to ``app``."""
    app.add_exception_handler(RegistrationError, handle_registration_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
