"""
authgate.api.errors

Exception handlers mapping domain errors to HTTP responses.

Responsibilities:
- One external signal per error kind; no internal detail in bodies.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from authgate.errors import DuplicateIdentifier, NotFound, Unauthorized, VerificationError
from authgate.observability.logging import get_logger

log = get_logger(__name__)

UNAUTHORIZED_BODY = {"detail": "Unauthorized"}


async def _unauthorized(_: Request, __: Exception) -> JSONResponse:
    return JSONResponse(status_code=HTTP_401_UNAUTHORIZED, content=UNAUTHORIZED_BODY)


async def _duplicate(_: Request, __: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_409_CONFLICT, content={"detail": "Identifier already registered"}
    )


async def _backend_failure(_: Request, exc: Exception) -> JSONResponse:
    log.error("request.backend_failure", error_type=type(exc).__name__)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal error"}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Unauthorized, _unauthorized)
    # NotFound should never escape a service; if it does, it reads as Unauthorized.
    app.add_exception_handler(NotFound, _unauthorized)
    app.add_exception_handler(DuplicateIdentifier, _duplicate)
    app.add_exception_handler(VerificationError, _backend_failure)
    # Store writes outside the verifier/gate (registration) can fail the same way.
    app.add_exception_handler(SQLAlchemyError, _backend_failure)
