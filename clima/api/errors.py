"""Exception handlers: every error response is rendered as {"mensaje": "..."}."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"


def _validation_message(exc: RequestValidationError) -> str:
    """Client message for the first request validation error (missing or mistyped field)."""
    errors = exc.errors()
    if not errors:
        return "La petición no es válida"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "El cuerpo de la petición no es un JSON válido"
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    campo = loc[-1] if loc else "body"
    if first.get("type") == "missing":
        return f"Por favor, completa el campo: {campo}"
    # A blank value for a field that requires at least one character.
    if first.get("type") == "string_too_short" and (first.get("ctx") or {}).get("min_length") == 1:
        return f"Por favor, completa el campo: {campo}"
    return f"El valor del campo {campo} no es válido"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"mensaje": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"mensaje": _validation_message(exc)},
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures are server errors, never 'invalid credentials'. Detail stays in the log."""
    logger.error(
        "Database error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"mensaje": INTERNAL_ERROR_MESSAGE},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"mensaje": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
