"""
Exception handlers: every error leaves the API as {code, message, details}.

ServiceError subclasses carry their own code. Plain HTTP errors use the
HTTP status name (NOT_FOUND, REQUEST_ENTITY_TOO_LARGE), request validation
uses VALIDATION_ERROR and anything unhandled is INTERNAL_ERROR.
"""

from http import HTTPStatus
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rentevent.core.errors import ServiceError
from rentevent.core.logging_config import get_logger


logger = get_logger(__name__)


def error_response(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"code": code, "message": message, "details": details or {}}),
    )


def _request_fields(request: Request) -> Dict[str, Any]:
    return {
        "method": request.method,
        "path": request.url.path,
        "client_host": request.client.host if request.client else "unknown",
    }


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Catalog errors; upstream and database failures are logged as errors."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "service_error",
        status_code=exc.status_code,
        code=exc.code.value,
        message=exc.message,
        details=exc.details,
        **_request_fields(request),
    )
    return error_response(exc.status_code, exc.code.value, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework and router HTTP errors (404 lookups, 413, 422 form errors)."""
    try:
        code = HTTPStatus(exc.status_code).name
    except ValueError:
        code = f"HTTP_{exc.status_code}"

    if isinstance(exc.detail, str):
        message, details = exc.detail, {}
    else:
        message, details = HTTPStatus(exc.status_code).phrase, {"errors": exc.detail}

    logger.warning("http_exception", status_code=exc.status_code, detail=message, **_request_fields(request))
    return error_response(exc.status_code, code, message, details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    logger.warning("validation_error", error_count=len(errors), errors=errors, **_request_fields(request))
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        {"errors": errors},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort; the response never echoes the exception text."""
    logger.error(
        "unhandled_exception",
        error_type=type(exc).__name__,
        error_message=str(exc),
        exc_info=True,
        **_request_fields(request),
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    # ServiceError subclasses HTTPException; the more specific handler wins
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
