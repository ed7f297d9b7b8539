"""Error envelopes for the auth API.

Every failure leaves the service as ``{"success": false, "message", "code", "data"}``
so clients can branch on ``code`` without parsing messages.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from tokenauth.exceptions import AuthException

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int, message: str, code: str | None = None, data: dict | None = None
) -> JSONResponse:
    body = {"success": False, "message": message, "code": code, "data": data}
    return JSONResponse(status_code=status_code, content=body)


def auth_error_response(exc: AuthException) -> JSONResponse:
    return create_error_response(exc.status_code, exc.message, exc.code)


async def auth_exception_handler(request: Request, exc: AuthException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s",
            exc.code,
            request.method,
            request.url.path,
            exc_info=exc,
        )
    return auth_error_response(exc)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return create_error_response(exc.status_code, str(exc.detail), code="http-error")


def _field_name(location: tuple | list) -> str:
    # Drop the "body"/"query" prefix FastAPI puts in front of the field path
    parts = [str(part) for part in location[1:]] or [str(part) for part in location]
    return ".".join(parts) if parts else "unknown"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten pydantic errors into ``[{"field", "message"}]``."""
    errors = [
        {
            "field": _field_name(error.get("loc", ())),
            "message": error.get("msg", "").removeprefix("Value error, "),
        }
        for error in exc.errors()
    ]
    return create_error_response(
        status_code=422,
        message="Validation error",
        code="validation-error",
        data={"validation_errors": errors},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        code="server-error",
    )
