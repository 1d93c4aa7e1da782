"""
Error taxonomy for the storefront API.

Every error leaves the service as ``{"success": false, "message": ...}``
with the status code carried by the exception class.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class StoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(StoreError):
    status_code = 401


class Unauthorized(StoreError):
    status_code = 403


class NotFound(StoreError):
    status_code = 404


class ValidationError(StoreError):
    status_code = 400


class UpstreamError(StoreError):
    status_code = 500


def error_body(message: str) -> dict:
    return {"success": False, "message": message}


def _describe(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def store_error_handler(request: Request, exc: StoreError):
    if exc.status_code >= 500:
        logger.error("%s failed: %s", _describe(request), exc.message, exc_info=exc)
    else:
        logger.warning("%s rejected (%s): %s", _describe(request), exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning("%s rejected (%s): %s", _describe(request), exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Report the first offending field the way a form would
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    logger.warning("%s rejected (400): %s", _describe(request), message)
    return JSONResponse(status_code=400, content=error_body(message))


async def catch_unhandled_errors(request: Request, call_next):
    """HTTP middleware; must sit inside CORSMiddleware so 500s keep CORS headers."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Error in %s", _describe(request))
        return JSONResponse(status_code=500, content=error_body(str(exc)))


def register_exception_handlers(app) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
