"""Exception handlers: every error leaves the API as {"error", "message", "details"}.

register_exception_handlers(app) installs them. SearchStateException
subclasses carry their own error_code; _STATUS_BY_CODE decides the HTTP
status for each code (unlisted codes are client errors).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from searchstate.core.config import get_settings
from searchstate.domain.exceptions import SearchStateException

logger = logging.getLogger(__name__)

_STATUS_BY_CODE: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "UNKNOWN_FIELD": 400,
    "DISALLOWED_SORT_FIELD": 400,
    "AUTHENTICATION_ERROR": 401,
    "CONFIGURATION_ERROR": 500,
    "CACHE_UNAVAILABLE": 503,
}

# Seconds a client should wait before retrying while the cache is down.
CACHE_RETRY_AFTER = 5


def _error_body(error: str, message: Any, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        body["details"] = details
    return body


def _handle_search_state_error(request: Request, exc: SearchStateException) -> JSONResponse:
    status = _STATUS_BY_CODE.get(exc.error_code, 400)
    headers = None
    if exc.error_code == "CACHE_UNAVAILABLE":
        headers = {"Retry-After": str(CACHE_RETRY_AFTER)}
    if status >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.error_code, exc.details)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.error_code)
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 listing each invalid location (e.g. body, query.page) with its message."""
    problems = [
        {"loc": ".".join(str(part) for part in error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_ERROR", "Request validation failed", problems),
    )


def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", exc.detail),
        headers=getattr(exc, "headers", None),
    )


def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    """500; the exception text is only exposed when debug is on."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on app (call once, from create_app)."""
    app.add_exception_handler(SearchStateException, _handle_search_state_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(Exception, _handle_unexpected)
