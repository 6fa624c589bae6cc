"""JSON error responses.

Every error body has the shape ``{"error": <code>, "message": ..., "details": ...}``
so callers of the rule API and the trigger hook can branch on ``error``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from automation.core.config import get_settings
from automation.domain.exceptions import AutomationException

logger = logging.getLogger(__name__)

STATUS_BY_ERROR_CODE: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "SERVICE_UNAVAILABLE": 503,
}


def _error_body(code: str, message: Any, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": code, "message": message}
    if details is not None:
        body["details"] = details
    return body


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Location, message and type of each error; ``input``/``ctx`` are dropped
    since they may hold the raw record or a non-serializable exception."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


async def handle_automation_error(request: Request, exc: AutomationException) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_ERROR_CODE.get(exc.error_code, 400),
        content=exc.to_dict(),
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Malformed rule definitions (unknown action type, bad parameters) end up here.
    return JSONResponse(
        status_code=422,
        content=_error_body(
            "VALIDATION_ERROR", "Request validation failed", jsonable_errors(exc)
        ),
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AutomationException, handle_automation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected)
