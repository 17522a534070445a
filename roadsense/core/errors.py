"""Domain exceptions and structured error response handlers.

Every error surfaced over HTTP — validation, bad bbox, bad cell, or
unexpected — returns:

    {
      "error": {
        "code": "DESCRIPTIVE_CODE",
        "message": "Human-readable explanation of what went wrong.",
        "request_id": "abc123...",
        ...extra fields when relevant
      }
    }
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class RoadsenseError(Exception):
    """Base class for engine errors."""


class GridIndexError(RoadsenseError):
    """Raised when a coordinate or cell id cannot be converted on the H3 grid."""

    def __init__(self, message: str, *, value: object = None) -> None:
        super().__init__(message)
        self.value = value


class InvalidBoundingBoxError(RoadsenseError, ValueError):
    """Raised for a bbox with the wrong arity or non-numeric coordinates."""


_STATUS_CODE_MAP: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _error_body(request: Request, code: str, message: str, **extra: object) -> dict:
    request_id = getattr(request.state, "request_id", None)
    return {"error": {"code": code, "message": message, **extra, "request_id": request_id}}


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if isinstance(exc.detail, dict):
            body = _error_body(
                request,
                exc.detail.get("code", _STATUS_CODE_MAP.get(exc.status_code, "ERROR")),
                exc.detail.get("message", ""),
            )
        else:
            body = _error_body(
                request, _STATUS_CODE_MAP.get(exc.status_code, "ERROR"), str(exc.detail)
            )

        return JSONResponse(
            status_code=exc.status_code,
            content=body,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = []
        for err in exc.errors():
            loc = " -> ".join(str(part) for part in err["loc"])
            fields.append({"field": loc, "message": err["msg"], "type": err["type"]})

        return JSONResponse(
            status_code=422,
            content=_error_body(
                request,
                "VALIDATION_ERROR",
                f"{len(fields)} validation error(s) in your request.",
                details=fields,
            ),
        )

    @app.exception_handler(InvalidBoundingBoxError)
    async def bbox_error_handler(
        request: Request, exc: InvalidBoundingBoxError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400, content=_error_body(request, "INVALID_BBOX", str(exc))
        )

    @app.exception_handler(GridIndexError)
    async def grid_error_handler(request: Request, exc: GridIndexError) -> JSONResponse:
        return JSONResponse(
            status_code=400, content=_error_body(request, "INVALID_CELL", str(exc))
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        request_id = getattr(request.state, "request_id", None)
        logger.exception("Unhandled error (request_id=%s)", request_id)

        return JSONResponse(
            status_code=500,
            content=_error_body(
                request,
                "INTERNAL_ERROR",
                "An unexpected error occurred. "
                "If this persists, report it with the request_id.",
            ),
        )
