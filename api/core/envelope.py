"""
Uniform JSON response envelope.

Every response body (success or failure) has the same shape:

    {"status": bool, "statusCode": int, "data": [...], "message": str}

`data` is always a list; callers wrap single objects in a one-element list.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _as_list(data: Any) -> list:
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, tuple):
        return list(data)
    return [data]


def envelope(*, ok: bool, message: str, code: int, data: Any = None) -> dict[str, Any]:
    return {
        "status": ok,
        "statusCode": code,
        "data": jsonable_encoder(_as_list(data)),
        "message": message,
    }


def send_success(message: str, data: Any = None, code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content=envelope(ok=True, message=message, code=code, data=data),
    )


def send_error(message: str, code: int = status.HTTP_400_BAD_REQUEST, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content=envelope(ok=False, message=message, code=code, data=data),
    )


def _validation_message(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        msg = str(err.get("msg") or "invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    if not parts:
        return "Invalid request."
    return "Invalid request: " + "; ".join(parts)


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed."
    response = send_error(detail, code=exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return send_error(_validation_message(exc), code=status.HTTP_400_BAD_REQUEST)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the log; clients get a fixed message.
    logger.error(
        "unhandled_error method=%s path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return send_error("Internal server error", code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
