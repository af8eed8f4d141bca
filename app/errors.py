# app/errors.py
import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

log = logging.getLogger(__name__)


class ApiError(HTTPException):
    """HTTP error rendered as {"error": ..., "details"?: ...}."""

    def __init__(self, status_code: int, error: str, details: Any = None, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=error, headers=headers)
        self.error = error
        self.details = details


def _body(error: str, details: Any = None) -> dict:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return body


async def _api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(_body(exc.error, exc.details)),
        headers=exc.headers,
    )


async def _http_error_handler(_: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.warning("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_body("Validation error", details))


async def _store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error("Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_body("Database error", str(exc)),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, _store_error_handler)
