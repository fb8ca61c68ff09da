from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from promolink.schemas.common import error_response

logger = logging.getLogger(__name__)

SHOPEE_RATE_LIMIT_CODE = 10030
SHOPEE_AUTH_ERROR_CODE = 10020


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    UPSTREAM = "upstream"
    PROTOCOL = "protocol"
    EMPTY_RESPONSE = "empty_response"
    NOT_FOUND = "not_found"
    DATABASE = "database"


class ServiceError(Exception):
    """Failure raised inside the service layer, tagged with the kind of problem.

    Callers branch on ``kind`` (plus ``status_code`` for upstream HTTP failures
    and ``upstream_code`` for GraphQL error extensions) instead of on exception
    subclasses.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        upstream_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.upstream_code = upstream_code
        self.details = details

    @property
    def code(self) -> str:
        if self.kind is ErrorKind.PROTOCOL and self.upstream_code == SHOPEE_RATE_LIMIT_CODE:
            return "rate_limited"
        if self.kind is ErrorKind.PROTOCOL and self.upstream_code == SHOPEE_AUTH_ERROR_CODE:
            return "upstream_auth_error"
        if self.kind is ErrorKind.UPSTREAM and self.status_code == 429:
            return "rate_limited"
        if self.kind is ErrorKind.UPSTREAM and self.status_code in (401, 403):
            return "upstream_auth_error"
        if self.kind is ErrorKind.UPSTREAM and self.status_code is not None and self.status_code >= 500:
            return "upstream_unavailable"
        return f"{self.kind.value}_error"


def safe_message(error: ServiceError) -> str:
    """Translate a service failure into text that is safe to show to an end user."""
    kind = error.kind
    if kind is ErrorKind.VALIDATION or kind is ErrorKind.NOT_FOUND:
        return error.message
    if kind is ErrorKind.TIMEOUT:
        return "Timed out while contacting the Shopee API. Please try again."
    if kind is ErrorKind.PROTOCOL:
        if error.upstream_code == SHOPEE_RATE_LIMIT_CODE:
            return "Request limit reached. Please wait a moment and try again."
        if error.upstream_code == SHOPEE_AUTH_ERROR_CODE:
            return "Authentication error with the Shopee API."
        return error.message
    if kind is ErrorKind.EMPTY_RESPONSE:
        return error.message
    if kind is ErrorKind.UPSTREAM and error.status_code is not None:
        if error.status_code == 429:
            return "Request limit reached. Please wait a moment and try again."
        if error.status_code >= 500:
            return "The Shopee service is temporarily unavailable."
        if error.status_code in (401, 403):
            return "Authentication error with the Shopee API."
    if kind is ErrorKind.DATABASE:
        return "Could not reach the database."
    return "Could not connect to the Shopee API."


def http_status_for(error: ServiceError) -> int:
    if error.kind is ErrorKind.VALIDATION:
        return 400
    if error.kind is ErrorKind.NOT_FOUND:
        return 404
    if error.code == "rate_limited":
        return 429
    if error.kind is ErrorKind.TIMEOUT:
        return 504
    return 502


class ApiException(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiException)
    async def _api_exception(_: Request, exc: ApiException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(code=exc.code, message=exc.message, details=exc.details),
        )

    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError) -> JSONResponse:
        logger.warning(
            "Service error on %s %s kind=%s code=%s", request.method, request.url.path, exc.kind.value, exc.code
        )
        return JSONResponse(
            status_code=http_status_for(exc),
            content=error_response(code=exc.code, message=safe_message(exc)),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=error_response(
                code="validation_error",
                message="Request validation failed",
                details={"errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content=error_response(code="not_found", message="Route not found"))
        return JSONResponse(status_code=exc.status_code, content=error_response(code="http_error", message=str(exc.detail)))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_response(code="internal_server_error", message="Internal server error"),
        )
