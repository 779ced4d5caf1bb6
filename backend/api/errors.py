"""Exception handlers rendering the error envelope."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from services.auth import AccountError
from services.auth.schemas import ApiError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, errors: list[Any] | None = None) -> JSONResponse:
    body = ApiError(status_code=status_code, message=message, errors=errors or [])
    return JSONResponse(body.model_dump(by_alias=True), status_code=status_code)


def _format_validation_error(error: Any) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def _handle_account_error(_request: Request, exc: AccountError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(exc.message, exc_info=exc.__cause__ or exc)
    return error_response(exc.status_code, exc.message, exc.errors)


async def _handle_http_exception(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _handle_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Invalid request",
        [_format_validation_error(error) for error in exc.errors()],
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", extra={"path": request.url.path}, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccountError, _handle_account_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected)
