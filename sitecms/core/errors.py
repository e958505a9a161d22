# sitecms/core/errors.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from sitecms.core.logging import get_request_id
from sitecms.core.responses import error

log = logging.getLogger("sitecms.errors")

GENERIC_ERROR = "An unexpected error occurred"


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class MethodNotAllowedError(ApiError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed"):
        super().__init__(message)


class UnexpectedError(ApiError):
    status_code = 500


class UniqueConflict(Exception):
    """DB từ chối do vi phạm unique constraint."""


def _with_request_id(resp):
    rid = get_request_id()
    if rid:
        resp.headers["X-Request-ID"] = rid
    return resp


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if isinstance(exc, UnexpectedError):
            log.error("%s %s -> %s", request.method, request.url.path, exc.message)
            return _with_request_id(error(GENERIC_ERROR, exc.status_code))
        return _with_request_id(error(exc.message, exc.status_code))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _with_request_id(error(str(exc.detail), exc.status_code))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _with_request_id(error("Invalid input data", 400))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        # chi tiết chỉ ghi log phía server, client nhận thông báo chung
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _with_request_id(error(GENERIC_ERROR, 500))
