from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from project_tracker_app.core.errors import ProjectServiceError, SchemaBootstrapRequiredError
from project_tracker_app.infrastructure.db import DataConnectionError, DataExecutionError, DataQueryError
from project_tracker_app.web.http.errors import (
    api_error_response,
    normalize_exception,
    request_id_from_request,
)

LOGGER = logging.getLogger(__name__)

HANDLED_EXCEPTION_TYPES = (
    ProjectServiceError,
    SchemaBootstrapRequiredError,
    DataConnectionError,
    DataQueryError,
    DataExecutionError,
    RequestValidationError,
    StarletteHTTPException,
)


def _log_api_error(request: Request, exc: Exception, *, status_code: int, code: str) -> None:
    log_fn = LOGGER.warning if status_code < 500 else LOGGER.exception
    log_fn(
        "API request failed. code=%s status=%s path=%s method=%s",
        code,
        status_code,
        request.url.path,
        request.method,
        exc_info=exc if status_code >= 500 else None,
        extra={
            "event": "api_error",
            "request_id": request_id_from_request(request),
            "error_code": code,
            "status_code": int(status_code),
            "method": request.method,
            "path": str(request.url.path),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    async def _api_exception_handler(request: Request, exc: Exception):
        spec = normalize_exception(exc)
        if not isinstance(exc, StarletteHTTPException) or spec.status_code >= 500:
            _log_api_error(request, exc, status_code=spec.status_code, code=spec.code)
        return api_error_response(
            request,
            status_code=spec.status_code,
            code=spec.code,
            message=spec.message,
            details=spec.details,
        )

    for exc_type in HANDLED_EXCEPTION_TYPES:
        app.add_exception_handler(exc_type, _api_exception_handler)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        spec = normalize_exception(exc)
        _log_api_error(request, exc, status_code=spec.status_code, code=spec.code)
        return api_error_response(
            request,
            status_code=spec.status_code,
            code=spec.code,
            message=spec.message,
            details=spec.details,
        )
