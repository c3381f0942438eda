from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from project_tracker_app.core.env import PTRACKER_ERROR_INCLUDE_DETAILS, get_env_bool
from project_tracker_app.core.errors import (
    ERROR_CODE_CONFLICT,
    ERROR_CODE_NOT_FOUND,
    ERROR_CODE_STORE_FAULT,
    ERROR_CODE_VALIDATION,
    ProjectConflictError,
    ProjectNotFoundError,
    ProjectServiceError,
    ProjectValidationError,
    SchemaBootstrapRequiredError,
    StoreFault,
)
from project_tracker_app.infrastructure.db import DataConnectionError, DataExecutionError, DataQueryError

ERROR_CODE_SCHEMA_BOOTSTRAP_REQUIRED = "SCHEMA_BOOTSTRAP_REQUIRED"
ERROR_CODE_BAD_REQUEST = "BAD_REQUEST"
ERROR_CODE_METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
ERROR_CODE_DB_CONNECTION = "DB_CONNECTION_ERROR"
ERROR_CODE_DB_QUERY = "DB_QUERY_ERROR"
ERROR_CODE_DB_EXECUTION = "DB_EXECUTION_ERROR"
ERROR_CODE_INTERNAL = "INTERNAL_SERVER_ERROR"

_DOMAIN_STATUS_CODES = {
    ProjectValidationError: 400,
    ProjectNotFoundError: 404,
    ProjectConflictError: 409,
}


@dataclass(frozen=True)
class ApiErrorSpec:
    status_code: int
    code: str
    message: str
    details: dict[str, Any] | None = None


def request_id_from_request(request: Request) -> str:
    request_id = str(getattr(request.state, "request_id", "") or "").strip()
    if request_id:
        return request_id
    from_header = str(request.headers.get("x-request-id", "")).strip()
    return from_header or "-"


def _include_details() -> bool:
    return get_env_bool(PTRACKER_ERROR_INCLUDE_DETAILS, default=False)


def build_api_error_payload(
    *,
    code: str,
    message: str,
    request_id: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ok": False,
        "error": {
            "code": str(code),
            "message": str(message),
        },
        "request_id": str(request_id or "-"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details and _include_details():
        payload["error"]["details"] = details
    return payload


def api_error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    request_id = request_id_from_request(request)
    payload = build_api_error_payload(
        code=code,
        message=message,
        request_id=request_id,
        details=details,
    )
    headers = {"X-Request-ID": request_id}
    return JSONResponse(payload, status_code=int(status_code), headers=headers)


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    cleaned: list[dict[str, Any]] = []
    for item in exc.errors():
        cleaned.append(
            {
                "loc": [str(part) for part in item.get("loc", ())],
                "msg": str(item.get("msg", "")),
                "type": str(item.get("type", "")),
            }
        )
    return cleaned


def _store_fault_spec(exc: StoreFault) -> ApiErrorSpec:
    details = dict(exc.details)
    if isinstance(exc.__cause__, DataConnectionError):
        return ApiErrorSpec(
            status_code=503,
            code=ERROR_CODE_DB_CONNECTION,
            message="Database connection is unavailable. Please try again shortly.",
            details=details,
        )
    return ApiErrorSpec(
        status_code=500,
        code=ERROR_CODE_STORE_FAULT,
        message="Project storage failed. Please try again.",
        details=details,
    )


def normalize_exception(exc: Exception) -> ApiErrorSpec:
    if isinstance(exc, StoreFault):
        return _store_fault_spec(exc)

    for error_type, status_code in _DOMAIN_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return ApiErrorSpec(
                status_code=status_code,
                code=exc.code,
                message=exc.message,
                details=exc.details or None,
            )

    if isinstance(exc, ProjectServiceError):
        return ApiErrorSpec(
            status_code=500,
            code=exc.code,
            message=exc.message,
            details=exc.details or None,
        )

    if isinstance(exc, RequestValidationError):
        return ApiErrorSpec(
            status_code=400,
            code=ERROR_CODE_VALIDATION,
            message="Request validation failed. Check field values and try again.",
            details={"errors": _validation_errors(exc)},
        )

    if isinstance(exc, SchemaBootstrapRequiredError):
        return ApiErrorSpec(
            status_code=503,
            code=ERROR_CODE_SCHEMA_BOOTSTRAP_REQUIRED,
            message="Application schema is not ready. Complete bootstrap and retry.",
            details={"reason": str(exc)},
        )

    if isinstance(exc, DataConnectionError):
        return ApiErrorSpec(
            status_code=503,
            code=ERROR_CODE_DB_CONNECTION,
            message="Database connection is unavailable. Please try again shortly.",
            details={"reason": str(exc)},
        )

    if isinstance(exc, DataQueryError):
        return ApiErrorSpec(
            status_code=500,
            code=ERROR_CODE_DB_QUERY,
            message="Failed to execute the requested query.",
            details={"reason": str(exc)},
        )

    if isinstance(exc, DataExecutionError):
        return ApiErrorSpec(
            status_code=500,
            code=ERROR_CODE_DB_EXECUTION,
            message="Failed to execute the requested update.",
            details={"reason": str(exc)},
        )

    if isinstance(exc, StarletteHTTPException):
        code = ERROR_CODE_INTERNAL
        if exc.status_code == 400:
            code = ERROR_CODE_BAD_REQUEST
        elif exc.status_code == 404:
            code = ERROR_CODE_NOT_FOUND
        elif exc.status_code == 405:
            code = ERROR_CODE_METHOD_NOT_ALLOWED
        elif exc.status_code == 409:
            code = ERROR_CODE_CONFLICT
        elif exc.status_code == 422:
            code = ERROR_CODE_VALIDATION
        return ApiErrorSpec(
            status_code=int(exc.status_code),
            code=code,
            message=str(exc.detail or "HTTP request failed."),
            details={"reason": str(exc.detail or "")},
        )

    return ApiErrorSpec(
        status_code=500,
        code=ERROR_CODE_INTERNAL,
        message="An unexpected error occurred. Please contact support if this continues.",
        details={"reason": str(exc), "type": exc.__class__.__name__},
    )
