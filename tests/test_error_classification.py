from __future__ import annotations

import pytest
from starlette.exceptions import HTTPException as StarletteHTTPException

from project_tracker_app.core.errors import (
    ProjectConflictError,
    ProjectNotFoundError,
    ProjectValidationError,
    SchemaBootstrapRequiredError,
    StoreFault,
)
from project_tracker_app.infrastructure.db import DataConnectionError, DataExecutionError, DataQueryError
from project_tracker_app.web.http.errors import build_api_error_payload, normalize_exception


def _store_fault(cause: Exception) -> StoreFault:
    try:
        raise StoreFault("list", reason=str(cause)) from cause
    except StoreFault as exc:
        return exc


@pytest.mark.parametrize(
    "exc,status_code,code",
    [
        (ProjectValidationError("bad", field="status"), 400, "VALIDATION_ERROR"),
        (ProjectNotFoundError(3), 404, "NOT_FOUND"),
        (ProjectConflictError(3, attempts=3), 409, "CONFLICT"),
        (SchemaBootstrapRequiredError("missing"), 503, "SCHEMA_BOOTSTRAP_REQUIRED"),
        (DataConnectionError("down"), 503, "DB_CONNECTION_ERROR"),
        (DataQueryError("bad sql"), 500, "DB_QUERY_ERROR"),
        (DataExecutionError("bad write"), 500, "DB_EXECUTION_ERROR"),
        (StarletteHTTPException(status_code=405, detail="Method Not Allowed"), 405, "METHOD_NOT_ALLOWED"),
        (StarletteHTTPException(status_code=404, detail="Not Found"), 404, "NOT_FOUND"),
        (KeyError("boom"), 500, "INTERNAL_SERVER_ERROR"),
    ],
)
def test_normalize_exception_maps_status_and_code(exc: Exception, status_code: int, code: str) -> None:
    spec = normalize_exception(exc)

    assert spec.status_code == status_code
    assert spec.code == code


def test_store_fault_hides_internal_reason_in_message() -> None:
    spec = normalize_exception(_store_fault(DataQueryError("no such column: secret")))

    assert spec.status_code == 500
    assert spec.code == "STORE_FAULT"
    assert "secret" not in spec.message
    assert spec.details["operation"] == "list"


def test_store_fault_from_connection_loss_is_503() -> None:
    spec = normalize_exception(_store_fault(DataConnectionError("database is locked")))

    assert spec.status_code == 503
    assert spec.code == "DB_CONNECTION_ERROR"


def test_validation_error_keeps_domain_message() -> None:
    spec = normalize_exception(ProjectValidationError("Invalid status transition from completed to active"))

    assert spec.message == "Invalid status transition from completed to active"


def test_payload_shape_without_details(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PTRACKER_ERROR_INCLUDE_DETAILS", raising=False)

    payload = build_api_error_payload(code="NOT_FOUND", message="Project not found", request_id="", details={"x": 1})

    assert payload["ok"] is False
    assert payload["error"] == {"code": "NOT_FOUND", "message": "Project not found"}
    assert payload["request_id"] == "-"
    assert payload["timestamp"]
