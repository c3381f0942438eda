from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from project_tracker_app.infrastructure.local_db_bootstrap import initialize_local_db
from project_tracker_app.web.app import create_app
from project_tracker_app.web.core.runtime import reset_runtime

PTRACKER_ENV_KEYS = (
    "PTRACKER_ENV",
    "PTRACKER_DB_PATH",
    "PTRACKER_DB_AUTO_INIT",
    "PTRACKER_DB_RESET_ON_START",
    "PTRACKER_DB_SEED",
    "PTRACKER_STATUS_UPDATE_ATTEMPTS",
    "PTRACKER_CORS_ALLOWED_ORIGINS",
    "PTRACKER_ERROR_INCLUDE_DETAILS",
    "PTRACKER_PERF_LOG_ENABLED",
    "PTRACKER_PERF_RESPONSE_HEADER",
    "PTRACKER_REQUEST_ID_HEADER_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_runtime(monkeypatch: pytest.MonkeyPatch):
    for key in PTRACKER_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_runtime()
    yield
    reset_runtime()


@pytest.fixture()
def isolated_local_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    db_path = initialize_local_db(tmp_path / "projects_local.db", reset=True, seed=False)
    monkeypatch.setenv("PTRACKER_ENV", "dev")
    monkeypatch.setenv("PTRACKER_DB_PATH", str(db_path))
    return db_path


@pytest.fixture()
def client(isolated_local_db: Path):
    with TestClient(create_app()) as test_client:
        yield test_client
