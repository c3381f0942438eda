"""Environment variable names and typed readers."""

from __future__ import annotations

import os

from project_tracker_app.core.util import as_bool, as_float, as_int

PTRACKER_ENV = "PTRACKER_ENV"
PTRACKER_DB_PATH = "PTRACKER_DB_PATH"
PTRACKER_DB_TIMEOUT_SEC = "PTRACKER_DB_TIMEOUT_SEC"
PTRACKER_DB_AUTO_INIT = "PTRACKER_DB_AUTO_INIT"
PTRACKER_DB_RESET_ON_START = "PTRACKER_DB_RESET_ON_START"
PTRACKER_DB_SEED = "PTRACKER_DB_SEED"
PTRACKER_STATUS_UPDATE_ATTEMPTS = "PTRACKER_STATUS_UPDATE_ATTEMPTS"

PTRACKER_SLOW_QUERY_MS = "PTRACKER_SLOW_QUERY_MS"
PTRACKER_SQL_TRACE_ENABLED = "PTRACKER_SQL_TRACE_ENABLED"
PTRACKER_SQL_TRACE_MAX_LEN = "PTRACKER_SQL_TRACE_MAX_LEN"

PTRACKER_LOG_LEVEL = "PTRACKER_LOG_LEVEL"
PTRACKER_LOG_JSON = "PTRACKER_LOG_JSON"
PTRACKER_LOG_CAPTURE_ROOT = "PTRACKER_LOG_CAPTURE_ROOT"

PTRACKER_PERF_LOG_ENABLED = "PTRACKER_PERF_LOG_ENABLED"
PTRACKER_PERF_RESPONSE_HEADER = "PTRACKER_PERF_RESPONSE_HEADER"
PTRACKER_REQUEST_ID_HEADER_ENABLED = "PTRACKER_REQUEST_ID_HEADER_ENABLED"
PTRACKER_CORS_ALLOWED_ORIGINS = "PTRACKER_CORS_ALLOWED_ORIGINS"
PTRACKER_ERROR_INCLUDE_DETAILS = "PTRACKER_ERROR_INCLUDE_DETAILS"


def get_env(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def get_env_bool(name: str, default: bool = False) -> bool:
    return as_bool(os.getenv(name), default=default)


def get_env_int(name: str, default: int, min_value: int | None = None, max_value: int | None = None) -> int:
    return as_int(os.getenv(name), default=default, min_value=min_value, max_value=max_value)


def get_env_float(name: str, default: float, min_value: float | None = None) -> float:
    return as_float(os.getenv(name), default=default, min_value=min_value)
