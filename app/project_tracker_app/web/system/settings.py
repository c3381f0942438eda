from __future__ import annotations

from dataclasses import dataclass

from project_tracker_app.core.config import AppConfig
from project_tracker_app.core.defaults import DEFAULT_SLOW_QUERY_MS
from project_tracker_app.core.env import (
    PTRACKER_PERF_LOG_ENABLED,
    PTRACKER_PERF_RESPONSE_HEADER,
    PTRACKER_REQUEST_ID_HEADER_ENABLED,
    PTRACKER_SLOW_QUERY_MS,
    get_env_bool,
    get_env_float,
)


@dataclass(frozen=True)
class AppRuntimeSettings:
    perf_enabled: bool
    perf_header_enabled: bool
    request_id_header_enabled: bool
    slow_query_ms: float
    cors_allowed_origins: tuple[str, ...]


def load_app_runtime_settings(config: AppConfig) -> AppRuntimeSettings:
    return AppRuntimeSettings(
        perf_enabled=get_env_bool(PTRACKER_PERF_LOG_ENABLED, default=False),
        perf_header_enabled=get_env_bool(PTRACKER_PERF_RESPONSE_HEADER, default=True),
        request_id_header_enabled=get_env_bool(PTRACKER_REQUEST_ID_HEADER_ENABLED, default=True),
        slow_query_ms=max(1.0, get_env_float(PTRACKER_SLOW_QUERY_MS, default=DEFAULT_SLOW_QUERY_MS, min_value=1.0)),
        cors_allowed_origins=tuple(config.cors_allowed_origins),
    )
