from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from project_tracker_app.core.defaults import (
    DEFAULT_DB_TIMEOUT_SEC,
    DEFAULT_DEV_CORS_ORIGINS,
    DEFAULT_DEV_ENV_NAMES,
    DEFAULT_ENV_NAME,
    DEFAULT_LOCAL_DB_PATH,
    DEFAULT_STATUS_UPDATE_ATTEMPTS,
)
from project_tracker_app.core.env import (
    PTRACKER_CORS_ALLOWED_ORIGINS,
    PTRACKER_DB_PATH,
    PTRACKER_DB_TIMEOUT_SEC,
    PTRACKER_ENV,
    PTRACKER_STATUS_UPDATE_ATTEMPTS,
    get_env,
    get_env_float,
    get_env_int,
)
from project_tracker_app.core.util import as_csv_tuple

DEV_ENV_NAMES = set(DEFAULT_DEV_ENV_NAMES)


def _repo_root() -> Path:
    # app/project_tracker_app/core/config.py -> repo root is three levels up from core/
    return Path(__file__).resolve().parents[3]


def _resolve_repo_relative_path(raw_path: str) -> str:
    value = str(raw_path or "").strip()
    if not value:
        return value
    path = Path(value)
    if path.is_absolute():
        return str(path)
    return str((_repo_root() / path).resolve())


def _resolve_db_path(env_name: str) -> str:
    raw = get_env(PTRACKER_DB_PATH, "")
    if not raw:
        if env_name not in DEV_ENV_NAMES:
            raise RuntimeError(
                f"{PTRACKER_DB_PATH} is required outside dev/local environments. "
                "Point it at the persistent SQLite database file."
            )
        raw = DEFAULT_LOCAL_DB_PATH
    return _resolve_repo_relative_path(raw)


@dataclass(frozen=True)
class AppConfig:
    db_path: str
    env: str = DEFAULT_ENV_NAME
    db_timeout_sec: float = DEFAULT_DB_TIMEOUT_SEC
    status_update_attempts: int = DEFAULT_STATUS_UPDATE_ATTEMPTS
    cors_allowed_origins: tuple[str, ...] = ()

    @property
    def is_dev_env(self) -> bool:
        return self.env in DEV_ENV_NAMES

    @staticmethod
    def from_env() -> "AppConfig":
        env_name = get_env(PTRACKER_ENV, DEFAULT_ENV_NAME).lower() or DEFAULT_ENV_NAME
        default_origins = DEFAULT_DEV_CORS_ORIGINS if env_name in DEV_ENV_NAMES else ""
        return AppConfig(
            db_path=_resolve_db_path(env_name),
            env=env_name,
            db_timeout_sec=get_env_float(PTRACKER_DB_TIMEOUT_SEC, default=DEFAULT_DB_TIMEOUT_SEC, min_value=0.1),
            status_update_attempts=get_env_int(
                PTRACKER_STATUS_UPDATE_ATTEMPTS,
                default=DEFAULT_STATUS_UPDATE_ATTEMPTS,
                min_value=1,
                max_value=10,
            ),
            cors_allowed_origins=as_csv_tuple(get_env(PTRACKER_CORS_ALLOWED_ORIGINS, default_origins)),
        )
