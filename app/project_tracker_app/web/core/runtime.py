from __future__ import annotations

from functools import lru_cache
import logging

from project_tracker_app.backend.project_repository import ProjectRepository
from project_tracker_app.backend.project_service import ProjectService
from project_tracker_app.core.config import AppConfig

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return AppConfig.from_env()


@lru_cache(maxsize=1)
def get_repo() -> ProjectRepository:
    return ProjectRepository(get_config())


def get_project_service() -> ProjectService:
    config = get_config()
    return ProjectService(get_repo(), status_update_attempts=config.status_update_attempts)


def close_repo() -> None:
    if get_repo.cache_info().currsize == 0:
        return
    try:
        get_repo().close()
    except Exception:
        LOGGER.warning("Failed to close repository resources cleanly.", exc_info=True)
    finally:
        get_repo.cache_clear()


def reset_runtime() -> None:
    close_repo()
    get_config.cache_clear()
