from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from project_tracker_app.infrastructure.local_db_bootstrap import ensure_local_db_ready
from project_tracker_app.web.core.runtime import close_repo, get_config

LOGGER = logging.getLogger(__name__)


def create_app_lifespan():
    @asynccontextmanager
    async def _app_lifespan(_app: FastAPI):
        runtime_config = get_config()
        ensure_local_db_ready(runtime_config)
        LOGGER.info(
            "Application started. env=%s db_path=%s",
            runtime_config.env,
            runtime_config.db_path,
            extra={"event": "app_startup", "env": runtime_config.env},
        )
        try:
            yield
        finally:
            close_repo()

    return _app_lifespan
