from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from project_tracker_app.core.defaults import DEFAULT_APP_TITLE
from project_tracker_app.infrastructure.logging import setup_app_logging
from project_tracker_app.web.core.runtime import get_config
from project_tracker_app.web.http.exception_handlers import register_exception_handlers
from project_tracker_app.web.http.middleware import register_request_perf_middleware
from project_tracker_app.web.routers import router
from project_tracker_app.web.system.lifespan import create_app_lifespan
from project_tracker_app.web.system.settings import load_app_runtime_settings


def create_app() -> FastAPI:
    setup_app_logging()
    config = get_config()
    settings = load_app_runtime_settings(config)

    app = FastAPI(title=DEFAULT_APP_TITLE, lifespan=create_app_lifespan())

    register_request_perf_middleware(app, settings)
    if settings.cors_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allowed_origins),
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Response-Time-Ms", "X-DB-Calls"],
        )

    register_exception_handlers(app)
    app.include_router(router)
    return app
