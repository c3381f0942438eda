from __future__ import annotations

import logging
import re
import time
import uuid

from fastapi import FastAPI, Request

from project_tracker_app.infrastructure.db import (
    clear_request_perf_context,
    get_request_perf_context,
    start_request_perf_context,
)
from project_tracker_app.web.system.settings import AppRuntimeSettings

PERF_LOGGER = logging.getLogger("project_tracker_app.perf")

_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _incoming_request_id(request: Request) -> str:
    candidate = str(request.headers.get("x-request-id", "")).strip()
    if candidate and _REQUEST_ID_PATTERN.match(candidate):
        return candidate
    return uuid.uuid4().hex[:12]


def _route_path_label(request: Request) -> str:
    route = request.scope.get("route")
    route_path = str(getattr(route, "path", "") or "").strip()
    return route_path or str(request.url.path)


def register_request_perf_middleware(app: FastAPI, settings: AppRuntimeSettings) -> None:
    @app.middleware("http")
    async def _request_perf_middleware(request: Request, call_next):
        request_id = _incoming_request_id(request)
        request.state.request_id = request_id
        token = start_request_perf_context(
            request_id=request_id,
            method=request.method,
            path=str(request.url.path),
            slow_query_ms=settings.slow_query_ms,
        )
        started = time.perf_counter()
        response = None
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            ctx = get_request_perf_context() or {}
            db_calls = int(ctx.get("db_calls", 0))
            db_total_ms = float(ctx.get("db_total_ms", 0.0))
            db_max_ms = float(ctx.get("db_max_ms", 0.0))
            db_errors = int(ctx.get("db_errors", 0))
            slow_queries = list(ctx.get("slow_queries", []))
            route_path = _route_path_label(request)

            if settings.perf_enabled:
                PERF_LOGGER.info(
                    (
                        "request_perf id=%s method=%s path=%s status=%s total_ms=%.2f "
                        "db_calls=%s db_ms=%.2f db_max_ms=%.2f db_errors=%s"
                    ),
                    request_id,
                    request.method,
                    route_path,
                    status_code,
                    elapsed_ms,
                    db_calls,
                    db_total_ms,
                    db_max_ms,
                    db_errors,
                    extra={
                        "event": "request_perf",
                        "request_id": request_id,
                        "method": request.method,
                        "path": route_path,
                        "status_code": status_code,
                        "total_ms": round(float(elapsed_ms), 2),
                        "db_calls": db_calls,
                        "db_ms": round(float(db_total_ms), 2),
                        "db_max_ms": round(float(db_max_ms), 2),
                        "db_errors": db_errors,
                    },
                )
                for query in slow_queries:
                    PERF_LOGGER.warning(
                        "request_slow_sql id=%s op=%s ms=%.2f rows=%s hash=%s sql=%s",
                        request_id,
                        query.get("operation"),
                        float(query.get("elapsed_ms") or 0.0),
                        query.get("rows"),
                        query.get("sql_hash"),
                        query.get("sql"),
                        extra={
                            "event": "request_slow_sql",
                            "request_id": request_id,
                            "operation": query.get("operation"),
                            "elapsed_ms": float(query.get("elapsed_ms") or 0.0),
                            "sql_hash": query.get("sql_hash"),
                        },
                    )

            if response is not None:
                if settings.request_id_header_enabled:
                    response.headers["X-Request-ID"] = request_id
                if settings.perf_header_enabled:
                    response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"
                    response.headers["X-DB-Calls"] = str(db_calls)

            clear_request_perf_context(token)
