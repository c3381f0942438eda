from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from project_tracker_app.core.errors import SchemaBootstrapRequiredError
from project_tracker_app.web.core.runtime import get_config, get_repo

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    config = get_config()
    payload = {
        "ok": True,
        "env": config.env,
        "store": "sqlite",
    }
    try:
        get_repo().ensure_runtime_tables()
    except SchemaBootstrapRequiredError as exc:
        payload["ok"] = False
        payload["error"] = str(exc)
        return JSONResponse(payload, status_code=503)
    return JSONResponse(payload, status_code=200)
