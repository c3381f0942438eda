from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from project_tracker_app.backend.project_service import ProjectService
from project_tracker_app.core.query_spec import ProjectQuerySpec
from project_tracker_app.web.core.runtime import get_project_service

router = APIRouter(prefix="/projects", tags=["projects"])

LIST_QUERY_KEYS = ("status", "search", "sortBy", "sortOrder")


class ProjectCreateBody(BaseModel):
    """Loose body shape. Field rules live in ``ProjectService.create`` so messages stay consistent."""

    model_config = ConfigDict(extra="ignore")

    name: Any = None
    clientName: Any = None
    status: Any = None
    startDate: Any = None
    endDate: Any = None


class ProjectStatusBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: Any = None


@router.post("", status_code=201)
def create_project(body: ProjectCreateBody, service: ProjectService = Depends(get_project_service)):
    project = service.create(body.model_dump())
    return JSONResponse(project.to_dict(), status_code=201)


@router.get("")
def list_projects(request: Request, service: ProjectService = Depends(get_project_service)):
    spec = ProjectQuerySpec.from_params(
        {key: request.query_params.get(key) for key in LIST_QUERY_KEYS}
    )
    return JSONResponse([project.to_dict() for project in service.list(spec)])


@router.get("/{project_id}")
def get_project(project_id: str, service: ProjectService = Depends(get_project_service)):
    return JSONResponse(service.get_by_id(project_id).to_dict())


@router.patch("/{project_id}/status")
def update_project_status(
    project_id: str,
    body: ProjectStatusBody,
    service: ProjectService = Depends(get_project_service),
):
    project = service.update_status(project_id, body.status)
    return JSONResponse(project.to_dict())


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: str, service: ProjectService = Depends(get_project_service)):
    service.soft_delete(project_id)
    return Response(status_code=204)
