from fastapi import APIRouter

from project_tracker_app.web.routers.projects import router as projects_router
from project_tracker_app.web.routers.system import router as system_router


router = APIRouter()
router.include_router(system_router)
router.include_router(projects_router)
