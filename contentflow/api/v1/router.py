"""API v1 router aggregator."""

from fastapi import APIRouter

from contentflow.api.v1.automation.routes import router as automation_router
from contentflow.api.v1.content.routes import router as content_router
from contentflow.api.v1.generation_progress.routes import router as generation_progress_router
from contentflow.api.v1.research.routes import router as research_router

api_router = APIRouter()

api_router.include_router(automation_router, prefix="/automation", tags=["Automation"])
api_router.include_router(
    generation_progress_router,
    prefix="/generation-progress",
    tags=["Generation Progress"],
)
api_router.include_router(research_router, tags=["Research"])
api_router.include_router(content_router, tags=["Content"])
