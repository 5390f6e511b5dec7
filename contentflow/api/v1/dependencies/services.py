"""Service dependencies injected into v1 routes; override in tests via `app.dependency_overrides`."""

from typing import Annotated

from fastapi import Depends

from contentflow.services.automation_engine import AutomationEngine, get_automation_engine
from contentflow.services.content_generator import ContentGenerator, get_content_generator
from contentflow.services.generation_task_manager import (
    GenerationTaskManager,
    get_generation_task_manager,
)
from contentflow.services.progress_store import ProgressStore, get_progress_store
from contentflow.services.research_provider import ResearchProvider, get_research_provider
from contentflow.services.web_search import WebSearchService, get_web_search_service

ProgressStoreDep = Annotated[ProgressStore, Depends(get_progress_store)]
TaskManagerDep = Annotated[GenerationTaskManager, Depends(get_generation_task_manager)]
AutomationEngineDep = Annotated[AutomationEngine, Depends(get_automation_engine)]
ContentGeneratorDep = Annotated[ContentGenerator, Depends(get_content_generator)]
ResearchProviderDep = Annotated[ResearchProvider, Depends(get_research_provider)]
WebSearchDep = Annotated[WebSearchService, Depends(get_web_search_service)]
