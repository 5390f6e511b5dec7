"""Reusable API dependencies shared across v1 routes."""

from contentflow.api.v1.dependencies.services import (
    AutomationEngineDep,
    ContentGeneratorDep,
    ProgressStoreDep,
    ResearchProviderDep,
    TaskManagerDep,
    WebSearchDep,
)

__all__ = [
    "AutomationEngineDep",
    "ContentGeneratorDep",
    "ProgressStoreDep",
    "ResearchProviderDep",
    "TaskManagerDep",
    "WebSearchDep",
]
