"""Custom exception classes for the application."""

from typing import Any


class ContentFlowError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Lookup Errors
class GenerationNotFoundError(ContentFlowError):
    """Generation record not found."""

    def __init__(self, generation_id: str) -> None:
        super().__init__(f"Generation not found: {generation_id}")


class RequestNotFoundError(ContentFlowError):
    """Automation request not found."""

    def __init__(self, request_id: str) -> None:
        super().__init__(f"Request not found: {request_id}")


class ArticleNotFoundError(ContentFlowError):
    """Generated article not found."""

    def __init__(self, article_id: str) -> None:
        super().__init__(f"Article not found: {article_id}")


# Pipeline Errors
class PipelineError(ContentFlowError):
    """Base class for pipeline errors."""

    pass


class GenerationAlreadyRunningError(PipelineError):
    """A pipeline run is already in flight for this generation id."""

    def __init__(self, generation_id: str) -> None:
        super().__init__(f"Generation already running: {generation_id}")


class StageExecutionError(PipelineError):
    """Error during stage execution."""

    def __init__(self, stage_id: str, message: str) -> None:
        self.stage_id = stage_id
        super().__init__(f"Stage {stage_id} failed: {message}")


# External API Errors
class ExternalAPIError(ContentFlowError):
    """Error calling external API."""

    def __init__(self, api_name: str, message: str) -> None:
        self.api_name = api_name
        super().__init__(f"{api_name} API error: {message}")


class APIKeyMissingError(ExternalAPIError):
    """API key not configured."""

    def __init__(self, api_name: str) -> None:
        super().__init__(api_name, "API key not configured")


class ProviderError(ContentFlowError):
    """Research or generation provider returned an unusable result."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider} provider error: {message}")
