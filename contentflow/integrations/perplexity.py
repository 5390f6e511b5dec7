"""Perplexity chat-completions integration for web-grounded research."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from contentflow.config import settings
from contentflow.core.exceptions import APIKeyMissingError, ExternalAPIError, ProviderError

logger = logging.getLogger(__name__)

RESEARCH_SYSTEM_PROMPT = (
    "You are a research assistant for content writers. Answer with a concise, "
    "factual briefing: current trends, statistics with their sources, expert "
    "opinions, and practical recommendations. Prefer recent, authoritative sources."
)


class PerplexitySearchResult(BaseModel):
    """One search result returned alongside a completion."""

    url: str
    title: str = ""
    date: str | None = None
    snippet: str = ""


class PerplexityAnswer(BaseModel):
    """Validated subset of a chat-completions response."""

    content: str = Field(min_length=1)
    model: str | None = None
    citations: list[str] = Field(default_factory=list)
    search_results: list[PerplexitySearchResult] = Field(default_factory=list)


class PerplexityClient:
    """Client for the Perplexity API.

    Use as an async context manager; one request per `ask` call, no retries.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.perplexity_api_key
        self.base_url = (base_url or settings.perplexity_base_url).rstrip("/")
        self.model = model or settings.perplexity_model
        self.timeout = timeout if timeout is not None else settings.perplexity_timeout_seconds
        self._client: httpx.AsyncClient | None = None

        if not self.api_key:
            raise APIKeyMissingError("Perplexity")

    async def __aenter__(self) -> "PerplexityClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    async def ask(self, query: str, *, system_prompt: str = RESEARCH_SYSTEM_PROMPT) -> PerplexityAnswer:
        """Send one research question and return the validated answer."""
        logger.info("Perplexity API request", extra={"model": self.model, "query": query})
        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": query},
            ],
        }

        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Perplexity HTTP error", extra={"query": query, "error": str(e)})
            raise ExternalAPIError("Perplexity", str(e)) from e

        if response.status_code != 200:
            logger.warning(
                "Perplexity API error",
                extra={"query": query, "status": response.status_code},
            )
            raise ExternalAPIError(
                "Perplexity",
                f"API error: {response.status_code} - {response.text[:200]}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("perplexity", "response body is not JSON") from e

        return self.parse_answer(data)

    @staticmethod
    def parse_answer(data: Any) -> PerplexityAnswer:
        """Validate a raw chat-completions payload."""
        if not isinstance(data, dict):
            raise ProviderError("perplexity", "response body is not an object")

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise ProviderError("perplexity", "response has no choices")
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None

        try:
            return PerplexityAnswer.model_validate(
                {
                    "content": content,
                    "model": data.get("model"),
                    "citations": [
                        item for item in data.get("citations") or [] if isinstance(item, str)
                    ],
                    "search_results": [
                        item for item in data.get("search_results") or []
                        if isinstance(item, dict) and item.get("url")
                    ],
                }
            )
        except PydanticValidationError as e:
            raise ProviderError("perplexity", f"invalid response shape: {e.error_count()} errors") from e
