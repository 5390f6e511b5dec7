"""Research provider: Perplexity-backed search with template fallback."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Literal
from urllib.parse import urlparse

from contentflow.config import settings
from contentflow.core.exceptions import ExternalAPIError, ProviderError
from contentflow.core.text import slugify
from contentflow.integrations.perplexity import PerplexityAnswer, PerplexityClient
from contentflow.schemas.content import Source
from contentflow.schemas.research import ResearchMetadata, ResearchResult

logger = logging.getLogger(__name__)

ResearchVariant = Literal["perplexity", "template"]

MAX_PROVIDER_SOURCES = 8


def template_research(query: str, *, fallback: bool = False) -> ResearchResult:
    """Deterministic topic-substituted research briefing with three sources."""
    slug = slugify(query)
    content = (
        f"Research results for \"{query}\":\n\n"
        f"Key findings about {query}:\n"
        f"- Modern trends in {query} show significant growth across industries.\n"
        f"- Industry experts report a 75% increase in adoption of {query} over two years.\n"
        f"- Latest statistics indicate strong market demand, with spending near $1.2 billion.\n"
        f"- Best practices for {query} include comprehensive planning and phased execution.\n"
        f"- Recent studies show improved outcomes when {query} is implemented with clear goals.\n\n"
        f"Current market analysis reveals strong potential for {query} applications. "
        "The technology landscape continues to evolve rapidly. "
        "Expert recommendations suggest focusing on user experience and scalability.\n\n"
        f"\"The future of {query} looks very promising for early adopters,\" says one industry analyst. "
        f"Recent data shows 85% satisfaction rates among early adopters of {query}. "
        "Implementation costs have decreased by 40% over the past year."
    )
    sources = [
        Source(
            url=f"https://industry-reports.example.com/{slug}",
            title=f"Comprehensive {query} Analysis",
            excerpt=f"Latest trends and insights in {query} technology and implementation.",
            relevance=0.9,
        ),
        Source(
            url=f"https://tech-insights.example.com/{slug}-guide",
            title=f"{query} Best Practices Guide",
            excerpt=f"Expert recommendations and proven strategies for {query} success.",
            relevance=0.85,
        ),
        Source(
            url=f"https://market-research.example.com/{slug}-report",
            title=f"{query} Market Report",
            excerpt=f"Statistical analysis and market trends for the {query} industry.",
            relevance=0.8,
        ),
    ]
    return ResearchResult(
        content=content,
        sources=sources,
        metadata=ResearchMetadata(provider="template", query=query, fallback=fallback),
    )


def _title_from_url(url: str, index: int) -> str:
    host = urlparse(url).netloc
    if host.startswith("www."):
        host = host[4:]
    return host or f"Source {index + 1}"


def sources_from_answer(answer: PerplexityAnswer) -> list[Source]:
    """Map search results (or bare citations) to Source records, best first."""
    now = datetime.now(timezone.utc)
    sources: list[Source] = []
    if answer.search_results:
        for index, item in enumerate(answer.search_results[:MAX_PROVIDER_SOURCES]):
            sources.append(
                Source(
                    url=item.url,
                    title=item.title.strip() or _title_from_url(item.url, index),
                    excerpt=item.snippet,
                    relevance=round(max(0.5, 0.95 - index * 0.05), 2),
                    timestamp=now,
                    publish_date=item.date,
                )
            )
        return sources

    for index, url in enumerate(answer.citations[:MAX_PROVIDER_SOURCES]):
        sources.append(
            Source(
                url=url,
                title=_title_from_url(url, index),
                relevance=round(max(0.5, 0.9 - index * 0.05), 2),
                timestamp=now,
            )
        )
    return sources


class ResearchProvider:
    """Answer research queries from Perplexity or from local templates.

    `search` makes one attempt and raises `ProviderError` on failure;
    `research` never raises for provider failures and degrades to templates.
    """

    def __init__(
        self,
        variant: ResearchVariant | None = None,
        client_factory: Callable[[], PerplexityClient] | None = None,
    ) -> None:
        self.variant: ResearchVariant = variant or settings.research_provider
        self._client_factory = client_factory or PerplexityClient
        self._has_client_override = client_factory is not None

    @property
    def live(self) -> bool:
        """Whether `search` calls the external API."""
        if self.variant != "perplexity":
            return False
        return self._has_client_override or bool(settings.perplexity_api_key)

    async def ask(self, query: str) -> PerplexityAnswer:
        """Raw Perplexity answer for a query; raises `ProviderError` on failure."""
        try:
            async with self._client_factory() as client:
                return await client.ask(query)
        except ExternalAPIError as e:
            raise ProviderError("perplexity", e.message) from e

    async def search(self, query: str) -> ResearchResult:
        """One attempt against the active variant."""
        if not self.live:
            return template_research(query)

        answer = await self.ask(query)
        sources = sources_from_answer(answer)
        logger.info(
            "Research completed",
            extra={"provider": "perplexity", "query": query, "source_count": len(sources)},
        )
        return ResearchResult(
            content=answer.content,
            sources=sources,
            metadata=ResearchMetadata(
                provider="perplexity",
                query=query,
                model=answer.model,
            ),
        )

    async def research(self, query: str) -> ResearchResult:
        """Search with graceful degradation to the template result."""
        try:
            return await self.search(query)
        except ProviderError as e:
            logger.warning(
                "Research provider failed, using template fallback",
                extra={"query": query, "error": e.message},
            )
            return template_research(query, fallback=True)


_research_provider: ResearchProvider | None = None


def get_research_provider() -> ResearchProvider:
    """Get singleton research provider."""
    global _research_provider
    if _research_provider is None:
        _research_provider = ResearchProvider()
    return _research_provider
