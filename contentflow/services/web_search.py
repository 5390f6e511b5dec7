"""Web search fan-out over query variants with URL deduplication."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from contentflow.core.exceptions import ProviderError
from contentflow.schemas.research import WebSearchResponse, WebSearchResult
from contentflow.services.research_provider import (
    ResearchProvider,
    get_research_provider,
    sources_from_answer,
)

logger = logging.getLogger(__name__)

MAX_WEB_RESULTS = 10


def build_search_queries(query: str, year: int | None = None) -> list[str]:
    current_year = year or datetime.now(timezone.utc).year
    return [
        f"{query} industry analysis",
        f"{query} market research report",
        f"{query} trends {current_year}",
        f"{query} business insights",
    ]


class WebSearchService:
    """Collect real search hits for a query; never fabricates URLs."""

    def __init__(self, provider: ResearchProvider | None = None) -> None:
        self.provider = provider if provider is not None else get_research_provider()

    async def search(self, query: str) -> WebSearchResponse:
        results: list[WebSearchResult] = []
        if not self.provider.live:
            logger.info("Web search skipped, no live search provider", extra={"query": query})
            return WebSearchResponse(results=results, query=query, timestamp=datetime.now(timezone.utc))

        seen_urls: set[str] = set()
        for variant in build_search_queries(query):
            try:
                answer = await self.provider.ask(variant)
            except ProviderError as e:
                logger.warning(
                    "Web search variant failed",
                    extra={"query": variant, "error": e.message},
                )
                continue

            for source in sources_from_answer(answer):
                if source.url in seen_urls:
                    continue
                seen_urls.add(source.url)
                results.append(
                    WebSearchResult(
                        url=source.url,
                        title=source.title,
                        snippet=source.excerpt,
                        query=variant,
                    )
                )

        logger.info(
            "Web search completed",
            extra={"query": query, "result_count": min(len(results), MAX_WEB_RESULTS)},
        )
        return WebSearchResponse(
            results=results[:MAX_WEB_RESULTS],
            query=query,
            timestamp=datetime.now(timezone.utc),
        )


_web_search_service: WebSearchService | None = None


def get_web_search_service() -> WebSearchService:
    """Get singleton web search service."""
    global _web_search_service
    if _web_search_service is None:
        _web_search_service = WebSearchService()
    return _web_search_service
