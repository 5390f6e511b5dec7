"""Research and web search API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status

from contentflow.api.v1.dependencies import ResearchProviderDep, WebSearchDep
from contentflow.api.v1.research.constants import (
    RESEARCH_FAILED_DETAIL,
    WEB_SEARCH_FAILED_DETAIL,
)
from contentflow.schemas.research import (
    ResearchRequest,
    ResearchResult,
    WebSearchRequest,
    WebSearchResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/research", response_model=ResearchResult, summary="Research a query")
async def research(
    payload: ResearchRequest,
    provider: ResearchProviderDep,
) -> ResearchResult:
    """Return research prose and sources; degrades to template research on provider failure."""
    try:
        return await provider.research(payload.query)
    except Exception as exc:
        logger.exception("Research request failed", extra={"query": payload.query})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=RESEARCH_FAILED_DETAIL,
        ) from exc


@router.post("/web-search", response_model=WebSearchResponse, summary="Search the web")
async def web_search(
    payload: WebSearchRequest,
    search_service: WebSearchDep,
) -> WebSearchResponse:
    """Return up to ten deduplicated results across query variants."""
    try:
        return await search_service.search(payload.query.strip())
    except Exception as exc:
        logger.exception("Web search request failed", extra={"query": payload.query})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=WEB_SEARCH_FAILED_DETAIL,
        ) from exc
