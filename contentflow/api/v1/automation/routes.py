"""Automation API endpoints: synchronous research-to-article runs."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from contentflow.api.v1.automation.constants import (
    ARTICLE_NOT_FOUND_DETAIL,
    AUTOMATION_EXPORT_FAILED_DETAIL,
    AUTOMATION_FAILED_DETAIL,
    AUTOMATION_FETCH_FAILED_DETAIL,
    REQUEST_NOT_FOUND_DETAIL,
)
from contentflow.api.v1.dependencies import AutomationEngineDep
from contentflow.core.exceptions import ArticleNotFoundError, RequestNotFoundError
from contentflow.schemas.automation import (
    AutomationArticleResponse,
    AutomationListResponse,
    AutomationRequestResponse,
    AutomationStartRequest,
    AutomationStartResponse,
)
from contentflow.services.content_renderer import ExportFormat, render_export

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AutomationStartResponse,
    summary="Run research and generation synchronously",
)
async def run_automation(
    payload: AutomationStartRequest,
    engine: AutomationEngineDep,
) -> AutomationStartResponse:
    """Research, write, and score an article before responding."""
    try:
        article_id = await engine.process_request(payload.input, payload.type, payload.options)
    except Exception as exc:
        logger.exception("Automation request failed", extra={"type": payload.type})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=AUTOMATION_FAILED_DETAIL,
        ) from exc

    return AutomationStartResponse(article_id=article_id)


@router.get(
    "",
    response_model=None,
    summary="Look up automation requests and articles",
)
async def get_automation_data(
    engine: AutomationEngineDep,
    request_id: Annotated[str | None, Query()] = None,
    article_id: Annotated[str | None, Query()] = None,
) -> AutomationRequestResponse | AutomationArticleResponse | AutomationListResponse:
    """Return one request, one article, or everything when no id is given."""
    try:
        if request_id:
            return AutomationRequestResponse(request=engine.get_request(request_id))
        if article_id:
            return AutomationArticleResponse(article=engine.get_article(article_id))
        return AutomationListResponse(
            requests=engine.list_requests(),
            articles=engine.list_articles(),
        )
    except RequestNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=REQUEST_NOT_FOUND_DETAIL,
        ) from exc
    except ArticleNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ARTICLE_NOT_FOUND_DETAIL,
        ) from exc
    except Exception as exc:
        logger.exception("Automation lookup failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=AUTOMATION_FETCH_FAILED_DETAIL,
        ) from exc


@router.get(
    "/articles/{article_id}/export",
    summary="Export an automation article",
    response_class=Response,
)
async def export_automation_article(
    article_id: str,
    engine: AutomationEngineDep,
    export_format: Annotated[ExportFormat, Query(alias="format")] = "html",
) -> Response:
    """Download an article as HTML, Markdown, or JSON."""
    try:
        article = engine.get_article(article_id)
    except ArticleNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ARTICLE_NOT_FOUND_DETAIL,
        ) from exc

    try:
        rendered = render_export(article, export_format)
    except Exception as exc:
        logger.exception(
            "Article export failed",
            extra={"article_id": article_id, "format": export_format},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=AUTOMATION_EXPORT_FAILED_DETAIL,
        ) from exc

    return Response(
        content=rendered.body,
        media_type=rendered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )
