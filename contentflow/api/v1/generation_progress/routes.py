"""Generation progress API endpoints: start, poll, cancel, and export."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from contentflow.api.v1.dependencies import ProgressStoreDep, TaskManagerDep
from contentflow.api.v1.generation_progress.constants import (
    GENERATION_ALREADY_RUNNING_DETAIL,
    GENERATION_ARTICLE_NOT_READY_DETAIL,
    GENERATION_CANCEL_FAILED_DETAIL,
    GENERATION_EXPORT_FAILED_DETAIL,
    GENERATION_FETCH_FAILED_DETAIL,
    GENERATION_NOT_FOUND_DETAIL,
    GENERATION_START_FAILED_DETAIL,
)
from contentflow.core.exceptions import GenerationAlreadyRunningError
from contentflow.core.ids import new_generation_id
from contentflow.schemas.generation import (
    GenerationCancelResponse,
    GenerationRecord,
    GenerationStartRequest,
    GenerationStartResponse,
)
from contentflow.services.content_renderer import ExportFormat, render_export
from contentflow.services.generation_task_manager import GenerationTaskManager

logger = logging.getLogger(__name__)

router = APIRouter()


async def _start_generation(
    generation_id: str,
    payload: GenerationStartRequest,
    task_manager: GenerationTaskManager,
) -> GenerationStartResponse:
    try:
        record = GenerationRecord.new(
            generation_id,
            input=payload.input,
            type=payload.type,
            options=payload.options,
        )
        await task_manager.start(record)
    except GenerationAlreadyRunningError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=GENERATION_ALREADY_RUNNING_DETAIL,
        ) from exc
    except Exception as exc:
        logger.exception("Generation start failed", extra={"generation_id": generation_id})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_START_FAILED_DETAIL,
        ) from exc

    return GenerationStartResponse(generation_id=generation_id)


@router.post(
    "",
    response_model=GenerationStartResponse,
    summary="Start a generation with a server-assigned id",
)
async def start_generation(
    payload: GenerationStartRequest,
    task_manager: TaskManagerDep,
) -> GenerationStartResponse:
    """Start the six-stage pipeline and return its new generation id."""
    return await _start_generation(new_generation_id(), payload, task_manager)


@router.post(
    "/{generation_id}",
    response_model=GenerationStartResponse,
    summary="Start a generation",
)
async def start_generation_with_id(
    generation_id: str,
    payload: GenerationStartRequest,
    task_manager: TaskManagerDep,
) -> GenerationStartResponse:
    """Start the six-stage pipeline under a client-chosen id.

    Returns immediately; poll `GET /generation-progress/{generation_id}`.
    """
    return await _start_generation(generation_id, payload, task_manager)


@router.get(
    "/{generation_id}",
    response_model=GenerationRecord,
    summary="Get generation progress",
)
async def get_generation_progress(
    generation_id: str,
    store: ProgressStoreDep,
) -> GenerationRecord:
    """Return the full progress snapshot for a generation."""
    try:
        record = await store.get(generation_id)
    except Exception as exc:
        logger.exception("Generation fetch failed", extra={"generation_id": generation_id})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_FETCH_FAILED_DETAIL,
        ) from exc

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=GENERATION_NOT_FOUND_DETAIL,
        )
    return record


@router.post(
    "/{generation_id}/cancel",
    response_model=GenerationCancelResponse,
    summary="Cancel a running generation",
)
async def cancel_generation(
    generation_id: str,
    store: ProgressStoreDep,
    task_manager: TaskManagerDep,
) -> GenerationCancelResponse:
    """Cancel the pipeline run; `success` is false when nothing was running."""
    if await store.get(generation_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=GENERATION_NOT_FOUND_DETAIL,
        )

    try:
        cancelled = await task_manager.cancel(generation_id)
        record = await store.get(generation_id)
    except Exception as exc:
        logger.exception("Generation cancel failed", extra={"generation_id": generation_id})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_CANCEL_FAILED_DETAIL,
        ) from exc

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=GENERATION_NOT_FOUND_DETAIL,
        )
    return GenerationCancelResponse(
        success=cancelled,
        generation_id=generation_id,
        status=record.status,
    )


@router.get(
    "/{generation_id}/export",
    summary="Export the generated article",
    response_class=Response,
)
async def export_generation_article(
    generation_id: str,
    store: ProgressStoreDep,
    export_format: Annotated[ExportFormat, Query(alias="format")] = "html",
) -> Response:
    """Download the generation's article as HTML, Markdown, or JSON."""
    record = await store.get(generation_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=GENERATION_NOT_FOUND_DETAIL,
        )
    if record.article is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=GENERATION_ARTICLE_NOT_READY_DETAIL,
        )

    try:
        rendered = render_export(record.article, export_format)
    except Exception as exc:
        logger.exception(
            "Generation export failed",
            extra={"generation_id": generation_id, "format": export_format},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_EXPORT_FAILED_DETAIL,
        ) from exc

    return Response(
        content=rendered.body,
        media_type=rendered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )
