"""FastAPI application entry point."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contentflow.api.v1.router import api_router
from contentflow.config import settings
from contentflow.core.exceptions import ContentFlowError
from contentflow.core.logging import setup_logging
from contentflow.core.redis import close_redis
from contentflow.services.generation_task_manager import get_generation_task_manager
from contentflow.services.progress_store import ProgressStore, get_progress_store

logger = logging.getLogger(__name__)

INVALID_REQUEST_DETAIL = "Invalid request body"
INTERNAL_ERROR_DETAIL = "Internal server error"


async def _sweep_expired(store: ProgressStore, interval_seconds: int) -> None:
    """Periodically evict expired progress records."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await store.evict_expired()
        except Exception:
            logger.exception("Progress store sweep failed", extra={"backend": store.backend})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()

    store = get_progress_store()
    logger.info(
        "Starting ContentFlow AI",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "research_provider": settings.research_provider,
            "perplexity_enabled": settings.perplexity_enabled,
            "generation_model": settings.generation_model,
            "progress_store": store.backend,
        },
    )

    sweeper = asyncio.create_task(
        _sweep_expired(store, max(1, settings.progress_sweep_interval_seconds)),
        name="progress-store-sweeper",
    )

    yield

    logger.info("Shutting down ContentFlow AI")
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    await get_generation_task_manager().shutdown()
    if settings.progress_store_backend == "redis":
        await close_redis()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": INVALID_REQUEST_DETAIL, "details": jsonable_encoder(exc.errors())},
    )


async def contentflow_exception_handler(request: Request, exc: ContentFlowError) -> JSONResponse:
    logger.error(
        "Unhandled application error",
        extra={"path": request.url.path, "error": exc.message, "details": exc.details},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_DETAIL},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Research-backed article generation: a six-stage research, analysis, "
            "generation, and SEO pipeline with pollable progress"
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        cast(Any, CORSMiddleware),
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, cast(Any, http_exception_handler))
    app.add_exception_handler(RequestValidationError, cast(Any, validation_exception_handler))
    app.add_exception_handler(ContentFlowError, cast(Any, contentflow_exception_handler))

    # Include API router
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health, version, and generation runtime state.",
    )
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "progress_store": get_progress_store().backend,
            "running_generations": get_generation_task_manager().running_count,
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "contentflow.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
