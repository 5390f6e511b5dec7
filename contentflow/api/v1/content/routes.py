"""Standalone content generation and SEO analysis endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status

from contentflow.api.v1.content.constants import (
    GENERATION_FAILED_DETAIL,
    SEO_ANALYSIS_FAILED_DETAIL,
)
from contentflow.api.v1.dependencies import ContentGeneratorDep
from contentflow.schemas.research import GenerateRequest, GenerationResult
from contentflow.schemas.seo import SEOAnalysis, SEOAnalyzeRequest
from contentflow.services.seo_scorer import analyze_content

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate", response_model=GenerationResult, summary="Generate an article")
async def generate_content(
    payload: GenerateRequest,
    generator: ContentGeneratorDep,
) -> GenerationResult:
    """Return title, HTML content, and meta description for a prompt."""
    try:
        return await generator.generate(
            payload.prompt,
            payload.word_count,
            payload.tone,
            payload.research_data,
        )
    except Exception as exc:
        logger.exception("Content generation request failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERATION_FAILED_DETAIL,
        ) from exc


@router.post("/seo/analyze", response_model=SEOAnalysis, summary="Analyze HTML for SEO")
async def analyze_seo(payload: SEOAnalyzeRequest) -> SEOAnalysis:
    """Score an HTML document against target keywords."""
    try:
        return analyze_content(payload.content, payload.keywords)
    except Exception as exc:
        logger.exception("SEO analysis request failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=SEO_ANALYSIS_FAILED_DETAIL,
        ) from exc
