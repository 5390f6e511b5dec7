"""Generation progress schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from contentflow.config import settings
from contentflow.schemas.content import Article, InputKind, Source, Tone, utc_now
from contentflow.schemas.seo import SEOResult

StageStatus = Literal["pending", "active", "completed", "error"]
GenerationStatus = Literal["started", "completed", "error", "cancelled"]

STAGE_DEFINITIONS: tuple[tuple[str, str], ...] = (
    ("init", "Initializing Research"),
    ("search", "Web Research"),
    ("analysis", "Content Analysis"),
    ("generation", "Content Generation"),
    ("seo", "SEO Optimization"),
    ("completion", "Finalizing"),
)
STAGE_COUNT = len(STAGE_DEFINITIONS)


class Stage(BaseModel):
    """One step of the fixed generation pipeline."""

    id: str
    title: str
    status: StageStatus = "pending"
    description: str | None = None
    progress: float | None = Field(default=None, ge=0.0, le=100.0)


class GenerationOptions(BaseModel):
    """User options for a generation run."""

    word_count: int = Field(default_factory=lambda: settings.default_word_count, ge=100, le=10000)
    tone: Tone = Field(default_factory=lambda: settings.default_tone)
    target_keywords: list[str] = Field(default_factory=list)

    @field_validator("target_keywords")
    @classmethod
    def _clean_keywords(cls, value: list[str]) -> list[str]:
        return [keyword.strip() for keyword in value if keyword and keyword.strip()]


class GenerationStartRequest(BaseModel):
    """Schema for starting a generation run."""

    input: str = Field(min_length=1, max_length=2000)
    type: InputKind
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    @field_validator("input")
    @classmethod
    def _strip_input(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("input must not be blank")
        return stripped


class GenerationStartResponse(BaseModel):
    """Schema for generation start responses."""

    success: bool = True
    generation_id: str
    message: str = "Generation started successfully"


class GenerationCancelResponse(BaseModel):
    """Schema for generation cancel responses."""

    success: bool
    generation_id: str
    status: GenerationStatus


class GenerationRecord(BaseModel):
    """Full progress snapshot of one generation run."""

    id: str
    input: str
    type: InputKind
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    status: GenerationStatus = "started"
    current_step: int = Field(default=0, ge=0, lt=STAGE_COUNT)
    steps: list[Stage]
    sources: list[Source] = Field(default_factory=list)
    key_points: list[str] = Field(default_factory=list)
    statistics: list[str] = Field(default_factory=list)
    article_preview: str | None = None
    article: Article | None = None
    seo_data: SEOResult | None = None
    error: str | None = None
    start_time: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None

    @classmethod
    def new(
        cls,
        generation_id: str,
        *,
        input: str,
        type: InputKind,
        options: GenerationOptions | None = None,
    ) -> "GenerationRecord":
        """Build the initial record: first stage active, the rest pending."""
        steps = [
            Stage(id=stage_id, title=title, status="active" if index == 0 else "pending")
            for index, (stage_id, title) in enumerate(STAGE_DEFINITIONS)
        ]
        return cls(
            id=generation_id,
            input=input,
            type=type,
            options=options or GenerationOptions(),
            steps=steps,
        )
