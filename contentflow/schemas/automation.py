"""Automation (synchronous generation) schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from contentflow.schemas.content import Article, InputKind, Tone, utc_now
from contentflow.schemas.generation import GenerationOptions

RequestStatus = Literal["pending", "researching", "generating", "completed", "error"]


class ContentRequest(BaseModel):
    """A submitted automation request and its lifecycle status."""

    id: str
    type: InputKind
    input: str
    target_keywords: list[str] = Field(default_factory=list)
    word_count: int
    tone: Tone
    created_at: datetime = Field(default_factory=utc_now)
    status: RequestStatus = "pending"


class AutomationStartRequest(BaseModel):
    """Schema for synchronous automation requests."""

    input: str = Field(min_length=1, max_length=2000)
    type: InputKind
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class AutomationStartResponse(BaseModel):
    """Schema for automation responses."""

    success: bool = True
    article_id: str
    message: str = "Article generation started successfully"


class AutomationRequestResponse(BaseModel):
    request: ContentRequest


class AutomationArticleResponse(BaseModel):
    article: Article


class AutomationListResponse(BaseModel):
    requests: list[ContentRequest] = Field(default_factory=list)
    articles: list[Article] = Field(default_factory=list)
