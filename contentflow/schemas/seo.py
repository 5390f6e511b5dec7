"""SEO schemas."""

from pydantic import BaseModel, Field


class SEOResult(BaseModel):
    """Placeholder SEO result attached to a generation run."""

    seo_score: int = Field(ge=0, le=100)
    meta_description: str
    keyword_density: dict[str, float] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)


class HeadingAnalysis(BaseModel):
    """One heading of an analyzed document."""

    level: int = Field(ge=1, le=6)
    text: str
    keywords: list[str] = Field(default_factory=list)


class SEOAnalysis(BaseModel):
    """Content-sensitive SEO analysis of an HTML document."""

    score: int = Field(ge=0, le=100)
    keyword_density: dict[str, float] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)
    meta_title: str
    meta_description: str
    heading_structure: list[HeadingAnalysis] = Field(default_factory=list)


class SEOAnalyzeRequest(BaseModel):
    """Schema for ad-hoc SEO analysis requests."""

    content: str = Field(min_length=1)
    keywords: list[str] = Field(default_factory=list)
