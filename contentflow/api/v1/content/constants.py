"""Constants for content generation and SEO routes."""

GENERATION_FAILED_DETAIL = "Content generation failed"
SEO_ANALYSIS_FAILED_DETAIL = "SEO analysis failed"
