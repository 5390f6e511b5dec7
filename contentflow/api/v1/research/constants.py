"""Constants for research and web search routes."""

RESEARCH_FAILED_DETAIL = "Research failed"
WEB_SEARCH_FAILED_DETAIL = "Web search failed"
