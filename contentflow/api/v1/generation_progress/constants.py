"""Constants for generation progress routes."""

GENERATION_NOT_FOUND_DETAIL = "Generation not found"
GENERATION_ALREADY_RUNNING_DETAIL = "Generation already running"
GENERATION_ARTICLE_NOT_READY_DETAIL = "Article not available yet"
GENERATION_START_FAILED_DETAIL = "Failed to start generation"
GENERATION_FETCH_FAILED_DETAIL = "Failed to get generation progress"
GENERATION_CANCEL_FAILED_DETAIL = "Failed to cancel generation"
GENERATION_EXPORT_FAILED_DETAIL = "Export failed"
