"""Constants for automation routes."""

AUTOMATION_FAILED_DETAIL = "Automation process failed"
AUTOMATION_FETCH_FAILED_DETAIL = "Failed to fetch data"
AUTOMATION_EXPORT_FAILED_DETAIL = "Export failed"
REQUEST_NOT_FOUND_DETAIL = "Request not found"
ARTICLE_NOT_FOUND_DETAIL = "Article not found"
