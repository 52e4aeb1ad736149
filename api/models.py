"""
API models and schemas for the FastAPI application.
"""

from pydantic import BaseModel, Field

BOOK_NOT_FOUND = "Book not found"
ROUTE_NOT_FOUND = "Route not found"
INVALID_JSON = "Invalid JSON data"
STORAGE_ERROR = "Storage error"
INTERNAL_ERROR = "Internal server error"


class MessageResponse(BaseModel):
    """Error body returned by every failing request."""
    message: str = Field(..., description="Human-readable error message")
