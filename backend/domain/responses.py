"""
Standard API response helpers for consistent response formatting.

All endpoints use these helpers so the frontend always sees the same envelope:
- Success: { "success": true, "data": <payload>, "message": "..." }
- Error:   { "success": false, "message": "...", "error": { "code": "...", "details": {...} } }
"""
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Error code (e.g., 'not_found', 'validation_error')")
    details: dict[str, Any] | None = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    error: ErrorDetail = Field(..., description="Error details")


def success_response(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload
        message: Optional human-readable message

    Returns:
        dict: { "success": true, "data": <data>, "message": <message> }
    """
    response: dict[str, Any] = {"success": True}
    if data is not None:
        response["data"] = data
    if message:
        response["message"] = message
    return response


def error_response(message: str, code: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a standardized error response body."""
    return StandardErrorResponse(
        message=message,
        error=ErrorDetail(code=code, details=details or None),
    ).model_dump()
