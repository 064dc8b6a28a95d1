"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["check_in_date"])
    message: str = Field(..., description="Human-readable error message", examples=["Field required"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["missing"])
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorInfo(BaseModel):
    """Machine-readable part of an error response."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    timestamp: str = Field(..., description="Error timestamp in ISO format", examples=["2024-01-01T00:00:00Z"])
    request_id: Optional[str] = Field(None, description="Request identifier for tracking", examples=["abc12345"])
    details: Optional[List[ErrorDetail]] = Field(None, description="Field errors for validation failures")


class APIErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    error: ErrorInfo


def _error_example(description: str, code: str, message: str) -> Dict[str, Any]:
    return {
        "description": description,
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": {
                    "success": False,
                    "message": message,
                    "error": {
                        "code": code,
                        "timestamp": "2024-01-01T00:00:00Z",
                        "request_id": "abc12345",
                    },
                }
            }
        },
    }


COMMON_ERROR_RESPONSES = {
    400: _error_example("Validation error", "VALIDATION_ERROR", "Invalid property id format: 123"),
    401: _error_example("Authentication required", "AUTH_REQUIRED", "Not authorized to access this route"),
    403: _error_example("Forbidden", "FORBIDDEN", "Not authorized to update this property"),
    404: _error_example("Not found", "NOT_FOUND", "Property not found with ID: 65a1f0c2e4b0a1b2c3d4e5f6"),
    409: _error_example("Conflict", "CONFLICT", "Review with identifier '65a1f0c2e4b0a1b2c3d4e5f6' already exists"),
    503: _error_example("Upstream failure", "UPSTREAM_FAILURE", "Image storage is unavailable"),
    500: _error_example("Internal server error", "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."),
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication and authorization error response schemas."""
    return get_error_responses(401, 403)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 409, 500)
