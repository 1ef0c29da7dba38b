"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(
        None,
        description="Field name that caused the error",
        examples=["price"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Price must be greater than 0"]
    )

    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["greater_than"]
    )


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(
        ...,
        description="Error code identifier",
        examples=["VALIDATION_ERROR"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message"
    )

    timestamp: str = Field(
        ...,
        description="Error timestamp in ISO format"
    )

    request_id: Optional[str] = Field(
        None,
        description="Request identifier for tracking"
    )

    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Field-level detail for validation errors"
    )


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(
        ...,
        description="Error information"
    )


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": "2024-01-01T00:00:00Z",
            "request_id": "abc12345"
        }
    }


COMMON_ERROR_RESPONSES = {
    401: {
        "description": "Unauthorized - Missing, invalid or expired token",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("UNAUTHORIZED", "Invalid or expired token")}}
    },
    403: {
        "description": "Forbidden - Wrong role or no approved access request",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("FORBIDDEN", "Insufficient permissions to edit property 7")}}
    },
    404: {
        "description": "Not Found - Referenced entity is absent",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("NOT_FOUND", "Property not found with ID: 7")}}
    },
    409: {
        "description": "Conflict - Duplicate pending request or request already resolved",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "examples": {
                    "duplicate_pending": {
                        "summary": "Duplicate Pending Request",
                        "value": _example("DUPLICATE_PENDING", "A pending 'edit' request for property 7 already exists")
                    },
                    "already_resolved": {
                        "summary": "Request Already Resolved",
                        "value": _example("REQUEST_ALREADY_RESOLVED", "Access request 4 is already approved")
                    }
                }
            }
        }
    },
    422: {
        "description": "Unprocessable Entity - Validation error",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        **_example("VALIDATION_ERROR", "Request validation failed")["error"],
                        "details": [
                            {"field": "price", "message": "Input should be greater than 0", "type": "greater_than"}
                        ]
                    }
                }
            }
        }
    },
    500: {
        "description": "Internal Server Error - Storage or unexpected failure",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("STORAGE_ERROR", "Storage operation failed")}}
    }
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
    """Get error response schemas for mutating operations."""
    return get_error_responses(401, 403, 404, 409, 422, 500)
