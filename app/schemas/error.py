"""
Pydantic schemas for error responses.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error response format.

    Examples:
        400: {"error": "validation_failed", "message": "..."}
        404: {"error": "not_found", "message": "Tag 'pricing' not found"}
        409: {"error": "conflict", "message": "Tag already assigned to this board"}
        500: {"error": "storage_error", "message": "..."}
    """

    error: str = Field(
        ...,
        description="Error code string",
        examples=["validation_failed", "not_found", "conflict", "storage_error"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional additional error details",
    )


class ValidationErrorDetail(BaseModel):
    """One offending request field."""

    field: str
    message: str
    type: str


class ValidationErrorResponse(BaseModel):
    """Response for request validation errors (400)."""

    error: str = "validation_failed"
    message: str = "Request validation failed"
    details: list[ValidationErrorDetail]
