"""
Custom exceptions for the Catalog Taxonomy API.

Every failure carries a stable error code plus a human-readable message:
not_found, conflict, validation_failed, payload_too_large, storage_error.
"""

from typing import Any


class CatalogAPIException(Exception):
    """Base exception for all catalog API errors."""

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary."""
        response = {
            "error": self.error,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class ValidationException(CatalogAPIException):
    """400 - Missing or malformed fields, unrecognized enum values."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="validation_failed",
            message=message,
            status_code=400,
            details=details,
        )


class NotFoundException(CatalogAPIException):
    """404 - Referenced tag, board or asset does not exist."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            error="not_found",
            message=f"{resource} '{identifier}' not found",
            status_code=404,
            details={"resource": resource.lower(), "id": identifier},
        )


class ConflictException(CatalogAPIException):
    """409 - Unique constraint violation (duplicate slug, duplicate edge)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="conflict",
            message=message,
            status_code=409,
            details=details,
        )


class PayloadTooLargeException(CatalogAPIException):
    """413 - Uploaded import file exceeds the size limit."""

    def __init__(self, max_size: int):
        max_size_mb = max_size / (1024 * 1024)
        super().__init__(
            error="payload_too_large",
            message=f"Maximum upload size exceeded ({max_size_mb:.0f}MB limit)",
            status_code=413,
        )


class StorageException(CatalogAPIException):
    """500 - Underlying data store error, including connectivity."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="storage_error",
            message=message,
            status_code=500,
            details=details,
        )
