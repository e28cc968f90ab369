"""
Response utilities for the Catalog Taxonomy API.
Provides standardized error and CSV download responses.
"""

from datetime import date
from typing import Any

from fastapi import Response
from fastapi.responses import JSONResponse


def create_error_response(
    error: str,
    message: str,
    status_code: int,
    details: Any = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        error: Error code string
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details

    Returns:
        JSONResponse with error payload
    """
    content = {
        "error": error,
        "message": message,
    }
    if details:
        content["details"] = details

    return JSONResponse(status_code=status_code, content=content)


def create_csv_response(content: str, name: str) -> Response:
    """
    Wrap CSV text as a dated attachment download.

    Args:
        content: CSV document
        name: Export name, e.g. "tags" gives tags-export-2026-10-18.csv

    Returns:
        text/csv Response with Content-Disposition header
    """
    filename = f"{name}-export-{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
