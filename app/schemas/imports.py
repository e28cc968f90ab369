"""
Pydantic schemas for CSV import results.
"""

from pydantic import Field

from app.schemas.base import CamelModel


class ImportRowResult(CamelModel):
    """
    Outcome of one CSV data row.

    row is the 1-based data row number (the header is not counted).
    unmatched lists board or tag references in the row that do not exist
    and were left out.
    """

    success: bool
    row: int
    slug: str
    name: str
    error: str | None = None
    created: bool = False
    updated: bool = False
    skipped: bool = False
    unmatched: list[str] = Field(default_factory=list)


class ImportSummary(CamelModel):
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


class ImportResponse(CamelModel):
    success: bool = True
    summary: ImportSummary
    results: list[ImportRowResult] = Field(default_factory=list)
