"""
Pydantic schemas for Tag request/response validation.
"""

from datetime import datetime

from pydantic import Field

from app.schemas.base import SLUG_PATTERN, CamelModel


class TagCreate(CamelModel):
    """Request body for creating a tag. The slug is derived from the name if omitted."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = Field(default=None, max_length=100, pattern=SLUG_PATTERN)
    category: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=20)
    sort_order: int = 0


class TagUpdate(CamelModel):
    """Partial update; omitted fields keep their value. Slugs are immutable."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=20)
    sort_order: int | None = None


class TagResponse(CamelModel):
    """Response schema for a single tag."""

    id: str
    name: str
    slug: str
    category: str | None = None
    color: str | None = None
    sort_order: int = 0
    created_at: datetime | None = None


class TagWithCountsResponse(TagResponse):
    """Tag listing entry with usage counts."""

    board_count: int = 0
    asset_count: int = 0


class TagDeleteResponse(CamelModel):
    success: bool = True
    deleted: TagResponse
