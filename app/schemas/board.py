"""
Pydantic schemas for Board and board-tag request/response validation.
"""

from datetime import datetime

from pydantic import Field, model_validator

from app.schemas.base import SLUG_PATTERN, CamelModel


class BoardCreate(CamelModel):
    """Request body for creating a board. Slug, name and the color triple are required."""

    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    name: str = Field(..., min_length=1, max_length=100)
    icon: str | None = Field(default=None, max_length=20)
    color: str = Field(..., min_length=1, max_length=20)
    light_color: str = Field(..., min_length=1, max_length=20)
    accent_color: str = Field(..., min_length=1, max_length=20)
    sort_order: int | None = None


class BoardUpdate(CamelModel):
    """Partial board update; the slug cannot change."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    icon: str | None = Field(default=None, max_length=20)
    color: str | None = Field(default=None, min_length=1, max_length=20)
    light_color: str | None = Field(default=None, min_length=1, max_length=20)
    accent_color: str | None = Field(default=None, min_length=1, max_length=20)
    sort_order: int | None = None


class BoardResponse(CamelModel):
    """Response schema for a single board."""

    id: str
    slug: str
    name: str
    icon: str | None = None
    color: str
    light_color: str
    accent_color: str
    sort_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BoardTagResponse(CamelModel):
    """
    A tag in a board's context.

    display_name is the raw per-board override (None when unset);
    label is what the board shows: the override, or the tag name.
    """

    id: str
    name: str
    slug: str
    color: str | None = None
    display_name: str | None = None
    label: str
    sort_order: int = 0


class BoardDetailResponse(BoardResponse):
    """Board with its ordered tags and number of placed assets."""

    tags: list[BoardTagResponse] = Field(default_factory=list)
    asset_count: int = 0


class BoardReorderRequest(CamelModel):
    """Ordered board slugs; position becomes the board's sort order."""

    board_order: list[str]


class BoardTagAttach(CamelModel):
    """
    Attach an existing tag (tag_id) or a tag by name, created if missing.
    """

    tag_id: str | None = None
    tag_name: str | None = Field(default=None, min_length=1, max_length=100)
    tag_slug: str | None = Field(default=None, max_length=100, pattern=SLUG_PATTERN)
    display_name: str | None = Field(default=None, max_length=100)
    sort_order: int | None = None

    @model_validator(mode="after")
    def require_tag_reference(self) -> "BoardTagAttach":
        if not self.tag_id and not self.tag_name:
            raise ValueError("Tag ID or name required")
        return self


class BoardTagOrderItem(CamelModel):
    """
    New position (and optionally display name) for one tag on a board.

    An omitted display_name leaves the override unchanged; an empty
    string or null clears it.
    """

    tag_id: str | None = None
    tag_slug: str | None = None
    sort_order: int
    display_name: str | None = Field(default=None, max_length=100)


class BoardTagReorderRequest(CamelModel):
    tag_order: list[BoardTagOrderItem]


class AssetPlacement(CamelModel):
    asset_id: str = Field(..., min_length=1)
