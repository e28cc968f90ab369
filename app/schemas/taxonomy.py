"""
Pydantic schemas for taxonomy badge display and tag index sync.
"""

from pydantic import Field

from app.schemas.base import CamelModel


class TypeDisplay(CamelModel):
    label: str
    color: str
    bg: str
    icon: str | None = None


class FormatDisplay(CamelModel):
    label: str
    color: str
    icon_type: str


class TaxonomyDisplayResponse(CamelModel):
    """Slug-keyed badge lookups for content types and formats."""

    types: dict[str, TypeDisplay] = Field(default_factory=dict)
    formats: dict[str, FormatDisplay] = Field(default_factory=dict)


class TagSyncStatus(CamelModel):
    """Freeform entry tags compared with the tags table."""

    array_tag_count: int
    table_tag_count: int
    missing_tag_count: int
    missing_tags: list[str]


class TagSyncResult(CamelModel):
    """Outcome of rebuilding the asset_tags index."""

    success: bool = True
    assets_processed: int
    unique_tags_found: int
    tags_created: int
    associations_created: int
    associations_removed: int
