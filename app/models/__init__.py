"""
SQLAlchemy ORM models for the Catalog Taxonomy API.
"""

from app.models.associations import BoardTag, asset_boards, asset_tags
from app.models.board import Board
from app.models.catalog import CatalogEntry, EntryStatus, ViewEvent, ViewSource
from app.models.tag import Tag
from app.models.taxonomy import ContentType, Format

__all__ = [
    "Board",
    "BoardTag",
    "CatalogEntry",
    "ContentType",
    "EntryStatus",
    "Format",
    "Tag",
    "ViewEvent",
    "ViewSource",
    "asset_boards",
    "asset_tags",
]
