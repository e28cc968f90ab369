"""
Catalog entry and view event models.

Catalog entries are owned by the catalog component; this service reads them
and only ever increments their views/shares counters.
"""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class EntryStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ViewSource(str, enum.Enum):
    """Known origins of a tracked view. Other values are stored as given."""
    DIRECT = "direct"
    SEARCH = "search"
    BOARD = "board"
    SHARE_LINK = "share-link"
    RELATED = "related"


class CatalogEntry(Base):
    """Catalog asset record (subset of columns used by this service)."""
    __tablename__ = "catalog_entries"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    hub: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    format: Mapped[str] = mapped_column(String(50), nullable=False)
    types: Mapped[list | None] = mapped_column(JSON, nullable=True, default=None)
    tags: Mapped[list | None] = mapped_column(
        JSON,
        nullable=True,
        default=None,
        comment="Freeform tag strings",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EntryStatus.DRAFT.value,
        index=True,
    )

    # Engagement counters, increments only
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shares: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<CatalogEntry(slug={self.slug}, hub={self.hub})>"


class ViewEvent(Base):
    """
    Append-only view log. Rows are never updated or deleted.
    session_id is kept for analytics only and is not an identity.
    """
    __tablename__ = "view_events"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    entry_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("catalog_entries.id"),
        nullable=False,
        index=True,
    )
    source: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=ViewSource.DIRECT.value,
    )
    session_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ViewEvent(entry_id={self.entry_id}, source={self.source})>"
