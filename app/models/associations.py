"""
Association tables for many-to-many relationships.

board_tags carries per-board display data, so it is a mapped class;
asset_boards and asset_tags are plain edge tables.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class BoardTag(Base):
    """
    Board-Tag edge: which tags are sub-groups of which boards.

    display_name overrides Tag.name in this board's context only;
    sort_order is the per-board tag order, independent of Tag.sort_order.
    """
    __tablename__ = "board_tags"
    __table_args__ = (UniqueConstraint("board_id", "tag_id"),)

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    board_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<BoardTag(board_id={self.board_id}, tag_id={self.tag_id})>"


# Asset-Board placement
asset_boards = Table(
    "asset_boards",
    Base.metadata,
    Column(
        "asset_id",
        String(36),
        ForeignKey("catalog_entries.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "board_id",
        String(36),
        ForeignKey("boards.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

# Asset-Tag index over CatalogEntry.tags (rebuilt by the tag re-sync)
asset_tags = Table(
    "asset_tags",
    Base.metadata,
    Column(
        "asset_id",
        String(36),
        ForeignKey("catalog_entries.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        String(36),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)
