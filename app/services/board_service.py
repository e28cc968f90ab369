"""
Board service - Board registry operations.
Handles board CRUD and CSV export. Board-tag edges live in the
association service.
"""

import csv
import io
import logging
from collections import defaultdict

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException
from app.models.associations import BoardTag, asset_boards
from app.models.board import Board
from app.models.tag import Tag
from app.schemas.board import BoardCreate, BoardUpdate

logger = logging.getLogger(__name__)

BOARD_EXPORT_COLUMNS = [
    "name",
    "slug",
    "icon",
    "color",
    "lightColor",
    "accentColor",
    "sortOrder",
    "tags",
    "assetCount",
    "createdAt",
]

# Columns that may be explicitly cleared by an update
_NULLABLE_FIELDS = {"icon"}


class BoardService:
    """Service class for board operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_slug(self, slug: str) -> Board:
        """
        Get board by slug.

        Raises:
            NotFoundException: If no board has this slug
        """
        result = await self.db.execute(select(Board).where(Board.slug == slug))
        board = result.scalar_one_or_none()
        if not board:
            raise NotFoundException("Board", slug)
        return board

    async def next_sort_order(self) -> int:
        """Sort order one past the current last board, 0 when there are none."""
        max_order = await self.db.scalar(select(func.coalesce(func.max(Board.sort_order), -1)))
        return max_order + 1

    async def create(self, data: BoardCreate) -> Board:
        """
        Create a new board.
        Without an explicit sort order the board goes after the last one.

        Raises:
            ConflictException: If the slug is already taken
        """
        existing = await self.db.execute(select(Board.id).where(Board.slug == data.slug))
        if existing.first():
            raise ConflictException(
                "A board with this slug already exists",
                details={"slug": data.slug},
            )

        sort_order = data.sort_order
        if sort_order is None:
            sort_order = await self.next_sort_order()

        board = Board(
            slug=data.slug,
            name=data.name,
            icon=data.icon,
            color=data.color,
            light_color=data.light_color,
            accent_color=data.accent_color,
            sort_order=sort_order,
        )
        self.db.add(board)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            raise ConflictException(
                "A board with this slug already exists",
                details={"slug": data.slug},
            ) from exc
        await self.db.refresh(board)

        logger.info(f"Created board '{board.slug}'")
        return board

    async def update(self, slug: str, data: BoardUpdate) -> Board:
        """
        Apply a partial update. Omitted fields are left unchanged.

        Raises:
            NotFoundException: If board not found
        """
        board = await self.get_by_slug(slug)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field not in _NULLABLE_FIELDS:
                continue
            setattr(board, field, value)

        await self.db.flush()
        await self.db.refresh(board)
        return board

    async def delete(self, slug: str) -> None:
        """
        Delete a board. Its board_tags and asset_boards rows go with it
        through the ON DELETE CASCADE foreign keys.

        Raises:
            NotFoundException: If board not found
        """
        result = await self.db.execute(
            delete(Board).where(Board.slug == slug).returning(Board.id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundException("Board", slug)
        logger.info(f"Deleted board '{slug}'")

    async def export_csv(self) -> str:
        """
        Export all boards as CSV, with pipe-joined tag slugs in board order
        and the number of placed assets.
        """
        result = await self.db.execute(select(Board).order_by(Board.sort_order, Board.name))
        boards = result.scalars().all()

        tag_rows = await self.db.execute(
            select(BoardTag.board_id, Tag.slug)
            .join(Tag, BoardTag.tag_id == Tag.id)
            .order_by(BoardTag.sort_order, Tag.slug)
        )
        tags_by_board: dict[str, list[str]] = defaultdict(list)
        for board_id, tag_slug in tag_rows:
            tags_by_board[board_id].append(tag_slug)

        count_rows = await self.db.execute(
            select(asset_boards.c.board_id, func.count()).group_by(asset_boards.c.board_id)
        )
        asset_counts = {board_id: count for board_id, count in count_rows}

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(BOARD_EXPORT_COLUMNS)
        for board in boards:
            writer.writerow([
                board.name,
                board.slug,
                board.icon,
                board.color,
                board.light_color,
                board.accent_color,
                board.sort_order,
                "|".join(tags_by_board.get(board.id, [])),
                asset_counts.get(board.id, 0),
                board.created_at.isoformat() if board.created_at else None,
            ])
        return buffer.getvalue()
