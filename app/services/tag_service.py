"""
Tag service - Tag registry operations.
Handles tag CRUD, slug derivation, usage counts and CSV export.
"""

import csv
import io
import logging
import re
from collections import defaultdict
from typing import Any, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.models.associations import BoardTag, asset_tags
from app.models.board import Board
from app.models.tag import Tag
from app.schemas.base import SLUG_PATTERN
from app.schemas.tag import TagCreate, TagUpdate

logger = logging.getLogger(__name__)

TAG_EXPORT_COLUMNS = [
    "name",
    "slug",
    "category",
    "color",
    "sortOrder",
    "boards",
    "assetCount",
    "createdAt",
]

SLUG_RE = re.compile(SLUG_PATTERN)


class TagService:
    """Service class for tag operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_slug(self, slug: str) -> Tag:
        """
        Get tag by slug.

        Raises:
            NotFoundException: If no tag has this slug
        """
        result = await self.db.execute(select(Tag).where(Tag.slug == slug))
        tag = result.scalar_one_or_none()
        if not tag:
            raise NotFoundException("Tag", slug)
        return tag

    async def get_by_id(self, tag_id: str) -> Tag:
        tag = await self.db.get(Tag, tag_id)
        if not tag:
            raise NotFoundException("Tag", tag_id)
        return tag

    async def find_by_slug(self, slug: str) -> Tag | None:
        result = await self.db.execute(select(Tag).where(Tag.slug == slug))
        return result.scalar_one_or_none()

    async def list_with_counts(self) -> list[dict[str, Any]]:
        """
        List all tags with the number of boards and indexed assets using each.

        Counts come from two grouped queries rather than one pair of
        queries per tag.

        Returns:
            Tag dicts (snake_case keys) ordered by sort order, then name
        """
        result = await self.db.execute(select(Tag).order_by(Tag.sort_order, Tag.name))
        tags = result.scalars().all()

        board_counts = await self._board_counts_by_tag()
        asset_counts = await self._asset_counts_by_tag()

        return [
            {
                **_tag_to_dict(tag),
                "board_count": board_counts.get(tag.id, 0),
                "asset_count": asset_counts.get(tag.id, 0),
            }
            for tag in tags
        ]

    async def create(self, data: TagCreate) -> Tag:
        """
        Create a new tag.

        Args:
            data: Tag creation data; slug derived from name when omitted

        Returns:
            Created Tag model

        Raises:
            ValidationException: If no usable slug can be derived
            ConflictException: If the slug or name is already taken
        """
        slug = data.slug or slugify(data.name)
        if not slug:
            raise ValidationException(
                "Could not derive a slug from the tag name",
                details={"name": data.name},
            )
        if not SLUG_RE.fullmatch(slug):
            raise ValidationException(
                "Slug may only contain lowercase letters, digits and hyphens",
                details={"slug": slug},
            )

        existing = await self.db.execute(
            select(Tag.slug, Tag.name).where(or_(Tag.slug == slug, Tag.name == data.name))
        )
        clash = existing.first()
        if clash:
            field = "slug" if clash.slug == slug else "name"
            raise ConflictException(
                f"A tag with this {field} already exists",
                details={"slug": slug, "name": data.name},
            )

        tag = Tag(
            name=data.name,
            slug=slug,
            category=data.category,
            color=data.color,
            sort_order=data.sort_order,
        )
        self.db.add(tag)
        await self._flush_unique(slug, data.name)
        await self.db.refresh(tag)

        logger.info(f"Created tag '{slug}'")
        return tag

    async def update(self, slug: str, data: TagUpdate) -> Tag:
        """
        Update tag display fields. The slug itself never changes.

        Raises:
            NotFoundException: If tag not found
            ConflictException: If the new name belongs to another tag
        """
        tag = await self.get_by_slug(slug)
        changes = data.model_dump(exclude_unset=True)

        new_name = changes.get("name")
        if new_name and new_name != tag.name:
            clash = await self.db.execute(
                select(Tag.id).where(Tag.name == new_name, Tag.id != tag.id)
            )
            if clash.first():
                raise ConflictException(
                    "A tag with this name already exists",
                    details={"name": new_name},
                )

        for field, value in changes.items():
            if field in ("name", "sort_order") and value is None:
                continue
            setattr(tag, field, value)

        await self._flush_unique(slug, tag.name)
        await self.db.refresh(tag)
        return tag

    async def boards_for_tag(self, slug: str) -> Sequence[Board]:
        """
        Get the boards a tag is attached to, in board display order.

        Raises:
            NotFoundException: If tag not found
        """
        tag = await self.get_by_slug(slug)
        query = (
            select(Board)
            .join(BoardTag, BoardTag.board_id == Board.id)
            .where(BoardTag.tag_id == tag.id)
            .order_by(Board.sort_order, Board.name)
        )
        result = await self.db.execute(query)
        return result.scalars().all()

    async def export_csv(self) -> str:
        """
        Export all tags as CSV.

        Columns: name, slug, category, color, sortOrder, boards (pipe-joined
        board slugs), assetCount, createdAt. Fields containing a comma,
        quote or line break are quoted per RFC 4180.
        """
        result = await self.db.execute(select(Tag).order_by(Tag.name))
        tags = result.scalars().all()

        board_rows = await self.db.execute(
            select(BoardTag.tag_id, Board.slug)
            .join(Board, BoardTag.board_id == Board.id)
            .order_by(Board.sort_order, Board.slug)
        )
        boards_by_tag: dict[str, list[str]] = defaultdict(list)
        for tag_id, board_slug in board_rows:
            boards_by_tag[tag_id].append(board_slug)

        asset_counts = await self._asset_counts_by_tag()

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(TAG_EXPORT_COLUMNS)
        for tag in tags:
            writer.writerow([
                tag.name,
                tag.slug,
                tag.category,
                tag.color,
                tag.sort_order,
                "|".join(boards_by_tag.get(tag.id, [])),
                asset_counts.get(tag.id, 0),
                tag.created_at.isoformat() if tag.created_at else None,
            ])

        logger.debug(f"Exported {len(tags)} tags")
        return buffer.getvalue()

    async def _board_counts_by_tag(self) -> dict[str, int]:
        result = await self.db.execute(
            select(BoardTag.tag_id, func.count(BoardTag.id)).group_by(BoardTag.tag_id)
        )
        return {tag_id: count for tag_id, count in result}

    async def _asset_counts_by_tag(self) -> dict[str, int]:
        result = await self.db.execute(
            select(asset_tags.c.tag_id, func.count()).group_by(asset_tags.c.tag_id)
        )
        return {tag_id: count for tag_id, count in result}

    async def _flush_unique(self, slug: str, name: str) -> None:
        # A concurrent writer can still win the unique index after our check
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            raise ConflictException(
                "A tag with this slug or name already exists",
                details={"slug": slug, "name": name},
            ) from exc


def slugify(name: str) -> str:
    """
    Derive a tag slug from its name.

    Lowercases, turns each whitespace run into a hyphen and strips every
    character outside ``[a-z0-9-]``.

    >>> slugify("Go-To-Market, Enablement")
    'go-to-market-enablement'
    """
    slug = re.sub(r"\s+", "-", name.lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def _tag_to_dict(tag: Tag) -> dict[str, Any]:
    return {
        "id": tag.id,
        "name": tag.name,
        "slug": tag.slug,
        "category": tag.category,
        "color": tag.color,
        "sort_order": tag.sort_order,
        "created_at": tag.created_at,
    }
