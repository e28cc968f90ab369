"""
Association service - board/tag/asset edges.

Owns the board_tags, asset_boards and asset_tags rows. Tags, boards and
catalog entries themselves belong to their registries; this service only
creates, orders and removes the edges between them.

Edge removal is idempotent: detaching a tag that is not on a board (or
removing an asset that is not placed there) succeeds without change.
A missing board, tag or asset is still reported as not found.
"""

import logging
from collections import defaultdict
from typing import Any, Sequence
from uuid import uuid4

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException, StorageException
from app.db.dialect import insert_ignoring_conflicts
from app.models.associations import BoardTag, asset_boards, asset_tags
from app.models.board import Board
from app.models.catalog import CatalogEntry, EntryStatus
from app.models.tag import Tag
from app.schemas.board import BoardTagAttach, BoardTagOrderItem
from app.schemas.tag import TagCreate, TagResponse
from app.services.board_service import BoardService
from app.services.matching import count_matches_per_board_tag, match_board_tags, tags_equivalent
from app.services.tag_service import TagService, slugify

logger = logging.getLogger(__name__)

# Missing freeform tags reported by the sync status check
SYNC_STATUS_SAMPLE_SIZE = 50


class AssociationService:
    """Service class for board, tag and asset associations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.boards = BoardService(db)
        self.tags = TagService(db)

    # ------------------------------------------------------------------
    # Board listings
    # ------------------------------------------------------------------

    async def list_boards_with_tags_and_counts(self) -> list[dict[str, Any]]:
        """
        List every board with its ordered tags and its asset count.

        Three batched queries (boards, all board-tag edges, grouped
        asset counts) produce the same per-board shape as querying each
        board on its own.

        Returns:
            Board dicts in board sort order, each with ``tags`` and ``asset_count``
        """
        result = await self.db.execute(select(Board).order_by(Board.sort_order, Board.name))
        boards = result.scalars().all()
        if not boards:
            return []

        board_ids = [board.id for board in boards]
        tags_by_board = await self._board_tags_for(board_ids)
        counts = await self._asset_counts_for(board_ids)

        return [
            {
                **_board_to_dict(board),
                "tags": tags_by_board.get(board.id, []),
                "asset_count": counts.get(board.id, 0),
            }
            for board in boards
        ]

    async def get_board_detail(self, board_slug: str) -> dict[str, Any]:
        """
        Get one board with its ordered tags and asset count.

        Raises:
            NotFoundException: If board not found
        """
        board = await self.boards.get_by_slug(board_slug)
        tags_by_board = await self._board_tags_for([board.id])
        counts = await self._asset_counts_for([board.id])
        return {
            **_board_to_dict(board),
            "tags": tags_by_board.get(board.id, []),
            "asset_count": counts.get(board.id, 0),
        }

    async def list_board_tags(self, board_slug: str) -> list[dict[str, Any]]:
        board = await self.boards.get_by_slug(board_slug)
        tags_by_board = await self._board_tags_for([board.id])
        return tags_by_board.get(board.id, [])

    async def reorder_boards(self, ordered_slugs: Sequence[str]) -> int:
        """
        Set each listed board's sort order to its position in the sequence.

        One independent update per slug. Boards not listed keep their
        current order; unknown slugs are ignored.

        Returns:
            Number of boards updated
        """
        updated = 0
        for index, slug in enumerate(ordered_slugs):
            result = await self.db.execute(
                update(Board)
                .where(Board.slug == slug)
                .values(sort_order=index, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                logger.debug(f"Reorder skipped unknown board '{slug}'")
            updated += result.rowcount
        return updated

    # ------------------------------------------------------------------
    # Board <-> Tag edges
    # ------------------------------------------------------------------

    async def attach_tag(self, board_slug: str, data: BoardTagAttach) -> dict[str, Any]:
        """
        Attach a tag to a board.

        The tag is given by id, or by name (and optional slug) in which case
        it is looked up by slug and created when missing. Without an explicit
        sort order the tag is appended after the board's last tag.

        Raises:
            NotFoundException: If the board, or the tag id, does not exist
            ConflictException: If the tag is already on the board
        """
        board = await self.boards.get_by_slug(board_slug)

        if data.tag_id:
            tag = await self.tags.get_by_id(data.tag_id)
        else:
            slug = data.tag_slug or slugify(data.tag_name)
            tag = await self.tags.find_by_slug(slug)
            if tag is None:
                tag = await self.tags.create(TagCreate(name=data.tag_name, slug=slug or None))

        sort_order = data.sort_order
        if sort_order is None:
            sort_order = await self._next_tag_position(board.id)

        stmt = (
            insert_ignoring_conflicts(self.db, BoardTag)
            .values(
                id=str(uuid4()),
                board_id=board.id,
                tag_id=tag.id,
                display_name=data.display_name or None,
                sort_order=sort_order,
            )
            .returning(BoardTag.sort_order, BoardTag.display_name)
        )
        row = (await self.db.execute(stmt)).first()
        if row is None:
            raise ConflictException(
                "Tag already assigned to this board",
                details={"board": board.slug, "tag": tag.slug},
            )

        logger.info(f"Attached tag '{tag.slug}' to board '{board.slug}'")
        return _board_tag_to_dict(tag.id, tag.name, tag.slug, tag.color, row.display_name, row.sort_order)

    async def detach_tag(self, board_slug: str, tag_slug: str) -> bool:
        """
        Remove a tag from a board. Absent edges are a successful no-op.

        Returns:
            True if an edge was removed

        Raises:
            NotFoundException: If the board or the tag does not exist
        """
        board = await self.boards.get_by_slug(board_slug)
        tag = await self.tags.get_by_slug(tag_slug)

        result = await self.db.execute(
            delete(BoardTag)
            .where(BoardTag.board_id == board.id, BoardTag.tag_id == tag.id)
            .execution_options(synchronize_session=False)
        )
        removed = result.rowcount > 0
        if not removed:
            logger.debug(f"Tag '{tag_slug}' was not on board '{board_slug}'")
        return removed

    async def reorder_board_tags(
        self,
        board_slug: str,
        items: Sequence[BoardTagOrderItem],
    ) -> list[dict[str, Any]]:
        """
        Update per-board tag positions and, optionally, display overrides.

        Items reference tags by id or slug; items naming unknown tags are
        skipped. An item without ``display_name`` keeps the current
        override, an empty or null one clears it.

        Returns:
            The board's tags in their new order

        Raises:
            NotFoundException: If board not found
        """
        board = await self.boards.get_by_slug(board_slug)

        for item in items:
            tag_id = item.tag_id
            if not tag_id and item.tag_slug:
                tag = await self.tags.find_by_slug(item.tag_slug)
                tag_id = tag.id if tag else None
            if not tag_id:
                continue

            values: dict[str, Any] = {"sort_order": item.sort_order}
            if "display_name" in item.model_fields_set:
                values["display_name"] = item.display_name or None

            await self.db.execute(
                update(BoardTag)
                .where(BoardTag.board_id == board.id, BoardTag.tag_id == tag_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )

        tags_by_board = await self._board_tags_for([board.id])
        return tags_by_board.get(board.id, [])

    async def set_tag_boards(self, tag_id: str, board_ids: Sequence[str]) -> None:
        """
        Make ``board_ids`` the exact set of boards a tag is on.

        Edges to boards that stay keep their position and display name.
        Edges to new boards are appended after each board's last tag.
        """
        wanted = list(dict.fromkeys(board_ids))
        current = set(
            (await self.db.scalars(select(BoardTag.board_id).where(BoardTag.tag_id == tag_id))).all()
        )

        stale = [board_id for board_id in current if board_id not in wanted]
        if stale:
            await self.db.execute(
                delete(BoardTag)
                .where(BoardTag.tag_id == tag_id, BoardTag.board_id.in_(stale))
                .execution_options(synchronize_session=False)
            )

        for board_id in wanted:
            if board_id in current:
                continue
            position = await self._next_tag_position(board_id)
            await self.db.execute(
                insert_ignoring_conflicts(self.db, BoardTag).values(
                    id=str(uuid4()), board_id=board_id, tag_id=tag_id, sort_order=position
                )
            )

    async def set_board_tags(self, board_id: str, tag_ids: Sequence[str]) -> None:
        """
        Make ``tag_ids`` the board's tags, ordered 1..n as listed.

        Tags that stay on the board keep their display name override.
        """
        wanted = list(dict.fromkeys(tag_ids))
        current = set(
            (await self.db.scalars(select(BoardTag.tag_id).where(BoardTag.board_id == board_id))).all()
        )

        stale = [tag_id for tag_id in current if tag_id not in wanted]
        if stale:
            await self.db.execute(
                delete(BoardTag)
                .where(BoardTag.board_id == board_id, BoardTag.tag_id.in_(stale))
                .execution_options(synchronize_session=False)
            )

        for position, tag_id in enumerate(wanted, start=1):
            if tag_id in current:
                await self.db.execute(
                    update(BoardTag)
                    .where(BoardTag.board_id == board_id, BoardTag.tag_id == tag_id)
                    .values(sort_order=position)
                    .execution_options(synchronize_session=False)
                )
            else:
                await self.db.execute(
                    insert_ignoring_conflicts(self.db, BoardTag).values(
                        id=str(uuid4()), board_id=board_id, tag_id=tag_id, sort_order=position
                    )
                )

    async def delete_tag(self, tag_slug: str) -> TagResponse:
        """
        Delete a tag together with every edge that references it.

        board_tags rows, asset_tags rows and finally the tag row are
        removed in the caller's transaction. If any statement fails the
        session is rolled back, so no partial cascade is ever committed.

        Returns:
            Snapshot of the deleted tag

        Raises:
            NotFoundException: If tag not found
            StorageException: If any delete fails
        """
        tag = await self.tags.get_by_slug(tag_slug)
        snapshot = TagResponse.model_validate(tag)

        try:
            await self.db.execute(
                delete(BoardTag)
                .where(BoardTag.tag_id == tag.id)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(delete(asset_tags).where(asset_tags.c.tag_id == tag.id))
            result = await self.db.execute(
                delete(Tag).where(Tag.id == tag.id).returning(Tag.id)
            )
            deleted_id = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.warning(f"Deleting tag '{tag_slug}' failed, rolled back: {exc}")
            raise StorageException(
                "Failed to delete tag",
                details={"slug": tag_slug},
            ) from exc

        if deleted_id is None:
            # Removed concurrently between lookup and delete
            await self.db.rollback()
            raise NotFoundException("Tag", tag_slug)

        logger.info(f"Deleted tag '{tag_slug}' and its associations")
        return snapshot

    # ------------------------------------------------------------------
    # Asset <-> Board edges
    # ------------------------------------------------------------------

    async def place_asset(self, board_slug: str, asset_id: str) -> None:
        """
        Place a catalog entry on a board.

        Raises:
            NotFoundException: If the board or entry does not exist
            ConflictException: If the entry is already on the board
        """
        board = await self.boards.get_by_slug(board_slug)
        await self._require_asset(asset_id)

        stmt = (
            insert_ignoring_conflicts(self.db, asset_boards)
            .values(asset_id=asset_id, board_id=board.id)
            .returning(asset_boards.c.asset_id)
        )
        if (await self.db.execute(stmt)).first() is None:
            raise ConflictException(
                "Asset already placed on this board",
                details={"board": board.slug, "assetId": asset_id},
            )

    async def remove_asset(self, board_slug: str, asset_id: str) -> bool:
        """
        Remove a catalog entry from a board. Absent edges are a no-op.

        Raises:
            NotFoundException: If the board or entry does not exist
        """
        board = await self.boards.get_by_slug(board_slug)
        await self._require_asset(asset_id)

        result = await self.db.execute(
            delete(asset_boards).where(
                asset_boards.c.asset_id == asset_id,
                asset_boards.c.board_id == board.id,
            )
        )
        return result.rowcount > 0

    async def board_tag_counts(self, board_slug: str) -> dict[str, int]:
        """
        Count published entries on a board per board tag.

        Entries are matched through their freeform tag strings, not the
        asset_tags index, so counts reflect the entries as edited.

        Raises:
            NotFoundException: If board not found
        """
        board = await self.boards.get_by_slug(board_slug)
        board_tags = (await self._board_tags_for([board.id])).get(board.id, [])

        on_board = select(asset_boards.c.asset_id).where(asset_boards.c.board_id == board.id)
        result = await self.db.execute(
            select(CatalogEntry.tags).where(
                CatalogEntry.id.in_(on_board),
                CatalogEntry.status == EntryStatus.PUBLISHED.value,
            )
        )
        return count_matches_per_board_tag(result.scalars().all(), board_tags)

    # ------------------------------------------------------------------
    # asset_tags index maintenance
    # ------------------------------------------------------------------

    async def sync_asset_tags(self, create_missing: bool = False) -> dict[str, int]:
        """
        Rebuild the asset_tags index from the entries' freeform tags.

        Each entry is linked to every tag its freeform strings match
        (slug or name, case-insensitive); stale links are removed. With
        ``create_missing`` unknown strings are first registered as tags.
        Duplicate inserts from concurrent syncs are ignored.

        Returns:
            Sync statistics

        Raises:
            StorageException: If the rebuild fails (nothing is kept)
        """
        try:
            entries = (await self.db.execute(select(CatalogEntry.id, CatalogEntry.tags))).all()
            unique_names = {name for _, names in entries for name in (names or []) if name}

            known = (await self.db.execute(select(Tag.id, Tag.slug, Tag.name))).all()
            tags_created = 0
            if create_missing:
                known, tags_created = await self._register_missing_tags(unique_names, known)

            desired = {
                (entry_id, tag.id)
                for entry_id, names in entries
                for tag in match_board_tags(names, known)
            }
            rows = await self.db.execute(select(asset_tags.c.asset_id, asset_tags.c.tag_id))
            existing = {(asset_id, tag_id) for asset_id, tag_id in rows}

            to_add = desired - existing
            to_remove = existing - desired

            if to_add:
                await self.db.execute(
                    insert_ignoring_conflicts(self.db, asset_tags).values(
                        [{"asset_id": a, "tag_id": t} for a, t in sorted(to_add)]
                    )
                )
            for asset_id, tag_id in to_remove:
                await self.db.execute(
                    delete(asset_tags).where(
                        asset_tags.c.asset_id == asset_id,
                        asset_tags.c.tag_id == tag_id,
                    )
                )
            await self.db.flush()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.warning(f"Tag index sync failed, rolled back: {exc}")
            raise StorageException("Failed to sync tags") from exc

        stats = {
            "assets_processed": len(entries),
            "unique_tags_found": len(unique_names),
            "tags_created": tags_created,
            "associations_created": len(to_add),
            "associations_removed": len(to_remove),
        }
        logger.info(f"Synced asset tag index: {stats}")
        return stats

    async def asset_tag_sync_status(self) -> dict[str, Any]:
        """
        Compare freeform entry tags with the tags table.

        Returns:
            Counts plus a sample of freeform strings that match no tag
        """
        result = await self.db.execute(select(CatalogEntry.tags))
        array_tags = {name for names in result.scalars() for name in (names or []) if name}

        known = (await self.db.execute(select(Tag.slug, Tag.name))).all()
        missing = sorted(
            name for name in array_tags
            if not any(tags_equivalent(name, tag) for tag in known)
        )
        return {
            "array_tag_count": len(array_tags),
            "table_tag_count": len(known),
            "missing_tag_count": len(missing),
            "missing_tags": missing[:SYNC_STATUS_SAMPLE_SIZE],
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _register_missing_tags(self, names, known):
        created = 0
        known = list(known)
        for name in sorted(names):
            if any(tags_equivalent(name, tag) for tag in known):
                continue
            slug = slugify(name).strip("-")
            if not slug:
                continue
            row = (
                await self.db.execute(
                    insert_ignoring_conflicts(self.db, Tag)
                    .values(id=str(uuid4()), name=name, slug=slug, sort_order=0)
                    .returning(Tag.id, Tag.slug, Tag.name)
                )
            ).first()
            if row is None:
                # Slug or name already taken by a tag that does not match this string
                logger.debug(f"Skipped registering tag '{name}': slug '{slug}' in use")
                continue
            known.append(row)
            created += 1
        return known, created

    async def _next_tag_position(self, board_id: str) -> int:
        max_order = await self.db.scalar(
            select(func.coalesce(func.max(BoardTag.sort_order), 0))
            .where(BoardTag.board_id == board_id)
        )
        return (max_order or 0) + 1

    async def _require_asset(self, asset_id: str) -> None:
        found = await self.db.scalar(select(CatalogEntry.id).where(CatalogEntry.id == asset_id))
        if found is None:
            raise NotFoundException("Asset", asset_id)

    async def _board_tags_for(self, board_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
        query = (
            select(
                BoardTag.board_id,
                BoardTag.display_name,
                BoardTag.sort_order,
                Tag.id,
                Tag.name,
                Tag.slug,
                Tag.color,
            )
            .join(Tag, BoardTag.tag_id == Tag.id)
            .where(BoardTag.board_id.in_(board_ids))
            .order_by(BoardTag.sort_order, Tag.name)
        )
        result = await self.db.execute(query)

        grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for row in result:
            grouped[row.board_id].append(
                _board_tag_to_dict(row.id, row.name, row.slug, row.color, row.display_name, row.sort_order)
            )
        return grouped

    async def _asset_counts_for(self, board_ids: list[str]) -> dict[str, int]:
        result = await self.db.execute(
            select(asset_boards.c.board_id, func.count(func.distinct(asset_boards.c.asset_id)))
            .where(asset_boards.c.board_id.in_(board_ids))
            .group_by(asset_boards.c.board_id)
        )
        return {board_id: count for board_id, count in result}


def _board_to_dict(board: Board) -> dict[str, Any]:
    return {
        "id": board.id,
        "slug": board.slug,
        "name": board.name,
        "icon": board.icon,
        "color": board.color,
        "light_color": board.light_color,
        "accent_color": board.accent_color,
        "sort_order": board.sort_order,
        "created_at": board.created_at,
        "updated_at": board.updated_at,
    }


def _board_tag_to_dict(
    tag_id: str,
    name: str,
    slug: str,
    color: str | None,
    display_name: str | None,
    sort_order: int,
) -> dict[str, Any]:
    return {
        "id": tag_id,
        "name": name,
        "slug": slug,
        "color": color,
        "display_name": display_name,
        "label": display_name or name,
        "sort_order": sort_order,
    }
