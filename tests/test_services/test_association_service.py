"""
Tests for board, tag and asset associations at the service level.
"""

import pytest
from sqlalchemy import Delete, func, select
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ConflictException, NotFoundException, StorageException
from app.models import Board, BoardTag, Tag, asset_tags
from app.schemas.board import BoardTagAttach
from app.services.association_service import AssociationService


async def _board_tag_count(session, tag_id: str) -> int:
    return await session.scalar(
        select(func.count()).select_from(BoardTag).where(BoardTag.tag_id == tag_id)
    )


@pytest.mark.asyncio
async def test_reorder_boards_ignores_unknown_and_unlisted(db_session, seeded):
    service = AssociationService(db_session)

    updated = await service.reorder_boards(["events", "ghost", "sales-kit"])
    await db_session.commit()

    assert updated == 2
    rows = (await db_session.execute(select(Board.slug, Board.sort_order).order_by(Board.slug))).all()
    assert dict(rows) == {"events": 0, "onboarding": 2, "sales-kit": 2}


@pytest.mark.asyncio
async def test_list_boards_matches_single_board_detail(db_session, seeded):
    """Batched listing gives every board the same shape as its detail view."""
    service = AssociationService(db_session)

    listing = await service.list_boards_with_tags_and_counts()
    for board in listing:
        assert board == await service.get_board_detail(board["slug"])


@pytest.mark.asyncio
async def test_attach_appends_after_last_tag(db_session, seeded):
    service = AssociationService(db_session)

    attached = await service.attach_tag("sales-kit", BoardTagAttach(tag_id="tag-gtm"))

    assert attached["sort_order"] == 3
    assert attached["label"] == "Go-To-Market, Enablement"


@pytest.mark.asyncio
async def test_attach_duplicate_edge_conflicts(db_session, seeded):
    service = AssociationService(db_session)

    with pytest.raises(ConflictException):
        await service.attach_tag("onboarding", BoardTagAttach(tag_name="Competitive Intel"))


@pytest.mark.asyncio
async def test_detach_missing_board(db_session, seeded):
    with pytest.raises(NotFoundException):
        await AssociationService(db_session).detach_tag("ghost", "pricing")


@pytest.mark.asyncio
async def test_delete_tag_removes_all_edges(db_session, seeded):
    service = AssociationService(db_session)
    await service.sync_asset_tags()
    await db_session.commit()

    deleted = await service.delete_tag("competitive-intel")
    await db_session.commit()

    assert deleted.slug == "competitive-intel"
    assert await _board_tag_count(db_session, "tag-competitive") == 0
    assert await db_session.scalar(
        select(func.count()).select_from(asset_tags).where(asset_tags.c.tag_id == "tag-competitive")
    ) == 0
    assert await db_session.scalar(select(Tag.id).where(Tag.slug == "competitive-intel")) is None

    with pytest.raises(NotFoundException):
        await service.delete_tag("competitive-intel")


@pytest.mark.asyncio
async def test_delete_tag_failure_keeps_edges(db_session, seeded, monkeypatch):
    """If deleting the tag row fails, the already-deleted edges come back."""
    service = AssociationService(db_session)
    real_execute = db_session.execute

    async def failing_execute(statement, *args, **kwargs):
        if isinstance(statement, Delete) and statement.table.name == "tags":
            raise OperationalError(str(statement), {}, Exception("disk I/O error"))
        return await real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", failing_execute)

    with pytest.raises(StorageException):
        await service.delete_tag("competitive-intel")

    monkeypatch.undo()
    assert await _board_tag_count(db_session, "tag-competitive") == 2
    assert await db_session.scalar(select(Tag.id).where(Tag.slug == "competitive-intel")) == "tag-competitive"


@pytest.mark.asyncio
async def test_sync_removes_stale_index_rows(db_session, seeded):
    service = AssociationService(db_session)
    await service.sync_asset_tags()
    await db_session.commit()

    await db_session.execute(
        asset_tags.insert().values(asset_id="entry-webinar", tag_id="tag-pricing")
    )
    await db_session.commit()

    stats = await service.sync_asset_tags()

    assert stats["associations_removed"] == 1
    assert stats["associations_created"] == 0


@pytest.mark.asyncio
async def test_sync_status_reports_missing(db_session, seeded):
    status = await AssociationService(db_session).asset_tag_sync_status()

    assert status["missing_tags"] == ["events"]
    assert status["table_tag_count"] == 3
