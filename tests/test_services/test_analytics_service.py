"""
Tests for engagement tracking at the service level.
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.exceptions import NotFoundException, StorageException, ValidationException
from app.db.session import enable_sqlite_foreign_keys
from app.models import CatalogEntry, ViewEvent
from app.services.analytics_service import AnalyticsService


async def _counters(session, entry_id: str) -> tuple[int, int]:
    row = (
        await session.execute(
            select(CatalogEntry.views, CatalogEntry.shares).where(CatalogEntry.id == entry_id)
        )
    ).one()
    return row.views, row.shares


async def _view_events(session, entry_id: str) -> int:
    return await session.scalar(
        select(func.count()).select_from(ViewEvent).where(ViewEvent.entry_id == entry_id)
    )


@pytest.mark.asyncio
async def test_view_and_share(db_session, seeded):
    service = AnalyticsService(db_session)

    await service.track("entry-webinar", "view", source="board")
    await service.track("entry-webinar", "share")
    await db_session.commit()

    assert await _counters(db_session, "entry-webinar") == (6, 1)
    assert await _view_events(db_session, "entry-webinar") == 1


@pytest.mark.asyncio
async def test_invalid_action_touches_nothing(db_session, seeded):
    with pytest.raises(ValidationException):
        await AnalyticsService(db_session).track("entry-webinar", "click")

    assert await _counters(db_session, "entry-webinar") == (5, 0)


@pytest.mark.asyncio
async def test_unknown_asset(db_session, seeded):
    with pytest.raises(NotFoundException):
        await AnalyticsService(db_session).track("entry-missing", "share")


@pytest.mark.asyncio
async def test_no_lost_updates_across_sessions(session_factory, seeded):
    """A session holding a stale copy of the entry still adds exactly one view."""
    async with session_factory() as first, session_factory() as second:
        stale = await first.get(CatalogEntry, "entry-battlecard")
        assert stale.views == 30

        await AnalyticsService(second).track("entry-battlecard", "view")
        await second.commit()

        await AnalyticsService(first).track("entry-battlecard", "view")
        await first.commit()

    async with session_factory() as check:
        assert await _counters(check, "entry-battlecard") == (32, 1)
        assert await _view_events(check, "entry-battlecard") == 2


@pytest_asyncio.fixture
async def writer_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """
    Sessions on a second engine over the same database file whose
    transactions start with BEGIN IMMEDIATE, so concurrent writers queue
    on the SQLite write lock instead of failing with "database is locked".
    """
    engine = create_async_engine(db_engine.url, connect_args={"timeout": 30})
    enable_sqlite_foreign_keys(engine.sync_engine)

    @event.listens_for(engine.sync_engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_views_are_all_counted(writer_factory, session_factory, seeded):
    """Views tracked from many sessions at once each add exactly one."""
    writers = 10

    async def track_one_view():
        async with writer_factory() as session:
            await AnalyticsService(session).track("entry-battlecard", "view")
            await session.commit()

    await asyncio.gather(*(track_one_view() for _ in range(writers)))

    async with session_factory() as check:
        assert await _counters(check, "entry-battlecard") == (30 + writers, 1)
        assert await _view_events(check, "entry-battlecard") == writers


@pytest.mark.asyncio
async def test_failed_event_write_rolls_back_counter(db_session, seeded, monkeypatch):
    """A view whose event row cannot be written leaves the counter unchanged."""

    async def failing_flush(*args, **kwargs):
        raise OperationalError("INSERT INTO view_events", {}, Exception("disk full"))

    monkeypatch.setattr(db_session, "flush", failing_flush)

    with pytest.raises(StorageException):
        await AnalyticsService(db_session).track("entry-pricing-deck", "view")

    monkeypatch.undo()
    assert await _counters(db_session, "entry-pricing-deck") == (12, 3)
    assert await _view_events(db_session, "entry-pricing-deck") == 0


@pytest.mark.asyncio
async def test_report_recent_window(db_session, seeded):
    service = AnalyticsService(db_session)
    await service.track("entry-webinar", "view")
    await db_session.commit()

    report = await service.report(1)

    assert report["stats"]["recent_views"] == 1
    assert report["stats"]["window_days"] == 1
    assert report["recent_activity"][0]["source"] == "direct"
