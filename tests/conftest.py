"""
Pytest configuration and fixtures for Catalog Taxonomy API tests.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.db.base import Base
from app.db.session import enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models import Board, BoardTag, CatalogEntry, ContentType, Format, Tag, asset_boards
from app.services.taxonomy_cache import TaxonomyDisplayCache, get_taxonomy_cache


class FakeClock:
    """Manually advanced monotonic clock for cache TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test database engine on a per-test SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def display_cache(fake_clock) -> TaxonomyDisplayCache:
    """A fresh display cache driven by the fake clock."""
    return TaxonomyDisplayCache(ttl_seconds=60, clock=fake_clock)


@pytest_asyncio.fixture(scope="function")
async def client(db_session, display_cache) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    def override_get_taxonomy_cache():
        return display_cache

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_taxonomy_cache] = override_get_taxonomy_cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# -----------------------------------------------------------------------------
# Seed data
# -----------------------------------------------------------------------------


def _entry(slug: str, title: str, hub: str, tags: list[str], status: str = "published", **extra) -> CatalogEntry:
    return CatalogEntry(
        id=f"entry-{slug}",
        slug=slug,
        title=title,
        hub=hub,
        format="slides",
        tags=tags,
        status=status,
        **extra,
    )


@pytest_asyncio.fixture
async def seeded(db_session: AsyncSession) -> dict[str, Any]:
    """
    Committed catalog with three boards, three tags and four entries.

    sales-kit holds pricing (overridden as "Pricing & Packaging") and
    competitive; onboarding holds competitive only. Three entries are
    placed on sales-kit, one of them a draft.
    """
    boards = [
        Board(id="board-sales", slug="sales-kit", name="Sales Kit", icon="S",
              color="#1d4ed8", light_color="#dbeafe", accent_color="#1e3a8a", sort_order=1),
        Board(id="board-onboarding", slug="onboarding", name="Onboarding", icon="O",
              color="#059669", light_color="#d1fae5", accent_color="#064e3b", sort_order=2),
        Board(id="board-events", slug="events", name="Events", icon=None,
              color="#d97706", light_color="#fef3c7", accent_color="#78350f", sort_order=3),
    ]
    tags = [
        Tag(id="tag-pricing", name="Pricing", slug="pricing", category="commercial", color="#f59e0b"),
        Tag(id="tag-competitive", name="Competitive Intel", slug="competitive-intel", color="#ef4444"),
        Tag(id="tag-gtm", name="Go-To-Market, Enablement", slug="go-to-market-enablement"),
    ]
    entries = [
        _entry("pricing-deck", "Pricing Deck", "content", ["PRICING", "competitive-intel"], views=12, shares=3),
        _entry("battlecard", "Acme Battlecard", "coe", ["Competitive Intel"], views=30, shares=1),
        _entry("draft-guide", "Draft Guide", "content", ["pricing"], status="draft", views=99),
        _entry("webinar", "Launch Webinar", "enablement", ["events", "Go-To-Market, Enablement"], views=5),
    ]
    db_session.add_all(boards + tags + entries)
    await db_session.flush()

    db_session.add_all([
        BoardTag(board_id="board-sales", tag_id="tag-pricing", display_name="Pricing & Packaging", sort_order=1),
        BoardTag(board_id="board-sales", tag_id="tag-competitive", sort_order=2),
        BoardTag(board_id="board-onboarding", tag_id="tag-competitive", sort_order=1),
    ])
    await db_session.execute(
        asset_boards.insert(),
        [
            {"asset_id": "entry-pricing-deck", "board_id": "board-sales"},
            {"asset_id": "entry-battlecard", "board_id": "board-sales"},
            {"asset_id": "entry-draft-guide", "board_id": "board-sales"},
        ],
    )
    await db_session.commit()

    return {
        "boards": [b.slug for b in boards],
        "tags": [t.slug for t in tags],
        "entries": [e.id for e in entries],
    }


@pytest_asyncio.fixture
async def seeded_taxonomy(db_session: AsyncSession) -> None:
    """Two content types and two formats."""
    db_session.add_all([
        ContentType(slug="battlecard", name="Battlecard", hub="coe",
                    bg_color="#fee2e2", text_color="#991b1b", icon="B", sort_order=1),
        ContentType(slug="case-study", name="Case Study", hub="content",
                    bg_color="#dcfce7", text_color="#166534", sort_order=2),
        Format(slug="slides", name="Slides", color="#7c3aed", icon_type="presentation", sort_order=1),
        Format(slug="pdf", name="PDF", color="#dc2626", sort_order=2),
    ])
    await db_session.commit()
