"""
Dialect-aware statement helpers.

PostgreSQL and SQLite both support ``INSERT ... ON CONFLICT DO NOTHING
RETURNING``, but SQLAlchemy only exposes it through the dialect-specific
``insert()`` constructs.
"""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def insert_ignoring_conflicts(db: AsyncSession, target):
    """
    Build an ``INSERT ... ON CONFLICT DO NOTHING`` for the session's dialect.

    Args:
        db: Active session (its bind decides the dialect)
        target: Mapped class or Table to insert into

    Returns:
        Insert statement; chain ``.values()`` / ``.returning()`` on it
    """
    dialect_name = db.bind.dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(target).on_conflict_do_nothing()
    if dialect_name == "sqlite":
        return sqlite.insert(target).on_conflict_do_nothing()
    raise NotImplementedError(f"ON CONFLICT DO NOTHING not supported for {dialect_name}")
