"""
Taxonomy display cache.

Translates content type and format rows into the slug-keyed badge lookups
used by the frontend, and keeps the result for a fixed TTL. Admin edits to
types or formats show up after the TTL elapses or after a manual refresh.
"""

import asyncio
import logging
import time
from functools import lru_cache
from typing import Any, Awaitable, Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import StorageException
from app.models.taxonomy import ContentType, Format

logger = logging.getLogger(__name__)

DisplayLoader = Callable[[AsyncSession], Awaitable[dict[str, Any]]]


async def load_taxonomy_display(db: AsyncSession) -> dict[str, Any]:
    """
    Read content types and formats and build the display lookup.

    Returns:
        {"types": {slug: {label, color, bg, icon}},
         "formats": {slug: {label, color, iconType}}}

    Raises:
        StorageException: If either table cannot be read
    """
    try:
        types = (
            await db.execute(select(ContentType).order_by(ContentType.sort_order, ContentType.name))
        ).scalars().all()
        formats = (
            await db.execute(select(Format).order_by(Format.sort_order, Format.name))
        ).scalars().all()
    except SQLAlchemyError as exc:
        raise StorageException("Failed to load taxonomy display data") from exc

    return {
        "types": {
            t.slug: {"label": t.name, "color": t.text_color, "bg": t.bg_color, "icon": t.icon}
            for t in types
        },
        "formats": {
            f.slug: {"label": f.name, "color": f.color, "iconType": f.icon_type}
            for f in formats
        },
    }


class TaxonomyDisplayCache:
    """
    Read-through cache for the taxonomy display lookup.

    The value and its load time are stored as one tuple and replaced
    together. Reloads are serialized by an asyncio lock; a failed reload
    leaves the previous value in place and propagates the error.
    """

    def __init__(
        self,
        ttl_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
        loader: DisplayLoader = load_taxonomy_display,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._loader = loader
        self._entry: tuple[dict[str, Any], float] | None = None
        self._lock = asyncio.Lock()

    def _is_fresh(self, entry: tuple[dict[str, Any], float] | None) -> bool:
        return entry is not None and self._clock() - entry[1] < self.ttl_seconds

    async def get(self, db: AsyncSession) -> dict[str, Any]:
        """Return the cached lookup, reloading it when empty or expired."""
        entry = self._entry
        if self._is_fresh(entry):
            return entry[0]

        async with self._lock:
            # Another request may have reloaded while we waited
            entry = self._entry
            if self._is_fresh(entry):
                return entry[0]

            value = await self._loader(db)
            self._entry = (value, self._clock())
            logger.info(
                f"Reloaded taxonomy display cache: {len(value['types'])} types, "
                f"{len(value['formats'])} formats"
            )
            return value

    def invalidate(self) -> None:
        """Drop the cached value so the next read reloads."""
        self._entry = None
        logger.info("Taxonomy display cache invalidated")

    @property
    def loaded_at(self) -> float | None:
        entry = self._entry
        return entry[1] if entry else None


@lru_cache
def get_taxonomy_cache() -> TaxonomyDisplayCache:
    """Get the process-wide taxonomy display cache."""
    return TaxonomyDisplayCache(ttl_seconds=get_settings().TAXONOMY_CACHE_TTL)
