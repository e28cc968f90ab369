"""
Analytics service - engagement counters and view event log.

Tracking increments the per-entry views/shares counters with a SQL
expression (never read-modify-write) and appends a ViewEvent for views.
Reports are computed fresh from the counters and the log on every call.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.exceptions import NotFoundException, StorageException, ValidationException
from app.models.catalog import CatalogEntry, EntryStatus, ViewEvent

logger = logging.getLogger(__name__)

VALID_ACTIONS = ("view", "share")


class AnalyticsService:
    """Service class for engagement tracking and reporting."""

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    async def track(
        self,
        asset_id: str,
        action: str,
        source: str | None = None,
        session_id: str | None = None,
    ) -> None:
        """
        Record a view or share of a catalog entry.

        A view increments ``views`` and appends one ViewEvent; a share only
        increments ``shares``. Both effects of a view land in the caller's
        transaction, and a failure rolls the session back so neither is kept.

        Args:
            asset_id: Catalog entry ID
            action: "view" or "share"
            source: Where the view came from (defaults to DEFAULT_VIEW_SOURCE)
            session_id: Optional client session identifier

        Raises:
            ValidationException: If action is not view or share
            NotFoundException: If no entry has this ID
            StorageException: If the write fails
        """
        if action not in VALID_ACTIONS:
            raise ValidationException(
                'Invalid action. Use "view" or "share"',
                details={"action": action},
            )

        counter = CatalogEntry.views if action == "view" else CatalogEntry.shares
        stmt = (
            update(CatalogEntry)
            .where(CatalogEntry.id == asset_id)
            .values({counter: func.coalesce(counter, 0) + 1})
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundException("Asset", asset_id)

            if action == "view":
                self.db.add(
                    ViewEvent(
                        entry_id=asset_id,
                        source=source or self.settings.DEFAULT_VIEW_SOURCE,
                        session_id=session_id,
                        viewed_at=datetime.now(timezone.utc),
                    )
                )
                await self.db.flush()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.warning(f"Tracking {action} for {asset_id} failed, rolled back: {exc}")
            raise StorageException(
                "Failed to track event",
                details={"assetId": asset_id, "action": action},
            ) from exc

        logger.debug(f"Tracked {action} for {asset_id}")

    async def report(self, window_days: int | None = None) -> dict[str, Any]:
        """
        Build the engagement report over published entries.

        Args:
            window_days: Lookback for the recent view count (default from settings)

        Returns:
            Dict with stats, top_assets, recent_activity and views_by_hub

        Raises:
            ValidationException: If window_days is below 1
        """
        if window_days is None:
            window_days = self.settings.ANALYTICS_DEFAULT_WINDOW_DAYS
        if window_days < 1:
            raise ValidationException(
                "days must be a positive integer",
                details={"days": window_days},
            )

        published = CatalogEntry.status == EntryStatus.PUBLISHED.value

        totals = (
            await self.db.execute(
                select(
                    func.count(CatalogEntry.id),
                    func.coalesce(func.sum(CatalogEntry.views), 0),
                    func.coalesce(func.sum(CatalogEntry.shares), 0),
                ).where(published)
            )
        ).one()

        cutoff = datetime.now(timezone.utc) - timedelta(days=window_days)
        recent_views = await self.db.scalar(
            select(func.count(ViewEvent.id)).where(ViewEvent.viewed_at >= cutoff)
        )

        top = await self.db.execute(
            select(CatalogEntry)
            .where(published)
            .order_by(CatalogEntry.views.desc(), CatalogEntry.title)
            .limit(self.settings.ANALYTICS_TOP_ASSETS_LIMIT)
            .execution_options(populate_existing=True)
        )

        recent = await self.db.execute(
            select(ViewEvent)
            .order_by(ViewEvent.viewed_at.desc())
            .limit(self.settings.ANALYTICS_RECENT_ACTIVITY_LIMIT)
        )

        by_hub = await self.db.execute(
            select(
                CatalogEntry.hub,
                func.coalesce(func.sum(CatalogEntry.views), 0),
                func.count(CatalogEntry.id),
            )
            .where(published)
            .group_by(CatalogEntry.hub)
            .order_by(CatalogEntry.hub)
        )

        return {
            "stats": {
                "total_assets": totals[0],
                "total_views": int(totals[1]),
                "total_shares": int(totals[2]),
                "recent_views": recent_views or 0,
                "window_days": window_days,
            },
            "top_assets": [
                {
                    "id": entry.id,
                    "slug": entry.slug,
                    "title": entry.title,
                    "hub": entry.hub,
                    "views": entry.views or 0,
                    "shares": entry.shares or 0,
                }
                for entry in top.scalars()
            ],
            "recent_activity": [
                {
                    "entry_id": event.entry_id,
                    "viewed_at": event.viewed_at,
                    "source": event.source,
                    "session_id": event.session_id,
                }
                for event in recent.scalars()
            ],
            "views_by_hub": [
                {"hub": hub, "views": int(views), "assets": assets}
                for hub, views, assets in by_hub
            ],
        }
