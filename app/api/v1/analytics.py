"""
Analytics endpoints.
Engagement tracking (views, shares) and the analytics report.
"""

from fastapi import APIRouter, Query

from app.dependencies import AppSettings, DbSession
from app.schemas.analytics import AnalyticsReport, TrackRequest, TrackResponse
from app.services.analytics_service import AnalyticsService

router = APIRouter()


@router.post("/track", response_model=TrackResponse)
async def track_event(db: DbSession, settings: AppSettings, data: TrackRequest):
    """
    Track an asset view or share.

    A view increments the asset's view counter and records a view event;
    a share increments the share counter. No deduplication is applied.
    """
    service = AnalyticsService(db, settings)
    await service.track(
        data.asset_id,
        data.action,
        source=data.source,
        session_id=data.session_id,
    )
    return TrackResponse(action=data.action)


@router.get("", response_model=AnalyticsReport)
async def get_report(
    db: DbSession,
    settings: AppSettings,
    days: int | None = Query(default=None, ge=1, le=3650, description="Recent view window in days"),
):
    """
    Engagement report over published assets.

    Totals, views within the last `days` days (default 30), top assets
    by views, the latest view events and per-hub totals.
    """
    return await AnalyticsService(db, settings).report(days)
