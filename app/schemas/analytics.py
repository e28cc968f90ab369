"""
Pydantic schemas for engagement tracking and analytics reports.
"""

from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel


class TrackRequest(CamelModel):
    """
    Track a view or share.

    action is checked by the analytics service so unknown values are
    reported as validation_failed without touching storage.
    """

    asset_id: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)
    source: str | None = Field(default=None, max_length=50)
    session_id: str | None = Field(default=None, max_length=100)


class TrackResponse(CamelModel):
    success: bool = True
    action: str


class AnalyticsStats(CamelModel):
    total_assets: int
    total_views: int
    total_shares: int
    recent_views: int
    window_days: int


class TopAsset(CamelModel):
    id: str
    slug: str
    title: str
    hub: str
    views: int
    shares: int


class RecentActivity(CamelModel):
    entry_id: str
    viewed_at: datetime
    source: str
    session_id: str | None = None


class HubViews(CamelModel):
    hub: str
    views: int
    assets: int


class AnalyticsReport(CamelModel):
    """Fresh rollup over published entries and the view event log."""

    stats: AnalyticsStats
    top_assets: list[TopAsset]
    recent_activity: list[RecentActivity]
    views_by_hub: list[HubViews]
