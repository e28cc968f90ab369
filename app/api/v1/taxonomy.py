"""
Taxonomy display endpoints.
Serves the cached content type and format badge lookups.
"""

from fastapi import APIRouter

from app.dependencies import DbSession, DisplayCache
from app.schemas.base import SuccessResponse
from app.schemas.taxonomy import TaxonomyDisplayResponse

router = APIRouter()


@router.get(
    "/display",
    response_model=TaxonomyDisplayResponse,
    response_model_exclude_none=True,
)
async def get_taxonomy_display(db: DbSession, cache: DisplayCache):
    """
    Slug-keyed display data for content types and formats.

    Served from a process-wide cache; edits become visible once the
    cache TTL elapses or after a refresh.
    """
    return await cache.get(db)


@router.post("/display/refresh", response_model=SuccessResponse)
async def refresh_taxonomy_display(cache: DisplayCache):
    """Drop the cached display data so the next read reloads it."""
    cache.invalidate()
    return SuccessResponse(message="Taxonomy display cache cleared")
