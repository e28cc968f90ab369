"""
Admin maintenance endpoints.
"""

from fastapi import APIRouter, Query

from app.dependencies import DbSession
from app.schemas.taxonomy import TagSyncResult, TagSyncStatus
from app.services.association_service import AssociationService

router = APIRouter()


@router.get("/sync-tags", response_model=TagSyncStatus)
async def tag_sync_status(db: DbSession):
    """
    Compare the freeform tags on catalog entries with the tags table.

    Lists up to 50 freeform tags that match no registered tag.
    """
    return await AssociationService(db).asset_tag_sync_status()


@router.post("/sync-tags", response_model=TagSyncResult)
async def sync_tags(
    db: DbSession,
    create_missing: bool = Query(
        default=False,
        alias="createMissing",
        description="Register unknown freeform tags before rebuilding the index",
    ),
):
    """Rebuild the asset tag index from the entries' freeform tags."""
    stats = await AssociationService(db).sync_asset_tags(create_missing=create_missing)
    return TagSyncResult(**stats)
