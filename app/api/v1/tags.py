"""
Tag endpoints.
Tag registry CRUD and tag-to-board lookups.
"""

from fastapi import APIRouter, status

from app.dependencies import DbSession
from app.schemas.board import BoardResponse
from app.schemas.tag import (
    TagCreate,
    TagDeleteResponse,
    TagResponse,
    TagUpdate,
    TagWithCountsResponse,
)
from app.services.association_service import AssociationService
from app.services.tag_service import TagService

router = APIRouter()


@router.get("", response_model=list[TagWithCountsResponse])
async def list_tags(db: DbSession):
    """
    List all tags with usage counts.

    boardCount is the number of boards the tag is attached to; assetCount
    is the number of entries linked through the asset tag index.
    """
    return await TagService(db).list_with_counts()


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(db: DbSession, data: TagCreate):
    """
    Create a tag.

    The slug is derived from the name when omitted. Returns 409 when the
    slug or name is already taken.
    """
    return await TagService(db).create(data)


@router.get("/{slug}", response_model=TagResponse)
async def get_tag(db: DbSession, slug: str):
    return await TagService(db).get_by_slug(slug)


@router.put("/{slug}", response_model=TagResponse)
async def update_tag(db: DbSession, slug: str, data: TagUpdate):
    return await TagService(db).update(slug, data)


@router.delete("/{slug}", response_model=TagDeleteResponse)
async def delete_tag(db: DbSession, slug: str):
    """
    Delete a tag.

    The tag is removed from every board and from the asset tag index in
    the same transaction.
    """
    deleted = await AssociationService(db).delete_tag(slug)
    return TagDeleteResponse(deleted=deleted)


@router.get("/{slug}/boards", response_model=list[BoardResponse])
async def list_tag_boards(db: DbSession, slug: str):
    """Boards this tag is attached to, in board display order."""
    return await TagService(db).boards_for_tag(slug)
