"""
Board endpoints.
Board CRUD plus the board's tag and asset associations.
"""

from fastapi import APIRouter, status

from app.dependencies import DbSession
from app.schemas.base import SuccessResponse
from app.schemas.board import (
    AssetPlacement,
    BoardCreate,
    BoardDetailResponse,
    BoardReorderRequest,
    BoardResponse,
    BoardTagAttach,
    BoardTagReorderRequest,
    BoardTagResponse,
    BoardUpdate,
)
from app.services.association_service import AssociationService
from app.services.board_service import BoardService

router = APIRouter()


@router.get("", response_model=list[BoardDetailResponse])
async def list_boards(db: DbSession):
    """
    List all boards in display order.

    Each board carries its tags (per-board order and labels) and the
    number of assets placed on it.
    """
    return await AssociationService(db).list_boards_with_tags_and_counts()


@router.post("", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(db: DbSession, data: BoardCreate):
    """Create a board. Slug, name and the three colors are required."""
    return await BoardService(db).create(data)


@router.post("/reorder", response_model=SuccessResponse)
async def reorder_boards(db: DbSession, data: BoardReorderRequest):
    """
    Reorder boards.

    Each listed board gets its position as sort order. Boards not in the
    list keep their order; unknown slugs are ignored.
    """
    updated = await AssociationService(db).reorder_boards(data.board_order)
    return SuccessResponse(message=f"Reordered {updated} boards")


@router.get("/{slug}", response_model=BoardDetailResponse)
async def get_board(db: DbSession, slug: str):
    return await AssociationService(db).get_board_detail(slug)


@router.put("/{slug}", response_model=BoardResponse)
async def update_board(db: DbSession, slug: str, data: BoardUpdate):
    """Update board display fields. Omitted fields keep their value."""
    return await BoardService(db).update(slug, data)


@router.delete("/{slug}", response_model=SuccessResponse)
async def delete_board(db: DbSession, slug: str):
    """Delete a board along with its tag and asset associations."""
    await BoardService(db).delete(slug)
    return SuccessResponse()


# -----------------------------------------------------------------------------
# Board tags
# -----------------------------------------------------------------------------


@router.get("/{slug}/tags", response_model=list[BoardTagResponse])
async def list_board_tags(db: DbSession, slug: str):
    return await AssociationService(db).list_board_tags(slug)


@router.post(
    "/{slug}/tags",
    response_model=BoardTagResponse,
    status_code=status.HTTP_201_CREATED,
)
async def attach_board_tag(db: DbSession, slug: str, data: BoardTagAttach):
    """
    Attach a tag to the board.

    Pass `tagId` for an existing tag, or `tagName` (and optionally
    `tagSlug`) to attach by name; a missing tag is created. Returns 409
    when the tag is already on the board.
    """
    return await AssociationService(db).attach_tag(slug, data)


@router.post("/{slug}/tags/reorder", response_model=list[BoardTagResponse])
async def reorder_board_tags(db: DbSession, slug: str, data: BoardTagReorderRequest):
    """
    Set tag positions on the board, optionally renaming them in this
    board's context. Returns the board's tags in their new order.
    """
    return await AssociationService(db).reorder_board_tags(slug, data.tag_order)


@router.delete("/{slug}/tags/{tag_slug}", response_model=SuccessResponse)
async def detach_board_tag(db: DbSession, slug: str, tag_slug: str):
    """Remove a tag from the board. Removing an absent tag succeeds."""
    removed = await AssociationService(db).detach_tag(slug, tag_slug)
    return SuccessResponse(message=None if removed else "Tag was not on this board")


@router.get("/{slug}/tag-counts", response_model=dict[str, int])
async def board_tag_counts(db: DbSession, slug: str):
    """Number of published assets on the board matching each board tag."""
    return await AssociationService(db).board_tag_counts(slug)


# -----------------------------------------------------------------------------
# Board assets
# -----------------------------------------------------------------------------


@router.post("/{slug}/assets", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
async def place_asset(db: DbSession, slug: str, data: AssetPlacement):
    await AssociationService(db).place_asset(slug, data.asset_id)
    return SuccessResponse()


@router.delete("/{slug}/assets/{asset_id}", response_model=SuccessResponse)
async def remove_asset(db: DbSession, slug: str, asset_id: str):
    removed = await AssociationService(db).remove_asset(slug, asset_id)
    return SuccessResponse(message=None if removed else "Asset was not on this board")
