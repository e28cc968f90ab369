"""
CSV export endpoints.
"""

from fastapi import APIRouter

from app.core.responses import create_csv_response
from app.dependencies import DbSession
from app.services.board_service import BoardService
from app.services.tag_service import TagService

router = APIRouter()


@router.get("/tags")
async def export_tags(db: DbSession):
    """Download all tags as CSV with their boards and asset counts."""
    content = await TagService(db).export_csv()
    return create_csv_response(content, "tags")


@router.get("/boards")
async def export_boards(db: DbSession):
    """Download all boards as CSV with their tags and asset counts."""
    content = await BoardService(db).export_csv()
    return create_csv_response(content, "boards")
