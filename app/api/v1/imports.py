"""
CSV import endpoints.
Accept the files produced by the export endpoints as multipart uploads.
"""

from fastapi import APIRouter, File, Form, UploadFile

from app.core.exceptions import PayloadTooLargeException, ValidationException
from app.dependencies import AppSettings, DbSession
from app.schemas.imports import ImportResponse
from app.services.import_service import CsvImportService

router = APIRouter()


async def _read_csv(file: UploadFile, max_size: int) -> str:
    content = await file.read()
    if len(content) > max_size:
        raise PayloadTooLargeException(max_size)
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationException(
            "CSV file must be UTF-8 encoded",
            details={"filename": file.filename},
        ) from exc


@router.post("/tags", response_model=ImportResponse)
async def import_tags(
    db: DbSession,
    settings: AppSettings,
    file: UploadFile = File(..., description="Tags CSV with at least a name column"),
    skipDuplicates: bool = Form(default=False, description="Leave existing tags untouched"),
    updateDuplicates: bool = Form(default=False, description="Overwrite existing tags and their boards"),
):
    """
    Import tags from CSV.

    Columns: name, slug, category, color, sortOrder, boards (pipe-joined
    board slugs). Existing tags are matched by slug or case-insensitive
    name. updateDuplicates wins over skipDuplicates; with neither set an
    existing tag is imported again as a suffixed copy.
    """
    text = await _read_csv(file, settings.MAX_IMPORT_SIZE)
    return await CsvImportService(db).import_tags(
        text,
        skip_duplicates=skipDuplicates,
        update_duplicates=updateDuplicates,
    )


@router.post("/boards", response_model=ImportResponse)
async def import_boards(
    db: DbSession,
    settings: AppSettings,
    file: UploadFile = File(..., description="Boards CSV with at least a name column"),
    skipDuplicates: bool = Form(default=False, description="Leave existing boards untouched"),
    updateDuplicates: bool = Form(default=False, description="Overwrite existing boards and their tags"),
):
    """
    Import boards from CSV.

    Columns: name, slug, icon, color, lightColor, accentColor, sortOrder,
    tags (pipe-joined tag slugs or names, in board order). Existing boards
    are matched by slug.
    """
    text = await _read_csv(file, settings.MAX_IMPORT_SIZE)
    return await CsvImportService(db).import_boards(
        text,
        skip_duplicates=skipDuplicates,
        update_duplicates=updateDuplicates,
    )
