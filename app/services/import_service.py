"""
CSV import service - bulk create or update tags and boards.

Reads the columns written by the CSV exports, so an exported file can be
edited and imported again. Headers are matched case-insensitively with
punctuation ignored ("Sort Order" and "sortOrder" are the same column);
only ``name`` is required. Board and tag references in the pipe-joined
``boards``/``tags`` columns are rebuilt into board_tags edges.

Rows that already exist (by slug, or by case-insensitive name for tags)
are, in order of precedence:
- updated in place when ``update_duplicates`` is set,
- skipped when ``skip_duplicates`` is set,
- otherwise imported as a copy with the first free ``-N`` slug suffix
  and a ``(N)`` name suffix.

A failing row is reported in the results and does not stop the import.
"""

import csv
import io
import logging
import re
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CatalogAPIException, ConflictException, ValidationException
from app.models.board import Board
from app.models.tag import Tag
from app.schemas.board import BoardCreate, BoardUpdate
from app.schemas.tag import TagCreate, TagUpdate
from app.services.association_service import AssociationService
from app.services.tag_service import SLUG_RE, slugify

logger = logging.getLogger(__name__)

TAG_IMPORT_COLUMNS = {"name", "slug", "category", "color", "sortorder", "boards"}
BOARD_IMPORT_COLUMNS = {"name", "slug", "icon", "color", "lightcolor", "accentcolor", "sortorder", "tags"}

# Applied to board rows that leave these columns empty
DEFAULT_BOARD_ICON = "📋"
DEFAULT_BOARD_COLOR = "#8C69F0"
DEFAULT_BOARD_LIGHT_COLOR = "#EDE9FE"
DEFAULT_BOARD_ACCENT_COLOR = "#6D28D9"

_INVALID_SLUG_MESSAGE = "Slug may only contain lowercase letters, digits and hyphens"


class CsvImportService:
    """Service class for CSV tag and board imports."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.associations = AssociationService(db)
        self.tags = self.associations.tags
        self.boards = self.associations.boards

    async def import_tags(
        self,
        text: str,
        skip_duplicates: bool = False,
        update_duplicates: bool = False,
    ) -> dict[str, Any]:
        """
        Import tags from CSV text.

        Columns: name (required), slug, category, color, sortOrder and
        boards (pipe-joined board slugs). Updating a tag replaces its board
        set; boards it already sat on keep their position and override.

        Returns:
            ``{"success", "summary", "results"}`` with one result per data row

        Raises:
            ValidationException: If the CSV has no data rows or no name column
        """
        rows = read_csv_rows(text, TAG_IMPORT_COLUMNS)

        existing_tags = (await self.db.scalars(select(Tag))).all()
        tags_by_slug = {tag.slug: tag for tag in existing_tags}
        tags_by_name = {tag.name.casefold(): tag for tag in existing_tags}
        board_ids = {slug: board_id for slug, board_id in await self.db.execute(select(Board.slug, Board.id))}

        results = []
        for number, record in rows:
            name = record.get("name", "")
            if not name:
                continue
            slug = record.get("slug") or slugify(name)
            result = _row_result(number, slug, name)

            board_refs = _split_refs(record.get("boards"))
            linked = [board_ids[ref] for ref in board_refs if ref in board_ids]
            result["unmatched"] = [ref for ref in board_refs if ref not in board_ids]
            fields = {
                "category": record.get("category") or None,
                "color": record.get("color") or None,
                "sort_order": _parse_int(record.get("sortorder")) or 0,
            }

            existing = tags_by_slug.get(slug) or tags_by_name.get(name.casefold())
            try:
                if existing and update_duplicates:
                    old_name = existing.name.casefold()
                    tag = await self.tags.update(existing.slug, TagUpdate(name=name, **fields))
                    await self.associations.set_tag_boards(tag.id, linked)
                    tags_by_name.pop(old_name, None)
                    result.update(slug=tag.slug, updated=True)
                elif existing and skip_duplicates:
                    result["skipped"] = True
                else:
                    if existing:
                        slug, name = _free_copy(slug, name, tags_by_slug, tags_by_name)
                    elif not SLUG_RE.fullmatch(slug):
                        raise ValidationException(_INVALID_SLUG_MESSAGE, details={"slug": slug})
                    tag = await self.tags.create(TagCreate(name=name, slug=slug, **fields))
                    await self.associations.set_tag_boards(tag.id, linked)
                    result.update(slug=tag.slug, name=tag.name, created=True)
            except (CatalogAPIException, ValidationError) as exc:
                self._record_failure(result, exc)
            else:
                if not result["skipped"]:
                    tags_by_slug[tag.slug] = tag
                    tags_by_name[tag.name.casefold()] = tag
            results.append(result)

        logger.info(f"Imported tags: {len(results)} rows")
        return _import_response(results)

    async def import_boards(
        self,
        text: str,
        skip_duplicates: bool = False,
        update_duplicates: bool = False,
    ) -> dict[str, Any]:
        """
        Import boards from CSV text.

        Columns: name (required), slug, icon, color, lightColor,
        accentColor, sortOrder and tags (pipe-joined tag slugs or names,
        in board order). Empty style columns get the default board style;
        an empty sortOrder places a new board last and leaves an updated
        board where it is. Updating a board replaces its tags with the
        listed ones in the listed order, keeping display name overrides.

        Raises:
            ValidationException: If the CSV has no data rows or no name column
        """
        rows = read_csv_rows(text, BOARD_IMPORT_COLUMNS)

        existing_boards = (await self.db.scalars(select(Board))).all()
        boards_by_slug = {board.slug: board for board in existing_boards}
        tag_rows = (await self.db.execute(select(Tag.id, Tag.slug, Tag.name))).all()
        tag_ids_by_slug = {row.slug: row.id for row in tag_rows}
        tag_ids_by_name = {row.name.casefold(): row.id for row in tag_rows}

        results = []
        for number, record in rows:
            name = record.get("name", "")
            if not name:
                continue
            slug = record.get("slug") or slugify(name)
            result = _row_result(number, slug, name)

            linked, unmatched = [], []
            for ref in _split_refs(record.get("tags")):
                tag_id = tag_ids_by_slug.get(ref) or tag_ids_by_name.get(ref.casefold())
                if tag_id:
                    linked.append(tag_id)
                else:
                    unmatched.append(ref)
            result["unmatched"] = unmatched
            fields = {
                "icon": record.get("icon") or DEFAULT_BOARD_ICON,
                "color": record.get("color") or DEFAULT_BOARD_COLOR,
                "light_color": record.get("lightcolor") or DEFAULT_BOARD_LIGHT_COLOR,
                "accent_color": record.get("accentcolor") or DEFAULT_BOARD_ACCENT_COLOR,
                "sort_order": _parse_int(record.get("sortorder")),
            }

            existing = boards_by_slug.get(slug)
            try:
                if existing and update_duplicates:
                    board = await self.boards.update(existing.slug, BoardUpdate(name=name, **fields))
                    await self.associations.set_board_tags(board.id, linked)
                    result["updated"] = True
                elif existing and skip_duplicates:
                    result["skipped"] = True
                else:
                    if existing:
                        slug, name = _free_copy(slug, name, boards_by_slug)
                    elif not SLUG_RE.fullmatch(slug):
                        raise ValidationException(_INVALID_SLUG_MESSAGE, details={"slug": slug})
                    board = await self.boards.create(BoardCreate(slug=slug, name=name, **fields))
                    await self.associations.set_board_tags(board.id, linked)
                    boards_by_slug[board.slug] = board
                    result.update(slug=board.slug, name=board.name, created=True)
            except (CatalogAPIException, ValidationError) as exc:
                self._record_failure(result, exc)
            results.append(result)

        logger.info(f"Imported boards: {len(results)} rows")
        return _import_response(results)

    def _record_failure(self, result: dict[str, Any], exc: Exception) -> None:
        """
        Mark a row as failed and carry on with the next one.

        A unique-index race rolls the whole session back inside the
        registry services; rows imported earlier are gone at that point,
        so the import stops instead of reporting them as done.
        """
        if not self.db.in_transaction():
            raise ConflictException(
                "Import aborted by a conflicting concurrent write",
                details={"row": result["row"], "slug": result["slug"]},
            ) from exc

        if isinstance(exc, ValidationError):
            message = exc.errors()[0]["msg"]
        else:
            message = exc.message
        logger.debug(f"Import row {result['row']} ({result['slug']}) failed: {message}")
        result.update(success=False, error=message)


def read_csv_rows(text: str, columns: set[str]) -> list[tuple[int, dict[str, str]]]:
    """
    Parse CSV text into numbered records keyed by normalized header.

    Blank lines are ignored. Unknown columns are dropped; when a column
    appears twice the first one wins.

    Raises:
        ValidationException: If there is no data row or no name column
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff"), newline=""))
    records = [values for values in reader if any(value.strip() for value in values)]
    if len(records) < 2:
        raise ValidationException("CSV must have header and at least one data row")

    header = [_normalize_header(column) for column in records[0]]
    if "name" not in header:
        raise ValidationException("CSV must have a name column", details={"foundHeaders": header})

    rows = []
    for number, values in enumerate(records[1:], start=1):
        record: dict[str, str] = {}
        for column, value in zip(header, values):
            if column in columns and column not in record:
                record[column] = value.strip()
        rows.append((number, record))
    return rows


def _normalize_header(column: str) -> str:
    return re.sub(r"[^a-z0-9]", "", column.lower())


def _split_refs(value: str | None) -> list[str]:
    if not value:
        return []
    return [ref.strip() for ref in value.split("|") if ref.strip()]


def _parse_int(value: str | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _free_copy(slug: str, name: str, by_slug: dict, by_name: dict | None = None) -> tuple[str, str]:
    """First ``slug-N`` / ``name (N)`` pair, N >= 1, not already in use."""
    number = 1
    while True:
        candidate_slug = f"{slug}-{number}"
        candidate_name = f"{name} ({number})"
        name_taken = by_name is not None and candidate_name.casefold() in by_name
        if candidate_slug not in by_slug and not name_taken:
            return candidate_slug, candidate_name
        number += 1


def _row_result(number: int, slug: str, name: str) -> dict[str, Any]:
    return {
        "success": True,
        "row": number,
        "slug": slug,
        "name": name,
        "error": None,
        "created": False,
        "updated": False,
        "skipped": False,
        "unmatched": [],
    }


def _import_response(results: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "success": True,
        "summary": {
            "total": len(results),
            "created": sum(1 for r in results if r["created"]),
            "updated": sum(1 for r in results if r["updated"]),
            "skipped": sum(1 for r in results if r["skipped"]),
            "errors": sum(1 for r in results if not r["success"]),
        },
        "results": results,
    }
