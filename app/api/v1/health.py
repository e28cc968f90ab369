"""
Health endpoint.
No authentication required.
"""

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import is_using_sqlite_fallback
from app.dependencies import DbSession

router = APIRouter()


@router.get("/health")
async def health_check(db: DbSession):
    """
    Service health check endpoint.

    Returns:
        {"status": "ok"} when service is healthy
        {"status": "degraded", "issues": [...]} when the database is unreachable
    """
    issues = []
    warnings = []

    if is_using_sqlite_fallback():
        warnings.append("Using SQLite dev fallback - PostgreSQL not configured")

    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        issues.append(f"Database: {e}")

    if issues:
        return {
            "status": "degraded",
            "issues": issues,
        }

    response = {
        "status": "ok",
        "database": "sqlite (dev fallback)" if is_using_sqlite_fallback() else "postgresql",
    }

    if warnings:
        response["warnings"] = warnings

    return response
