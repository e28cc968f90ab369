"""
Content Catalog Taxonomy API - Main Application Entry Point.

FastAPI application serving the board/tag taxonomy, engagement analytics
and the cached taxonomy display lookup for the content catalog.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.api.v1.router import api_router
from app.config import get_settings
from app.core.exceptions import CatalogAPIException
from app.core.responses import create_error_response

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.PROJECT_NAME}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    from app.db.session import engine, is_using_sqlite_fallback

    if is_using_sqlite_fallback():
        logger.warning("[DEV MODE] Using SQLite fallback database")
        logger.info("Creating SQLite development tables...")
        from app.db.base import Base
        from app import models  # noqa: F401  registers all tables on Base.metadata

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Development database ready")
    else:
        logger.info("Database: PostgreSQL")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    await engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
## Content Catalog Taxonomy API

Board and tag taxonomy, engagement tracking and badge display data
for the content catalog.

### Features
- **Boards**: Curated groupings with ordered, relabelable tags
- **Tags**: Shared tag registry with usage counts and CSV export/import
- **Analytics**: View/share tracking and time-windowed reports
- **Taxonomy display**: Cached content type and format badge lookups
    """,
    version=__version__,
    openapi_tags=[
        {"name": "boards", "description": "Boards and their tag/asset associations"},
        {"name": "tags", "description": "Tag registry operations"},
        {"name": "export", "description": "CSV exports"},
        {"name": "import", "description": "CSV imports"},
        {"name": "analytics", "description": "Engagement tracking and reports"},
        {"name": "taxonomy", "description": "Taxonomy display lookups"},
        {"name": "admin", "description": "Maintenance operations"},
        {"name": "health", "description": "Service health checks"},
    ],
    lifespan=lifespan,
)

# CORS middleware for cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogAPIException)
async def catalog_exception_handler(request: Request, exc: CatalogAPIException) -> JSONResponse:
    """Return the standard error body for domain exceptions."""
    if exc.status_code >= 500:
        logger.warning(f"{exc.error} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Report request validation failures as 400 validation_failed
    with one entry per offending field.
    """
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return create_error_response(
        error="validation_failed",
        message="Request validation failed",
        status_code=400,
        details=details,
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage errors not already mapped by a service."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return create_error_response(
        error="storage_error",
        message="A database error occurred",
        status_code=500,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler for unexpected errors.
    Logs the full error but returns a sanitized response.
    """
    logger.exception(f"Unexpected error: {exc}")
    return create_error_response(
        error="internal_error",
        message="An unexpected error occurred",
        status_code=500,
    )


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint pointing at the API documentation."""
    return {
        "name": settings.PROJECT_NAME,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
        "api": settings.API_V1_PREFIX,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
