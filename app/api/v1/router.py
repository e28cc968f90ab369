"""
API v1 Router - Aggregates all v1 endpoints.
Base Path: /api/v1
"""

from fastapi import APIRouter

from app.api.v1 import admin, analytics, boards, export, health, imports, tags, taxonomy

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(boards.router, prefix="/boards", tags=["boards"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
api_router.include_router(imports.router, prefix="/import", tags=["import"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(taxonomy.router, prefix="/taxonomy", tags=["taxonomy"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
