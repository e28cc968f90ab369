"""
Pydantic schemas for request/response validation.
JSON bodies use camelCase keys; Python attributes stay snake_case.
"""

from app.schemas.analytics import AnalyticsReport, TrackRequest, TrackResponse
from app.schemas.base import CamelModel, SuccessResponse
from app.schemas.board import (
    BoardCreate,
    BoardDetailResponse,
    BoardResponse,
    BoardTagAttach,
    BoardTagResponse,
    BoardUpdate,
)
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.schemas.imports import ImportResponse, ImportRowResult, ImportSummary
from app.schemas.tag import TagCreate, TagResponse, TagUpdate, TagWithCountsResponse
from app.schemas.taxonomy import TaxonomyDisplayResponse

__all__ = [
    # Base
    "CamelModel",
    "SuccessResponse",
    # Board schemas
    "BoardCreate",
    "BoardDetailResponse",
    "BoardResponse",
    "BoardTagAttach",
    "BoardTagResponse",
    "BoardUpdate",
    # Tag schemas
    "TagCreate",
    "TagResponse",
    "TagUpdate",
    "TagWithCountsResponse",
    # Import schemas
    "ImportResponse",
    "ImportRowResult",
    "ImportSummary",
    # Analytics and taxonomy
    "AnalyticsReport",
    "TaxonomyDisplayResponse",
    "TrackRequest",
    "TrackResponse",
    # Error schemas
    "ErrorResponse",
    "ValidationErrorResponse",
]
