"""
Business logic services for the Catalog Taxonomy API.
Services handle core operations separate from API endpoints.
"""

from app.services.analytics_service import AnalyticsService
from app.services.association_service import AssociationService
from app.services.board_service import BoardService
from app.services.import_service import CsvImportService
from app.services.tag_service import TagService, slugify
from app.services.taxonomy_cache import TaxonomyDisplayCache, get_taxonomy_cache

__all__ = [
    "AnalyticsService",
    "AssociationService",
    "BoardService",
    "CsvImportService",
    "TagService",
    "TaxonomyDisplayCache",
    "get_taxonomy_cache",
    "slugify",
]
