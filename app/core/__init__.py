"""Core utilities and exceptions for the Catalog Taxonomy API."""

from app.core.exceptions import (
    CatalogAPIException,
    ConflictException,
    NotFoundException,
    StorageException,
    ValidationException,
)

__all__ = [
    "CatalogAPIException",
    "ConflictException",
    "NotFoundException",
    "StorageException",
    "ValidationException",
]
