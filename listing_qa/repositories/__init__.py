"""Adapter contracts and in-memory adapters."""

from .base import CatalogRepository, UploadRepository
from .memory import InMemoryCatalogRepository, InMemoryUploadRepository, records_from_dataframe


__all__ = [
    "CatalogRepository",
    "InMemoryCatalogRepository",
    "InMemoryUploadRepository",
    "UploadRepository",
    "records_from_dataframe",
]
