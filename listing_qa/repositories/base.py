"""Adapter contracts for the stores the engine reads from and writes to.

The engine never talks to a database or file directly. A deployment
implements these two interfaces over its own persistence layer; the
in-memory adapters in :mod:`listing_qa.repositories.memory` serve tests and
embedding.

Implementations should raise :class:`~listing_qa.exceptions.RepositoryError`
when the backing store is unavailable. Any other exception escaping an
adapter is wrapped into one by the orchestrator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models.lookup import LookupEntry
from ..models.quality import RecordStatus, UploadSummary, ValidationIssue
from ..models.record import ProductRecord
from ..models.rules import FieldRule


class CatalogRepository(ABC):
    """Source of rules, brands and lookup tables."""

    @abstractmethod
    def load_active_rules(self) -> list[FieldRule]:
        """Active rules ordered by `sort_order` ascending."""

    @abstractmethod
    def load_active_brand_names(self) -> set[str]:
        """Names of active brands."""

    @abstractmethod
    def load_active_lookup_entries(self) -> list[LookupEntry]:
        """Active lookup entries across all categories."""


class UploadRepository(ABC):
    """Source of upload records and sink for validation results."""

    @abstractmethod
    def load_records_for_upload(self, upload_id: str) -> list[ProductRecord]:
        """Records of an upload ordered by row number."""

    @abstractmethod
    def persist_record_result(
        self, record_id: str, issues: Sequence[ValidationIssue], status: RecordStatus
    ) -> None:
        """Store one record's issues and status."""

    @abstractmethod
    def persist_upload_summary(self, upload_id: str, summary: UploadSummary) -> None:
        """Store the upload's aggregate counts."""
