"""In-memory adapters for tests, local runs and embedding.

`InMemoryCatalogRepository.from_yaml` reads the same seed layout as
``config/rules/default_rules.yaml``::

    rules:
      - id: item_sku_required
        field_name: item_sku
        rule_type: required
        severity: error
        message: SKU is required
        sort_order: 1
    brands:
      - CECE
      - {name: Retired Brand, is_active: false}
    lookups:
      - {category: color_map, source_value: Navy, target_value: Blue}
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd
import yaml
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..config.loader import get_config
from ..config.schemas import EngineConfig
from ..exceptions import ErrorCode, RepositoryError
from ..models.lookup import LookupEntry
from ..models.quality import RecordStatus, UploadSummary, ValidationIssue
from ..models.record import ProductRecord
from ..models.rules import FieldRule
from ..utils.text_normalization import is_missing
from .base import CatalogRepository, UploadRepository


class InMemoryCatalogRepository(CatalogRepository):
    """Rules, brands and lookups held in memory."""

    def __init__(
        self,
        rules: Iterable[FieldRule] = (),
        brands: Iterable[str] = (),
        lookups: Iterable[LookupEntry] = (),
    ) -> None:
        self.rules = list(rules)
        self.brands = set(brands)
        self.lookups = list(lookups)

    @classmethod
    def from_seed(cls, seed: Mapping[str, Any]) -> InMemoryCatalogRepository:
        """Build from a parsed seed document with `rules`, `brands` and `lookups`.

        Raises:
            RepositoryError: if a section does not describe valid rules or entries
        """
        try:
            rules = [FieldRule(**row) for row in seed.get("rules") or []]
            lookups = [LookupEntry(**row) for row in seed.get("lookups") or []]
        except (PydanticValidationError, TypeError) as e:
            raise RepositoryError(
                f"Invalid catalog seed: {e}", adapter="catalog", operation="from_seed", cause=e
            ) from e

        brands = set()
        for row in seed.get("brands") or []:
            if isinstance(row, str):
                brands.add(row.strip())
            elif row.get("is_active", True):
                brands.add(str(row["name"]).strip())

        logger.debug(
            f"Catalog seed: {len(rules)} rules, {len(brands)} brands, {len(lookups)} lookup entries"
        )
        return cls(rules=rules, brands=brands, lookups=lookups)

    @classmethod
    def from_yaml(cls, path: str | Path) -> InMemoryCatalogRepository:
        """Load a catalog seed file.

        Raises:
            RepositoryError: if the file cannot be read or parsed
        """
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as handle:
                seed = yaml.safe_load(handle) or {}
        except (OSError, yaml.YAMLError) as e:
            raise RepositoryError(
                f"Cannot read catalog seed {path}: {e}",
                adapter="catalog",
                operation="from_yaml",
                cause=e,
            ) from e
        if not isinstance(seed, Mapping):
            raise RepositoryError(
                f"Catalog seed {path} must be a mapping", adapter="catalog", operation="from_yaml"
            )
        return cls.from_seed(seed)

    @classmethod
    def from_config(cls, config: EngineConfig | None = None) -> InMemoryCatalogRepository:
        """Load the seed file named by ``rules.seed_path``."""
        config = config or get_config()
        return cls.from_yaml(config.rules.seed_path)

    def load_active_rules(self) -> list[FieldRule]:
        return sorted((rule for rule in self.rules if rule.is_active), key=lambda rule: rule.sort_order)

    def load_active_brand_names(self) -> set[str]:
        return set(self.brands)

    def load_active_lookup_entries(self) -> list[LookupEntry]:
        return [entry for entry in self.lookups if entry.is_active]


class InMemoryUploadRepository(UploadRepository):
    """Upload records and validation results held in memory."""

    def __init__(self, uploads: Mapping[str, Sequence[ProductRecord]] | None = None) -> None:
        self._lock = threading.Lock()
        self.uploads: dict[str, list[ProductRecord]] = {
            upload_id: list(records) for upload_id, records in (uploads or {}).items()
        }
        self.record_results: dict[str, tuple[list[ValidationIssue], RecordStatus]] = {}
        self.upload_summaries: dict[str, UploadSummary] = {}

    @classmethod
    def from_dataframe(
        cls, upload_id: str, frame: pd.DataFrame, id_column: str | None = None
    ) -> InMemoryUploadRepository:
        """Build a repository holding one upload read from a DataFrame.

        Rows become records numbered from 1 in frame order. Empty cells (NaN,
        None) are left out of the record.

        Args:
            upload_id: Upload identifier
            frame: One row per record, columns already mapped to canonical names
            id_column: Column holding record ids; defaults to ``<upload_id>-<row>``
        """
        repo = cls()
        repo.add_upload(upload_id, records_from_dataframe(upload_id, frame, id_column))
        return repo

    def add_upload(self, upload_id: str, records: Iterable[ProductRecord]) -> None:
        with self._lock:
            self.uploads[upload_id] = list(records)

    def load_records_for_upload(self, upload_id: str) -> list[ProductRecord]:
        if upload_id not in self.uploads:
            raise RepositoryError(
                f"Unknown upload '{upload_id}'",
                adapter="upload",
                operation="load_records_for_upload",
                retryable=False,
            )
        return sorted(self.uploads[upload_id], key=lambda record: record.row_number)

    def persist_record_result(
        self, record_id: str, issues: Sequence[ValidationIssue], status: RecordStatus
    ) -> None:
        with self._lock:
            self.record_results[record_id] = (list(issues), status)

    def persist_upload_summary(self, upload_id: str, summary: UploadSummary) -> None:
        with self._lock:
            self.upload_summaries[upload_id] = summary


def records_from_dataframe(
    upload_id: str, frame: pd.DataFrame, id_column: str | None = None
) -> list[ProductRecord]:
    """Convert DataFrame rows into records, dropping empty cells.

    Raises:
        RepositoryError: if two rows carry the same record id
    """
    records = []
    seen: dict[str, int] = {}
    for row_number, row in enumerate(frame.to_dict(orient="records"), start=1):
        data = {str(key): value for key, value in row.items() if not is_missing(value)}
        if id_column and id_column in data:
            record_id = str(data.pop(id_column))
        else:
            record_id = f"{upload_id}-{row_number}"
        if record_id in seen:
            raise RepositoryError(
                f"Duplicate record id '{record_id}' in rows {seen[record_id]} and {row_number}",
                adapter="upload",
                operation="records_from_dataframe",
                retryable=False,
                status_code=ErrorCode.UPLOAD_INVALID,
                details={"upload_id": upload_id, "record_id": record_id},
            )
        seen[record_id] = row_number
        records.append(ProductRecord(record_id=record_id, row_number=row_number, original_data=data))
    return records
