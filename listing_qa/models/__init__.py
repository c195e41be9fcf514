"""Data models for the listing validation engine."""

from .enrichment import (
    AutoFix,
    AutoFixResult,
    ChangeType,
    Confidence,
    EnrichmentChange,
    EnrichmentSuggestion,
    EnrichmentSummary,
    FixType,
)
from .lookup import LookupCategory, LookupEntry
from .quality import (
    RecordStatus,
    RuleFault,
    Severity,
    UploadSummary,
    ValidationIssue,
    ValidationResult,
    compute_health_score,
    derive_status,
)
from .record import BULLET_POINT_FIELDS, LISTING_FIELDS, ProductRecord
from .rules import CustomCheck, FieldRule, RuleType


__all__ = [
    "AutoFix",
    "AutoFixResult",
    "BULLET_POINT_FIELDS",
    "ChangeType",
    "Confidence",
    "CustomCheck",
    "EnrichmentChange",
    "EnrichmentSuggestion",
    "EnrichmentSummary",
    "FieldRule",
    "FixType",
    "LISTING_FIELDS",
    "LookupCategory",
    "LookupEntry",
    "ProductRecord",
    "RecordStatus",
    "RuleFault",
    "RuleType",
    "Severity",
    "UploadSummary",
    "ValidationIssue",
    "ValidationResult",
    "compute_health_score",
    "derive_status",
]
