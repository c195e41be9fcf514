"""Enrichment suggestion, auto-fix and change-history models.

Suggestions and auto-fixes are proposals computed from a record's working
data. Committing one (or a manual edit) appends an EnrichmentChange to the
record's history; history entries are never removed.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Confidence(str, Enum):
    """How strongly the engine stands behind a suggested value."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EnrichmentSuggestion(BaseModel):
    """A proposed value for one field.

    Low-confidence suggestions with an empty `suggested_value` are presence
    nudges for recommended optional fields rather than proposed fixes.
    """

    field: str
    suggested_value: str
    confidence: Confidence
    reason: str

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    @property
    def is_nudge(self) -> bool:
        return self.suggested_value == "" and self.confidence == Confidence.LOW


class FixType(str, Enum):
    WHITESPACE = "whitespace"
    FORMATTING = "formatting"
    CHECK_DIGIT = "check_digit"
    MAPPING = "mapping"


class AutoFix(BaseModel):
    """One deterministic correction with its before/after values."""

    field: str
    original_value: Any = None
    fixed_value: Any = None
    fix_type: FixType
    description: str

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class AutoFixResult(BaseModel):
    """Fixed working data plus the fixes that produced it."""

    fixed_data: dict[str, Any] = Field(default_factory=dict)
    fixes: list[AutoFix] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.fixes)


class ChangeType(str, Enum):
    SUGGESTION_APPLIED = "suggestion_applied"
    AUTO_FIX = "auto_fix"
    MANUAL_EDIT = "manual_edit"


class EnrichmentChange(BaseModel):
    """An audit entry for one committed field change."""

    field: str
    original_value: Any = None
    new_value: Any = None
    change_type: ChangeType
    timestamp: datetime = Field(default_factory=datetime.now)
    reason: str | None = None

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class EnrichmentSummary(BaseModel):
    """Counts over a record's change history."""

    total_changes: int = Field(0, ge=0)
    suggestion_applied: int = Field(0, ge=0)
    auto_fix: int = Field(0, ge=0)
    manual_edit: int = Field(0, ge=0)
    fields_changed: list[str] = Field(
        default_factory=list, description="Distinct fields touched, in first-change order"
    )
