"""Pydantic models for validation issues and run results."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Severity(str, Enum):
    """Severity levels for validation issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RecordStatus(str, Enum):
    """Per-record verdict derived from its issues."""

    PASS = "pass"
    WARNING = "warning"
    ERROR = "error"


class ValidationIssue(BaseModel):
    """A single finding attached to one field of one record."""

    field: str = Field(..., description="Field name with the issue")
    rule_id: str = Field(..., description="Rule (or built-in check) that produced the issue")
    severity: Severity = Field(..., description="Issue severity level")
    message: str = Field(..., description="Human-readable message")
    suggestion: str | None = Field(None, description="Proposed corrected value, if any")

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class RuleFault(BaseModel):
    """A rule that could not be evaluated, kept for administrator review."""

    rule_id: str
    field: str
    reason: str
    row_number: int | None = Field(
        None, description="Row where evaluation failed; None when the rule was skipped for the run"
    )

    model_config = ConfigDict(frozen=True)


class UploadSummary(BaseModel):
    """Counts persisted on the upload once a run completes."""

    error_count: int = Field(..., ge=0)
    warning_count: int = Field(..., ge=0)
    pass_count: int = Field(..., ge=0)


class ValidationResult(BaseModel):
    """Outcome of a completed validation run over one upload."""

    upload_id: str
    total_records: int = Field(..., ge=0)
    pass_count: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    warning_count: int = Field(..., ge=0)
    rule_faults: list[RuleFault] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(validate_assignment=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def health_score(self) -> float:
        """Percentage of records with neither errors nor warnings."""
        return compute_health_score(self.pass_count, self.total_records)

    def summary(self) -> UploadSummary:
        return UploadSummary(
            error_count=self.error_count,
            warning_count=self.warning_count,
            pass_count=self.pass_count,
        )


def compute_health_score(pass_count: int, total_records: int) -> float:
    """Return pass_count / total_records * 100, or 0.0 for an empty upload."""
    if total_records <= 0:
        return 0.0
    return pass_count / total_records * 100


def derive_status(issues: Iterable[ValidationIssue]) -> RecordStatus:
    """Derive a record's status from its issues.

    `error` if any issue is an error, else `warning` if any is a warning,
    else `pass`. Info issues never affect the status.
    """
    severities = [issue.severity for issue in issues]
    if any(severity == Severity.ERROR for severity in severities):
        return RecordStatus.ERROR
    if any(severity == Severity.WARNING for severity in severities):
        return RecordStatus.WARNING
    return RecordStatus.PASS
