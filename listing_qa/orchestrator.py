"""Validation orchestrator.

Runs one upload through the engine:

1. Load rules, brands and lookups once into an immutable ValidationContext.
2. Evaluate every record (field rules plus optional-field nudges) in batches
   on a thread pool, reporting progress after each batch.
3. After all batches finish, run the cross-record relationship pass, merge
   its issues and recompute statuses.
4. Persist per-record results and the upload summary, and return the
   ValidationResult.

Adapter failures abort the run with RepositoryError; a run that returns a
result always carries complete counts.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

import pandas as pd
from loguru import logger

from .config import get_config
from .config.schemas import EngineConfig
from .context import ValidationContext, build_context
from .enrichers.auto_fix import apply_auto_fix
from .enrichers.history import record_auto_fixes
from .enrichers.inference import optional_field_suggestions
from .enrichers.suggestions import suggest_enrichments
from .exceptions import (
    EnrichmentError,
    ErrorCode,
    RepositoryError,
    RuleEvaluationError,
    ValidationCancelledError,
    wrap_exception,
)
from .models.enrichment import AutoFix, EnrichmentSuggestion
from .models.quality import (
    RecordStatus,
    RuleFault,
    Severity,
    UploadSummary,
    ValidationIssue,
    ValidationResult,
    derive_status,
)
from .models.record import ProductRecord
from .repositories.base import CatalogRepository, UploadRepository
from .utils.logging_config import LogContext
from .validators.relationships import validate_relationships
from .validators.rule_evaluator import apply_rule


OPTIONAL_FIELD_RULE = "optional_field_suggestion"

_WRITE_OPERATIONS = frozenset({"persist_record_result", "persist_upload_summary"})

ProgressCallback = Callable[[int, int], None]
T = TypeVar("T")


@dataclass
class RunProgress:
    """Tracks progress through a batched validation run."""

    total_records: int
    batch_size: int
    batches_processed: int = 0
    records_processed: int = 0
    start_time: datetime = field(default_factory=datetime.now)

    @property
    def total_batches(self) -> int:
        return (self.total_records + self.batch_size - 1) // self.batch_size

    @property
    def percent_complete(self) -> float:
        if self.total_records == 0:
            return 0.0
        return (self.records_processed / self.total_records) * 100

    @property
    def elapsed_seconds(self) -> float:
        return (datetime.now() - self.start_time).total_seconds()

    @property
    def estimated_remaining_seconds(self) -> float:
        """Estimate remaining time based on current rate."""
        if self.records_processed == 0 or self.elapsed_seconds == 0:
            return 0.0
        rate = self.records_processed / self.elapsed_seconds
        remaining = self.total_records - self.records_processed
        return remaining / rate if rate > 0 else 0.0

    def advance(self, records: int) -> None:
        self.batches_processed += 1
        self.records_processed += records

    def log_progress(self, run_logger: Any = logger) -> None:
        run_logger.info(
            f"Progress: {self.percent_complete:.1f}% "
            f"({self.records_processed}/{self.total_records} records, "
            f"{self.batches_processed}/{self.total_batches} batches, "
            f"~{self.estimated_remaining_seconds:.0f}s remaining)"
        )


@dataclass(frozen=True)
class RecordOutcome:
    """Issues and status computed for one record."""

    record_id: str
    row_number: int
    issues: tuple[ValidationIssue, ...]
    status: RecordStatus
    faults: tuple[RuleFault, ...] = ()


@dataclass(frozen=True)
class ValidationRun:
    """A completed run: the aggregate result plus every record outcome."""

    result: ValidationResult
    outcomes: tuple[RecordOutcome, ...]


def evaluate_record(record: ProductRecord, context: ValidationContext) -> RecordOutcome:
    """Apply every compiled rule and the optional-field nudges to one record.

    A rule that raises while evaluating this record is skipped for it and
    reported as a fault; the other rules still run.
    """
    data = record.data
    issues: list[ValidationIssue] = []
    faults: list[RuleFault] = []

    for compiled in context.rules:
        try:
            issues.extend(apply_rule(compiled, data, context))
        except Exception as e:
            error = wrap_exception(
                e,
                RuleEvaluationError,
                message=f"Rule {compiled.rule_id} failed on row {record.row_number}: {e}",
                rule_id=compiled.rule_id,
                row_number=record.row_number,
                operation="apply_rule",
            )
            logger.warning(error.message)
            faults.append(
                RuleFault(
                    rule_id=compiled.rule_id,
                    field=compiled.field_name,
                    reason=str(e),
                    row_number=record.row_number,
                )
            )

    for suggestion in optional_field_suggestions(
        data, context.config.enrichment.recommended_optional_fields
    ):
        issues.append(
            ValidationIssue(
                field=suggestion.field,
                rule_id=OPTIONAL_FIELD_RULE,
                severity=Severity.INFO,
                message=suggestion.reason,
            )
        )

    return RecordOutcome(
        record_id=record.record_id,
        row_number=record.row_number,
        issues=tuple(issues),
        status=derive_status(issues),
        faults=tuple(faults),
    )


def summarize_issues(outcomes: Iterable[RecordOutcome]) -> pd.DataFrame:
    """Issue counts by field, rule and severity, most frequent first.

    Returns:
        DataFrame with columns field, rule_id, severity, count
    """
    rows = [
        {"field": issue.field, "rule_id": issue.rule_id, "severity": issue.severity}
        for outcome in outcomes
        for issue in outcome.issues
    ]
    columns = ["field", "rule_id", "severity", "count"]
    if not rows:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame(rows)
    summary = frame.groupby(["field", "rule_id", "severity"]).size().reset_index(name="count")
    return summary.sort_values(
        ["count", "field", "rule_id"], ascending=[False, True, True]
    ).reset_index(drop=True)[columns]


def _check_unique_record_ids(upload_id: str, records: Iterable[ProductRecord]) -> None:
    # Results are persisted and relationship issues attached by record id.
    seen: dict[str, int] = {}
    for record in records:
        if record.record_id in seen:
            raise RepositoryError(
                f"Upload {upload_id} has duplicate record id '{record.record_id}' "
                f"(rows {seen[record.record_id]} and {record.row_number})",
                adapter="upload",
                operation="load_records_for_upload",
                retryable=False,
                status_code=ErrorCode.UPLOAD_INVALID,
                details={"upload_id": upload_id, "record_id": record.record_id},
            )
        seen[record.record_id] = record.row_number


class ValidationOrchestrator:
    """Runs validation over uploads using the given adapters.

    The orchestrator holds only its adapters and configuration; all per-run
    state lives in the ValidationContext and local variables, so one
    orchestrator can serve concurrent runs.
    """

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        upload_repo: UploadRepository,
        config: EngineConfig | None = None,
    ) -> None:
        self.catalog_repo = catalog_repo
        self.upload_repo = upload_repo
        self.config = config or get_config()

    def _call_adapter(self, adapter: str, operation: str, func: Callable[..., T], *args: Any) -> T:
        try:
            return func(*args)
        except RepositoryError as e:
            logger.error(f"{adapter} adapter failed during {operation}: {e.message}")
            raise
        except Exception as e:
            logger.error(f"{adapter} adapter failed during {operation}: {e}")
            status_code = (
                ErrorCode.REPOSITORY_WRITE_FAILED
                if operation in _WRITE_OPERATIONS
                else ErrorCode.REPOSITORY_UNAVAILABLE
            )
            raise wrap_exception(
                e, RepositoryError, adapter=adapter, operation=operation, status_code=status_code
            ) from e

    def build_context(self) -> ValidationContext:
        """Load rules, brands and lookups once for a run."""
        rules = self._call_adapter("catalog", "load_active_rules", self.catalog_repo.load_active_rules)
        brands = self._call_adapter(
            "catalog", "load_active_brand_names", self.catalog_repo.load_active_brand_names
        )
        entries = self._call_adapter(
            "catalog", "load_active_lookup_entries", self.catalog_repo.load_active_lookup_entries
        )
        context = build_context(rules, brands, entries, self.config)
        logger.info(
            f"Loaded validation context: {len(context.rules)} rules, "
            f"{len(context.brand_names)} brands, {len(context.resolver)} lookup entries, "
            f"{len(context.rule_faults)} rule faults"
        )
        return context

    def validate_upload(
        self,
        upload_id: str,
        progress_callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ValidationResult:
        """Validate every record of an upload and persist the results.

        Args:
            upload_id: Upload to validate
            progress_callback: Called with (processed, total) after each batch
            cancel_event: When set, the run stops before the next batch

        Returns:
            ValidationResult with counts, health score and rule faults

        Raises:
            RepositoryError: if an adapter fails; no result is produced
            ValidationCancelledError: if ``cancel_event`` was set mid-run
        """
        return self.run_upload(upload_id, progress_callback, cancel_event).result

    def run_upload(
        self,
        upload_id: str,
        progress_callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ValidationRun:
        """Same as :meth:`validate_upload`, also returning every record outcome."""
        with LogContext(stage="validation", run_id=upload_id) as run_logger:
            run_logger.info(f"Starting validation run for upload {upload_id}")
            context = self.build_context()
            records = self._call_adapter(
                "upload", "load_records_for_upload", self.upload_repo.load_records_for_upload, upload_id
            )
            _check_unique_record_ids(upload_id, records)

            runtime = self.config.runtime
            progress = RunProgress(total_records=len(records), batch_size=runtime.batch_size)
            outcomes: list[RecordOutcome] = []
            next_log_at = runtime.progress_log_interval

            def check_cancelled() -> None:
                if cancel_event is not None and cancel_event.is_set():
                    run_logger.warning(
                        f"Validation cancelled after {progress.records_processed} records"
                    )
                    raise ValidationCancelledError(
                        "Validation run cancelled",
                        upload_id=upload_id,
                        records_processed=progress.records_processed,
                    )

            with ThreadPoolExecutor(max_workers=runtime.max_workers) as executor:
                for start in range(0, len(records), runtime.batch_size):
                    check_cancelled()
                    batch = records[start : start + runtime.batch_size]
                    outcomes.extend(executor.map(lambda r: evaluate_record(r, context), batch))

                    progress.advance(len(batch))
                    if progress_callback is not None:
                        progress_callback(progress.records_processed, progress.total_records)
                    if progress.records_processed >= next_log_at:
                        progress.log_progress(run_logger)
                        next_log_at += runtime.progress_log_interval

            check_cancelled()

        with LogContext(stage="relationships", run_id=upload_id) as run_logger:
            relationship_issues = validate_relationships(records)
            run_logger.debug(f"Relationship pass flagged {len(relationship_issues)} records")

            final: list[RecordOutcome] = []
            for outcome in outcomes:
                extra = relationship_issues.get(outcome.record_id)
                if extra:
                    issues = outcome.issues + tuple(extra)
                    outcome = RecordOutcome(
                        record_id=outcome.record_id,
                        row_number=outcome.row_number,
                        issues=issues,
                        status=derive_status(issues),
                        faults=outcome.faults,
                    )
                final.append(outcome)

        with LogContext(stage="persist", run_id=upload_id) as run_logger:
            for outcome in final:
                self._call_adapter(
                    "upload",
                    "persist_record_result",
                    self.upload_repo.persist_record_result,
                    outcome.record_id,
                    list(outcome.issues),
                    outcome.status,
                )

            summary = UploadSummary(
                error_count=sum(1 for o in final if o.status == RecordStatus.ERROR),
                warning_count=sum(1 for o in final if o.status == RecordStatus.WARNING),
                pass_count=sum(1 for o in final if o.status == RecordStatus.PASS),
            )
            self._call_adapter(
                "upload", "persist_upload_summary", self.upload_repo.persist_upload_summary, upload_id, summary
            )

            faults = list(context.rule_faults) + [fault for o in final for fault in o.faults]
            result = ValidationResult(
                upload_id=upload_id,
                total_records=len(final),
                pass_count=summary.pass_count,
                error_count=summary.error_count,
                warning_count=summary.warning_count,
                rule_faults=faults,
            )
            if faults:
                run_logger.warning(f"{len(faults)} rule faults need administrator review")
            run_logger.info(
                f"Validation complete: {result.total_records} records, "
                f"{result.pass_count} pass, {result.warning_count} warning, "
                f"{result.error_count} error, health {result.health_score:.1f}% "
                f"in {progress.elapsed_seconds:.2f}s"
            )
            return ValidationRun(result=result, outcomes=tuple(final))

    def suggest_for_record(
        self, record: ProductRecord, context: ValidationContext | None = None
    ) -> list[EnrichmentSuggestion]:
        """Enrichment suggestions for one record's working data.

        Raises:
            EnrichmentError: if suggestion assembly fails on the record's data
        """
        context = context or self.build_context()
        try:
            return suggest_enrichments(record.data, context.resolver, context.config.enrichment)
        except Exception as e:
            logger.error(f"Enrichment suggestions failed for record {record.record_id}: {e}")
            raise wrap_exception(
                e, EnrichmentError, record_id=record.record_id, operation="suggest_enrichments"
            ) from e

    def auto_fix_record(
        self, record: ProductRecord, context: ValidationContext | None = None
    ) -> tuple[ProductRecord, list[AutoFix]]:
        """Apply auto-fixes, returning the updated record and the fixes applied.

        The returned record carries the fixed data as `enriched_data` and one
        `auto_fix` history entry per fix; the input record is unchanged.

        Raises:
            EnrichmentError: if applying the fixes fails on the record's data
        """
        context = context or self.build_context()
        try:
            outcome = apply_auto_fix(record.data, context.resolver)
        except Exception as e:
            logger.error(f"Auto-fix failed for record {record.record_id}: {e}")
            raise wrap_exception(
                e, EnrichmentError, record_id=record.record_id, operation="apply_auto_fix"
            ) from e
        return record_auto_fixes(record, outcome.fixes, outcome.fixed_data), outcome.fixes
