"""Commit enrichment changes to records and keep their audit trail.

Every function returns a new :class:`ProductRecord`; `original_data` and the
existing history entries are never altered.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..models.enrichment import (
    AutoFix,
    ChangeType,
    EnrichmentChange,
    EnrichmentSuggestion,
    EnrichmentSummary,
)
from ..models.record import ProductRecord


def apply_suggestion(record: ProductRecord, suggestion: EnrichmentSuggestion) -> ProductRecord:
    """Set the suggested value and record a `suggestion_applied` change."""
    data = record.data
    change = EnrichmentChange(
        field=suggestion.field,
        original_value=data.get(suggestion.field),
        new_value=suggestion.suggested_value,
        change_type=ChangeType.SUGGESTION_APPLIED,
        reason=suggestion.reason,
    )
    data[suggestion.field] = suggestion.suggested_value
    return record.with_changes(data, [change])


def record_auto_fixes(
    record: ProductRecord, fixes: Iterable[AutoFix], fixed_data: Mapping[str, Any]
) -> ProductRecord:
    """Adopt auto-fixed data, with one `auto_fix` change per applied fix."""
    changes = [
        EnrichmentChange(
            field=fix.field,
            original_value=fix.original_value,
            new_value=fix.fixed_value,
            change_type=ChangeType.AUTO_FIX,
            reason=fix.description,
        )
        for fix in fixes
    ]
    if not changes:
        return record
    return record.with_changes(fixed_data, changes)


def apply_manual_edit(record: ProductRecord, field: str, value: Any) -> ProductRecord:
    data = record.data
    change = EnrichmentChange(
        field=field,
        original_value=data.get(field),
        new_value=value,
        change_type=ChangeType.MANUAL_EDIT,
    )
    data[field] = value
    return record.with_changes(data, [change])


def summarize_history(history: Sequence[EnrichmentChange]) -> EnrichmentSummary:
    """Count changes by type and list the distinct fields touched."""
    counts = {change_type: 0 for change_type in ChangeType}
    for change in history:
        counts[ChangeType(change.change_type)] += 1

    return EnrichmentSummary(
        total_changes=len(history),
        suggestion_applied=counts[ChangeType.SUGGESTION_APPLIED],
        auto_fix=counts[ChangeType.AUTO_FIX],
        manual_edit=counts[ChangeType.MANUAL_EDIT],
        fields_changed=list(dict.fromkeys(change.field for change in history)),
    )
