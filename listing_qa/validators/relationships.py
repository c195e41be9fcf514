"""Cross-record parent/child relationship checks.

Runs once per upload after every record has been evaluated on its own.
Parent records are indexed by SKU and children by parent SKU, so the whole
pass is linear in the number of records.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from ..models.quality import Severity, ValidationIssue
from ..models.record import ProductRecord
from ..utils.text_normalization import is_missing, to_text


REFERENTIAL_INTEGRITY_RULE = "parent_child_referential_integrity"
THEME_CONSISTENCY_RULE = "variation_theme_consistency"


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if is_missing(value) else to_text(value).strip()


def _role(data: Mapping[str, Any]) -> str:
    return _text(data, "parent_child").lower()


def _theme_mismatch(child_theme: str, parent_theme: str) -> ValidationIssue:
    return ValidationIssue(
        field="variation_theme",
        rule_id=THEME_CONSISTENCY_RULE,
        severity=Severity.ERROR,
        message=(
            f"Child variation_theme ({child_theme}) does not match "
            f"parent variation_theme ({parent_theme})"
        ),
    )


def _reference_error(message: str) -> ValidationIssue:
    return ValidationIssue(
        field="parent_sku",
        rule_id=REFERENTIAL_INTEGRITY_RULE,
        severity=Severity.ERROR,
        message=message,
    )


def validate_relationships(records: Iterable[ProductRecord]) -> dict[str, list[ValidationIssue]]:
    """Check parent/child referential integrity and variation theme consistency.

    Args:
        records: Every record of one upload

    Returns:
        Issues keyed by record_id; records without relationship issues are absent
    """
    records = list(records)
    views = {record.record_id: record.data for record in records}

    parent_by_sku: dict[str, str] = {}
    children_by_parent_sku: dict[str, list[str]] = defaultdict(list)

    for record in records:
        data = views[record.record_id]
        sku = _text(data, "item_sku")
        role = _role(data)
        if sku and role == "parent":
            parent_by_sku[sku] = record.record_id
        parent_sku = _text(data, "parent_sku")
        if role == "child" and parent_sku:
            children_by_parent_sku[parent_sku].append(record.record_id)

    reference_issues: dict[str, list[ValidationIssue]] = defaultdict(list)
    # Keyed by message so a mismatch found from both sides is reported once.
    theme_issues: dict[str, dict[str, ValidationIssue]] = defaultdict(dict)

    def flag_theme(child_id: str, parent_theme: str) -> None:
        child_theme = _text(views[child_id], "variation_theme")
        if child_theme and parent_theme and child_theme != parent_theme:
            issue = _theme_mismatch(child_theme, parent_theme)
            theme_issues[child_id].setdefault(issue.message, issue)

    for record in records:
        data = views[record.record_id]
        role = _role(data)

        if role == "child":
            parent_sku = _text(data, "parent_sku")
            if not parent_sku:
                reference_issues[record.record_id].append(
                    _reference_error("Child items must have a parent_sku")
                )
            elif parent_sku not in parent_by_sku:
                reference_issues[record.record_id].append(
                    _reference_error(f"Child SKU references non-existent parent SKU: {parent_sku}")
                )
            else:
                parent_data = views[parent_by_sku[parent_sku]]
                flag_theme(record.record_id, _text(parent_data, "variation_theme"))

        elif role == "parent":
            sku = _text(data, "item_sku")
            parent_theme = _text(data, "variation_theme")
            if not sku or not parent_theme:
                continue
            for child_id in children_by_parent_sku.get(sku, []):
                flag_theme(child_id, parent_theme)

    results: dict[str, list[ValidationIssue]] = {}
    for record in records:
        issues = reference_issues.get(record.record_id, []) + list(
            theme_issues.get(record.record_id, {}).values()
        )
        if issues:
            results[record.record_id] = issues
    return results
