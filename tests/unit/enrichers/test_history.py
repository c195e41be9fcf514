"""Tests for committing enrichment changes and summarizing history."""

import pytest

from listing_qa.enrichers.auto_fix import apply_auto_fix
from listing_qa.enrichers.history import (
    apply_manual_edit,
    apply_suggestion,
    record_auto_fixes,
    summarize_history,
)
from listing_qa.models.enrichment import Confidence, EnrichmentSuggestion
from tests.factories import RecordFactory


pytestmark = pytest.mark.fast


@pytest.fixture
def record():
    return RecordFactory.create(item_sku="sku 1", color_name="Navy")


@pytest.fixture
def color_suggestion():
    return EnrichmentSuggestion(
        field="color_map",
        suggested_value="Blue",
        confidence=Confidence.HIGH,
        reason='Mapped from color_name "Navy" using lookup table',
    )


class TestApplyChanges:
    """Tests for apply_suggestion, record_auto_fixes and apply_manual_edit."""

    def test_apply_suggestion(self, record, color_suggestion):
        """Test that a suggestion sets the value and appends one change."""
        updated = apply_suggestion(record, color_suggestion)

        assert updated.data["color_map"] == "Blue"
        assert "color_map" not in record.original_data
        assert updated.original_data == record.original_data
        (change,) = updated.history
        assert change.change_type == "suggestion_applied"
        assert change.original_value is None
        assert change.new_value == "Blue"
        assert change.reason == color_suggestion.reason

    def test_original_record_unchanged(self, record, color_suggestion):
        """Test that the input record is not modified."""
        apply_suggestion(record, color_suggestion)

        assert record.enriched_data is None
        assert record.history == ()

    def test_record_auto_fixes(self, record, lookup_context):
        """Test that each auto-fix becomes one history entry."""
        result = apply_auto_fix(record.data, lookup_context.resolver)
        updated = record_auto_fixes(record, result.fixes, result.fixed_data)

        assert updated.data["item_sku"] == "SKU1"
        assert updated.data["color_map"] == "Blue"
        assert [c.change_type for c in updated.history] == ["auto_fix", "auto_fix"]

    def test_no_fixes_returns_same_record(self, record):
        """Test that an empty fix list leaves the record as is."""
        assert record_auto_fixes(record, [], record.data) is record

    def test_manual_edit_after_suggestion(self, record, color_suggestion):
        """Test that later changes build on the working data."""
        updated = apply_manual_edit(apply_suggestion(record, color_suggestion), "color_map", "Navy")

        assert updated.data["color_map"] == "Navy"
        assert [c.change_type for c in updated.history] == ["suggestion_applied", "manual_edit"]
        assert updated.history[1].original_value == "Blue"


class TestSummarizeHistory:
    """Tests for summarize_history."""

    def test_counts_by_type(self, record, color_suggestion, lookup_context):
        """Test change counts and distinct fields in first-change order."""
        updated = apply_suggestion(record, color_suggestion)
        result = apply_auto_fix(updated.data, lookup_context.resolver)
        updated = record_auto_fixes(updated, result.fixes, result.fixed_data)
        updated = apply_manual_edit(updated, "color_map", "Navy")

        summary = summarize_history(updated.history)

        assert summary.total_changes == 3
        assert summary.suggestion_applied == 1
        assert summary.auto_fix == 1
        assert summary.manual_edit == 1
        assert summary.fields_changed == ["color_map", "item_sku"]

    def test_empty_history(self):
        """Test the summary of a record with no changes."""
        summary = summarize_history([])

        assert summary.total_changes == 0
        assert summary.fields_changed == []
