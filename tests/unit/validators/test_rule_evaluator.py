"""Tests for rule compilation and evaluation."""

import pytest

from listing_qa.exceptions import RuleConfigurationError
from listing_qa.models.quality import Severity
from listing_qa.models.rules import CustomCheck
from listing_qa.validators.rule_evaluator import LookupMode, apply_rule, compile_rule
from tests.factories import RecordFactory, RuleFactory


pytestmark = pytest.mark.fast


class TestCompileRule:
    """Tests for compile_rule."""

    def test_max_length_requires_numeric_max(self):
        """Test that a non-numeric max is a configuration error."""
        rule = RuleFactory.create(id="r-3", rule_type="max_length", rule_config={"max": "abc"})

        with pytest.raises(RuleConfigurationError) as exc_info:
            compile_rule(rule)

        assert exc_info.value.rule_id == "r-3"
        assert exc_info.value.operation == "compile_rule"

    def test_max_length_missing_max(self):
        """Test that max_length without max is a configuration error."""
        with pytest.raises(RuleConfigurationError):
            compile_rule(RuleFactory.create(rule_type="max_length"))

    def test_invalid_regex(self):
        """Test that an uncompilable pattern is a configuration error."""
        rule = RuleFactory.create(rule_type="regex", rule_config={"pattern": "([a-z"})
        with pytest.raises(RuleConfigurationError, match="Invalid regex"):
            compile_rule(rule)

    def test_unknown_custom_function(self):
        """Test that an unknown custom function is a configuration error."""
        rule = RuleFactory.create(rule_type="custom", rule_config={"function": "validateMagic"})
        with pytest.raises(RuleConfigurationError, match="Unknown custom function"):
            compile_rule(rule)

    def test_lookup_without_source(self):
        """Test that a lookup rule needs a table or values."""
        rule = RuleFactory.create(field_name="color_map", rule_type="lookup", rule_config={})
        with pytest.raises(RuleConfigurationError):
            compile_rule(rule)

    @pytest.mark.parametrize(
        "field_name,rule_config,expected",
        [
            ("brand_name", {}, LookupMode.BRAND),
            ("vendor", {"source": "brands"}, LookupMode.BRAND),
            ("color_map", {"table_type": "color_map"}, LookupMode.TABLE),
            ("external_product_id_type", {"values": ["UPC", "EAN"]}, LookupMode.VALUES),
        ],
        ids=["brand_field", "brand_source", "table", "values"],
    )
    def test_lookup_modes(self, field_name, rule_config, expected):
        """Test lookup mode selection."""
        rule = RuleFactory.create(field_name=field_name, rule_type="lookup", rule_config=rule_config)
        assert compile_rule(rule).lookup_mode == expected

    def test_custom_threshold_overrides(self):
        """Test that maxPrice and minLength override config defaults."""
        price_rule = RuleFactory.custom("checkPriceReasonableness", "standard_price", maxPrice=250)
        description_rule = RuleFactory.custom(
            "checkDescriptionQuality", "product_description", minLength=40
        )
        bullet_rule = RuleFactory.custom("checkBulletQuality", "bullet_point1", minLength=20)

        assert compile_rule(price_rule).check_params.max_threshold == 250
        assert compile_rule(description_rule).check_params.description_min_length == 40
        assert compile_rule(bullet_rule).check_params.bullet_min_length == 20
        assert compile_rule(price_rule).custom_check == CustomCheck.PRICE_REASONABLENESS


class TestApplyRule:
    """Tests for apply_rule against records."""

    def test_required(self, empty_context):
        """Test that missing or blank values fail a required rule."""
        rule = RuleFactory.create(field_name="item_sku", message="SKU is required")

        assert apply_rule(rule, {"item_sku": "A1"}, empty_context) == []
        for data in ({}, {"item_sku": "  "}, {"item_sku": float("nan")}):
            issues = apply_rule(rule, data, empty_context)
            assert len(issues) == 1
            assert issues[0].field == "item_sku"
            assert issues[0].severity == Severity.ERROR
            assert issues[0].message == "SKU is required"

    def test_other_rules_skip_missing_values(self, empty_context):
        """Test that non-required rules do not fire on absent values."""
        rules = [
            RuleFactory.create(rule_type="max_length", rule_config={"max": 5}),
            RuleFactory.create(rule_type="regex", rule_config={"pattern": "^x$"}),
            RuleFactory.create(rule_type="range", rule_config={"min": 1}),
            RuleFactory.custom("validateURL", "item_name"),
        ]
        for rule in rules:
            assert apply_rule(rule, {}, empty_context) == []

    def test_max_length_renders_bound(self, empty_context):
        """Test that {max} is substituted into the message."""
        rule = RuleFactory.create(
            rule_type="max_length",
            rule_config={"max": 10},
            message="Title must not exceed {max} characters",
        )

        assert apply_rule(rule, {"item_name": "x" * 10}, empty_context) == []
        issues = apply_rule(rule, {"item_name": "x" * 11}, empty_context)
        assert issues[0].message == "Title must not exceed 10 characters"

    def test_regex_searches(self, empty_context):
        """Test that regex rules match anywhere in the value."""
        rule = RuleFactory.create(rule_type="regex", rule_config={"pattern": r"\d{3}"})

        assert apply_rule(rule, {"item_name": "abc123"}, empty_context) == []
        assert len(apply_rule(rule, {"item_name": "abc"}, empty_context)) == 1

    @pytest.mark.parametrize(
        "value,expected_count",
        [("0", 1), ("0.01", 0), ("500", 0), ("1000.5", 1), ("free", 0)],
        ids=["below_min", "at_min", "inside", "above_max", "non_numeric"],
    )
    def test_range(self, empty_context, value, expected_count):
        """Test range bounds; non-numeric values are not applicable."""
        rule = RuleFactory.create(
            field_name="standard_price",
            rule_type="range",
            rule_config={"min": 0.01, "max": 1000},
            message="Price must be between {min} and {max}",
        )
        issues = apply_rule(rule, {"standard_price": value}, empty_context)

        assert len(issues) == expected_count
        if issues:
            assert issues[0].message == "Price must be between 0.01 and 1000"

    def test_brand_lookup(self, lookup_context):
        """Test brand lookups against active brand names."""
        rule = RuleFactory.create(field_name="brand_name", rule_type="lookup")

        assert apply_rule(rule, {"brand_name": "Vince Camuto"}, lookup_context) == []
        assert len(apply_rule(rule, {"brand_name": "Unknown Co"}, lookup_context)) == 1

    def test_table_lookup_uses_targets(self, lookup_context):
        """Test that table lookups check against target values."""
        rule = RuleFactory.create(
            field_name="color_map", rule_type="lookup", rule_config={"table_type": "color_map"}
        )

        assert apply_rule(rule, {"color_map": "Blue"}, lookup_context) == []
        assert apply_rule(rule, {"color_map": "Navy Blue"}, lookup_context) == []
        assert len(apply_rule(rule, {"color_map": "Navy"}, lookup_context)) == 1

    def test_values_lookup_is_case_insensitive(self, empty_context):
        """Test that inline value lists compare case-insensitively."""
        rule = RuleFactory.create(
            field_name="external_product_id_type",
            rule_type="lookup",
            rule_config={"values": ["UPC", "EAN"]},
        )

        assert apply_rule(rule, {"external_product_id_type": "upc"}, empty_context) == []
        assert len(apply_rule(rule, {"external_product_id_type": "GTIN"}, empty_context)) == 1

    def test_custom_uses_rule_message_and_suggestion(self, empty_context):
        """Test that a message-less failure uses the rule message and suggestion."""
        rule = RuleFactory.custom("validateUPCEAN", "external_product_id", severity="error")
        issues = apply_rule(rule, {"external_product_id": "036000291453"}, empty_context)

        assert len(issues) == 1
        assert issues[0].message == rule.message
        assert issues[0].suggestion == "036000291452"
        assert issues[0].rule_id == rule.id

    def test_custom_one_issue_per_message(self, empty_context):
        """Test that each check message becomes its own issue."""
        rule = RuleFactory.custom("checkTitleQuality", "item_name")
        record = RecordFactory.create(
            item_name="BLOUSE!!! NAVY", brand_name="Vince Camuto", color_name="Navy"
        )
        messages = [issue.message for issue in apply_rule(rule, record, empty_context)]

        assert messages == [
            "Title is missing brand name",
            "Title contains all uppercase letters",
            "Title contains excessive punctuation",
        ]

    def test_bullet_points_spans_record(self, empty_context):
        """Test that the bullet point check runs when its own field is absent."""
        rule = RuleFactory.custom("validateBulletPoints", "bullet_points")
        issues = apply_rule(rule, {"item_name": "Dress"}, empty_context)

        assert [issue.message for issue in issues] == ["At least bullet_point1 is required"]

    def test_reads_enriched_data(self, empty_context):
        """Test that evaluation sees the record's working data."""
        rule = RuleFactory.create(field_name="color_map")
        record = RecordFactory.create(color_name="Navy").with_changes(
            {"color_name": "Navy", "color_map": "Blue"}, []
        )

        assert apply_rule(rule, record, empty_context) == []
