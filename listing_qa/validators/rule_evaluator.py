"""Field rule compilation and evaluation.

Rules arrive from the rule store as loosely typed configuration. Each rule is
compiled once per run into a :class:`CompiledRule` holding parsed bounds,
compiled regexes and the resolved custom check, so malformed configuration is
caught before any record is touched. Evaluation of a compiled rule against a
record is then a pure function returning zero or more issues.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..config.schemas import ValidationConfig
from ..exceptions import RuleConfigurationError
from ..models.quality import ValidationIssue
from ..models.record import ProductRecord
from ..models.rules import CustomCheck, FieldRule, RuleType
from ..utils.text_normalization import is_missing, to_number, to_text
from .custom_checks import CUSTOM_CHECKS, CheckParams


if TYPE_CHECKING:
    from ..context import ValidationContext


class LookupMode(str, Enum):
    BRAND = "brand"
    TABLE = "table"
    VALUES = "values"


@dataclass(frozen=True)
class CompiledRule:
    """A rule with its configuration parsed and validated."""

    rule: FieldRule
    max_length: float | None = None
    pattern: re.Pattern[str] | None = None
    range_min: float | None = None
    range_max: float | None = None
    lookup_mode: LookupMode | None = None
    table_type: str | None = None
    allowed_values: frozenset[str] = frozenset()
    custom_check: CustomCheck | None = None
    check_params: CheckParams | None = None

    @property
    def rule_id(self) -> str:
        return self.rule.id

    @property
    def field_name(self) -> str:
        return self.rule.field_name


def _config_error(rule: FieldRule, message: str) -> RuleConfigurationError:
    return RuleConfigurationError(
        message, rule_id=rule.id, field_name=rule.field_name, operation="compile_rule"
    )


def _numeric_option(rule: FieldRule, key: str, required: bool = False) -> float | None:
    raw = rule.rule_config.get(key)
    if raw is None:
        if required:
            raise _config_error(rule, f"Rule config '{key}' is required")
        return None
    number = to_number(raw)
    if number is None:
        raise _config_error(rule, f"Rule config '{key}' must be numeric, got {raw!r}")
    return number


def _compile_lookup(rule: FieldRule) -> dict[str, Any]:
    config = rule.rule_config
    if rule.field_name == "brand_name" or config.get("source") == "brands":
        return {"lookup_mode": LookupMode.BRAND}

    table_type = config.get("table_type")
    if table_type:
        if not isinstance(table_type, str):
            raise _config_error(rule, f"Rule config 'table_type' must be a string, got {table_type!r}")
        return {"lookup_mode": LookupMode.TABLE, "table_type": table_type}

    values = config.get("values")
    if isinstance(values, (list, tuple)) and values:
        return {
            "lookup_mode": LookupMode.VALUES,
            "allowed_values": frozenset(str(v).strip().upper() for v in values),
        }

    raise _config_error(rule, "Lookup rule needs 'table_type' or a non-empty 'values' list")


def _compile_custom(rule: FieldRule, validation: ValidationConfig) -> dict[str, Any]:
    name = rule.rule_config.get("function")
    if not isinstance(name, str) or not name:
        raise _config_error(rule, "Custom rule needs a 'function' name")
    try:
        check = CustomCheck.from_name(name)
    except ValueError as e:
        raise _config_error(rule, f"Unknown custom function '{name}'") from e

    params = CheckParams.from_config(validation)

    threshold_key = "maxThreshold" if "maxThreshold" in rule.rule_config else "maxPrice"
    threshold = _numeric_option(rule, threshold_key)
    if threshold is not None:
        params = replace(params, max_threshold=threshold)

    min_length = _numeric_option(rule, "minLength")
    if min_length is not None:
        if check == CustomCheck.DESCRIPTION_QUALITY:
            params = replace(params, description_min_length=int(min_length))
        else:
            params = replace(params, bullet_min_length=int(min_length))

    return {"custom_check": check, "check_params": params}


def compile_rule(rule: FieldRule, validation: ValidationConfig | None = None) -> CompiledRule:
    """Parse and validate a rule's configuration.

    Args:
        rule: Rule as loaded from the rule store
        validation: Default thresholds for custom checks

    Returns:
        CompiledRule ready for evaluation

    Raises:
        RuleConfigurationError: if the configuration cannot be used
    """
    validation = validation or ValidationConfig()
    rule_type = RuleType(rule.rule_type)

    if rule_type == RuleType.REQUIRED:
        return CompiledRule(rule)

    if rule_type == RuleType.MAX_LENGTH:
        return CompiledRule(rule, max_length=_numeric_option(rule, "max", required=True))

    if rule_type == RuleType.REGEX:
        pattern = rule.rule_config.get("pattern")
        if not isinstance(pattern, str):
            raise _config_error(rule, "Regex rule needs a string 'pattern'")
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise _config_error(rule, f"Invalid regex pattern {pattern!r}: {e}") from e
        return CompiledRule(rule, pattern=compiled)

    if rule_type == RuleType.RANGE:
        return CompiledRule(
            rule,
            range_min=_numeric_option(rule, "min"),
            range_max=_numeric_option(rule, "max"),
        )

    if rule_type == RuleType.LOOKUP:
        return CompiledRule(rule, **_compile_lookup(rule))

    if rule_type == RuleType.CUSTOM:
        return CompiledRule(rule, **_compile_custom(rule, validation))

    raise _config_error(rule, f"Unsupported rule type '{rule.rule_type}'")


def _format_bound(bound: float | None) -> str:
    if bound is None:
        return ""
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _render(compiled: CompiledRule, low: float | None = None, high: float | None = None) -> str:
    message = compiled.rule.message
    if low is not None:
        message = message.replace("{min}", _format_bound(low))
    if high is not None:
        message = message.replace("{max}", _format_bound(high))
    return message


def _issue(compiled: CompiledRule, message: str, suggestion: str | None = None) -> ValidationIssue:
    return ValidationIssue(
        field=compiled.field_name,
        rule_id=compiled.rule_id,
        severity=compiled.rule.severity,
        message=message,
        suggestion=suggestion,
    )


def _lookup_passes(compiled: CompiledRule, value: Any, context: ValidationContext) -> bool:
    text = to_text(value).strip()
    if compiled.lookup_mode == LookupMode.BRAND:
        return text in context.brand_names
    if compiled.lookup_mode == LookupMode.TABLE:
        return text in context.lookup_targets(compiled.table_type or "")
    return text.upper() in compiled.allowed_values


def apply_rule(
    rule: CompiledRule | FieldRule,
    record: ProductRecord | Mapping[str, Any],
    context: ValidationContext,
) -> list[ValidationIssue]:
    """Evaluate one rule against one record.

    Args:
        rule: Compiled rule (a bare FieldRule is compiled on the fly)
        record: Record, or its working data
        context: Run context providing brands and lookup targets

    Returns:
        Issues produced by the rule, empty when it passes or does not apply
    """
    compiled = rule if isinstance(rule, CompiledRule) else compile_rule(rule, context.config.validation)
    data = record.data if isinstance(record, ProductRecord) else record
    value = data.get(compiled.field_name)
    present = not is_missing(value)
    rule_type = RuleType(compiled.rule.rule_type)

    if rule_type == RuleType.REQUIRED:
        return [] if present else [_issue(compiled, compiled.rule.message)]

    if rule_type == RuleType.CUSTOM:
        return _apply_custom(compiled, value, present, data)

    if not present:
        return []

    if rule_type == RuleType.MAX_LENGTH:
        assert compiled.max_length is not None
        if len(to_text(value)) > compiled.max_length:
            return [_issue(compiled, _render(compiled, high=compiled.max_length))]
        return []

    if rule_type == RuleType.REGEX:
        assert compiled.pattern is not None
        if compiled.pattern.search(to_text(value)) is None:
            return [_issue(compiled, compiled.rule.message)]
        return []

    if rule_type == RuleType.RANGE:
        number = to_number(value)
        if number is None:
            return []
        issues = []
        if compiled.range_min is not None and number < compiled.range_min:
            issues.append(_issue(compiled, _render(compiled, compiled.range_min, compiled.range_max)))
        if compiled.range_max is not None and number > compiled.range_max:
            issues.append(_issue(compiled, _render(compiled, compiled.range_min, compiled.range_max)))
        return issues

    if rule_type == RuleType.LOOKUP:
        if _lookup_passes(compiled, value, context):
            return []
        return [_issue(compiled, compiled.rule.message)]

    return []


def _apply_custom(
    compiled: CompiledRule, value: Any, present: bool, data: Mapping[str, Any]
) -> list[ValidationIssue]:
    check = compiled.custom_check
    assert check is not None and compiled.check_params is not None
    if not check.spans_record and not present:
        return []

    result = CUSTOM_CHECKS[check](value, data, compiled.check_params)
    if result.is_valid:
        return []
    if result.issues:
        return [_issue(compiled, message, result.suggestion) for message in result.issues]
    return [_issue(compiled, compiled.rule.message, result.suggestion)]
