"""Deterministic, idempotent corrections to a record's working data.

Fixes run in a fixed order: whitespace, barcode check digit, lookup
mappings, SKU format, price format, quantity format. Running the engine on its
own output yields no further fixes.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ..models.enrichment import AutoFix, AutoFixResult, FixType
from ..utils.text_normalization import collapse_whitespace, is_missing, is_present, to_number, to_text
from ..validators.barcode import compute_check_digit
from .lookup_resolver import LookupResolver
from .suggestions import MAPPED_FIELDS


_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")


def _whitespace_fix(field: str, value: Any) -> AutoFix | None:
    if not isinstance(value, str):
        return None
    fixed = collapse_whitespace(value)
    if fixed == value:
        return None
    return AutoFix(
        field=field,
        original_value=value,
        fixed_value=fixed,
        fix_type=FixType.WHITESPACE,
        description="Removed leading/trailing whitespace and normalized spaces",
    )


def _check_digit_fix(value: Any) -> AutoFix | None:
    if is_missing(value):
        return None
    digits = _NON_DIGITS.sub("", to_text(value))
    if len(digits) not in (12, 13):
        return None
    current = digits[-1]
    computed = str(compute_check_digit(digits[:-1]))
    if current == computed:
        return None
    return AutoFix(
        field="external_product_id",
        original_value=value,
        fixed_value=digits[:-1] + computed,
        fix_type=FixType.CHECK_DIGIT,
        description=f"Corrected check digit from {current} to {computed}",
    )


def _mapping_fix(
    source_field: str, target_field: str, category: str, data: Mapping[str, Any], resolver: LookupResolver
) -> AutoFix | None:
    if is_present(data.get(target_field)) or is_missing(data.get(source_field)):
        return None
    target = resolver.resolve(category, data[source_field], data.get("brand_name"))
    if not target:
        return None
    label = target_field.split("_")[0]
    return AutoFix(
        field=target_field,
        original_value=data.get(target_field),
        fixed_value=target,
        fix_type=FixType.MAPPING,
        description=f"Applied {label} mapping from lookup table",
    )


def _sku_fix(value: Any) -> AutoFix | None:
    if not isinstance(value, str):
        return None
    fixed = _WHITESPACE.sub("", value).upper()
    if fixed == value:
        return None
    return AutoFix(
        field="item_sku",
        original_value=value,
        fixed_value=fixed,
        fix_type=FixType.FORMATTING,
        description="Normalized SKU format (uppercase, no spaces)",
    )


def _price_fix(value: Any) -> AutoFix | None:
    number = to_number(value)
    if number is None or number <= 0:
        return None
    formatted = f"{number:.2f}"
    # A price that rounds to 0.00 would fail price validation.
    if float(formatted) <= 0 or to_text(value).strip() == formatted:
        return None
    return AutoFix(
        field="standard_price",
        original_value=value,
        fixed_value=formatted,
        fix_type=FixType.FORMATTING,
        description="Formatted price to 2 decimal places",
    )


def _quantity_fix(value: Any) -> AutoFix | None:
    number = to_number(value)
    if number is None or number < 0 or not number.is_integer():
        return None
    formatted = str(int(number))
    if to_text(value).strip() == formatted:
        return None
    return AutoFix(
        field="quantity",
        original_value=value,
        fixed_value=formatted,
        fix_type=FixType.FORMATTING,
        description="Formatted quantity as integer",
    )


FORMAT_FIXERS = {
    "item_sku": _sku_fix,
    "standard_price": _price_fix,
    "quantity": _quantity_fix,
}


def apply_auto_fix(data: Mapping[str, Any], resolver: LookupResolver) -> AutoFixResult:
    """Apply every available fix to a copy of ``data``.

    Args:
        data: Record working data; not modified
        resolver: Lookup resolver for color/size mappings

    Returns:
        AutoFixResult with the fixed copy and the fixes applied, in order
    """
    fixed_data = dict(data)
    fixes: list[AutoFix] = []

    def commit(fix: AutoFix | None) -> None:
        if fix is not None:
            fixed_data[fix.field] = fix.fixed_value
            fixes.append(fix)

    for field, value in list(fixed_data.items()):
        commit(_whitespace_fix(field, value))

    commit(_check_digit_fix(fixed_data.get("external_product_id")))

    for source_field, target_field, category in MAPPED_FIELDS:
        commit(_mapping_fix(source_field, target_field, category.value, fixed_data, resolver))

    for field, fixer in FORMAT_FIXERS.items():
        commit(fixer(fixed_data.get(field)))

    return AutoFixResult(fixed_data=fixed_data, fixes=fixes)


def has_auto_fix(field: str, value: Any, data: Mapping[str, Any], resolver: LookupResolver) -> bool:
    """Whether a single field has a pending fix.

    Args:
        field: Field name
        value: Current value of the field
        data: Whole record working data, for mapping context
        resolver: Lookup resolver for color/size mappings
    """
    if _whitespace_fix(field, value) is not None:
        return True
    if field == "external_product_id":
        return _check_digit_fix(value) is not None
    for source_field, target_field, category in MAPPED_FIELDS:
        if field == target_field:
            context = {**data, target_field: value}
            return _mapping_fix(source_field, target_field, category.value, context, resolver) is not None
    fixer = FORMAT_FIXERS.get(field)
    return fixer is not None and fixer(value) is not None
