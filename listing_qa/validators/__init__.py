"""Barcode, field rule and cross-record validation."""

from .barcode import compute_check_digit, is_valid_check_digit
from .relationships import validate_relationships
from .rule_evaluator import CompiledRule, apply_rule, compile_rule


__all__ = [
    "CompiledRule",
    "apply_rule",
    "compile_rule",
    "compute_check_digit",
    "is_valid_check_digit",
    "validate_relationships",
]
