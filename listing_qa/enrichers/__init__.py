"""Lookup, heuristic and auto-fix enrichment."""

from .auto_fix import apply_auto_fix, has_auto_fix
from .history import apply_manual_edit, apply_suggestion, record_auto_fixes, summarize_history
from .inference import generate_title, infer_department, infer_item_types, optional_field_suggestions
from .lookup_resolver import LookupResolver
from .suggestions import suggest_enrichments


__all__ = [
    "LookupResolver",
    "apply_auto_fix",
    "apply_manual_edit",
    "apply_suggestion",
    "generate_title",
    "has_auto_fix",
    "infer_department",
    "infer_item_types",
    "optional_field_suggestions",
    "record_auto_fixes",
    "suggest_enrichments",
    "summarize_history",
]
