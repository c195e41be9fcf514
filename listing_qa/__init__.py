"""Rule-driven validation and enrichment of marketplace product listings."""

from .context import ValidationContext, build_context
from .orchestrator import ValidationOrchestrator, evaluate_record, summarize_issues


__version__ = "0.1.0"

__all__ = [
    "ValidationContext",
    "ValidationOrchestrator",
    "build_context",
    "evaluate_record",
    "summarize_issues",
]
