"""Central exception hierarchy for the listing validation engine.

Every error raised by the engine inherits from ListingQAError so callers can
tell run-level failures apart from validation findings. Validation findings
are never exceptions: a record that breaks a rule produces a ValidationIssue.
Exceptions are reserved for problems with the run itself.

Exception Hierarchy:
    ListingQAError (base)
    ├── ConfigurationError
    ├── ValidationError
    │   ├── RuleConfigurationError
    │   └── RuleEvaluationError
    ├── EnrichmentError
    ├── RepositoryError
    └── ValidationCancelledError

Usage:
    from listing_qa.exceptions import RepositoryError, wrap_exception

    try:
        rows = store.fetch_rows(upload_id)
    except OSError as exc:
        raise wrap_exception(
            exc,
            RepositoryError,
            adapter="upload_store",
            operation="load_records_for_upload",
        ) from exc
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Error codes for programmatic handling.

    Categories:
        1xxx - Configuration errors
        2xxx - Rule and validation errors
        3xxx - Adapter (repository) errors
        5xxx - Run lifecycle errors
    """

    # Configuration errors (1xxx)
    CONFIG_LOAD_FAILED = 1001
    CONFIG_VALIDATION_FAILED = 1002

    # Rule and validation errors (2xxx)
    VALIDATION_FAILED = 2001
    RULE_CONFIG_INVALID = 2002
    RULE_EVALUATION_FAILED = 2003

    # Adapter errors (3xxx)
    REPOSITORY_UNAVAILABLE = 3001
    REPOSITORY_WRITE_FAILED = 3002
    UPLOAD_INVALID = 3003

    # Run lifecycle errors (5xxx)
    ENRICHMENT_FAILED = 5002
    RUN_CANCELLED = 5005


class ListingQAError(Exception):
    """Base exception for all listing validation engine errors.

    Attributes:
        message: Human-readable error description
        component: Engine component (e.g., "validators.rule_evaluator")
        operation: Operation being performed (e.g., "compile_rule")
        details: Additional context as dictionary
        retryable: Whether operation can be retried
        status_code: Numeric error code from ErrorCode enum
        cause: Original exception if wrapping another error
    """

    def __init__(
        self,
        message: str,
        component: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
        status_code: ErrorCode | None = None,
        cause: Exception | None = None,
    ):
        self.message = message
        self.component = component or self.__class__.__module__
        self.operation = operation
        self.details = details or {}
        self.retryable = retryable
        self.status_code = status_code
        self.cause = cause

        parts = [message]
        if component:
            parts.append(f"[component={component}]")
        if operation:
            parts.append(f"[operation={operation}]")
        if status_code:
            parts.append(f"[code={status_code}]")

        super().__init__(" ".join(parts))

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Example:
            {
                "error_type": "RuleConfigurationError",
                "message": "Rule config 'max' must be numeric",
                "component": "validators.rule_evaluator",
                "operation": "compile_rule",
                "details": {"rule_id": "r-3", "field": "item_name"},
                "retryable": false,
                "status_code": 2002,
                "cause": "ValueError: could not convert string to float: 'abc'"
            }
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "operation": self.operation,
            "details": self.details,
            "retryable": self.retryable,
            "status_code": self.status_code.value if self.status_code else None,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(ListingQAError):
    """Configuration loading or validation failed.

    Not retryable as configuration issues must be fixed manually.
    """

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        component = kwargs.pop("component", "config")

        super().__init__(
            message,
            component=component,
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.CONFIG_VALIDATION_FAILED),
            retryable=False,
            **kwargs,
        )


class ValidationError(ListingQAError):
    """Validation machinery failed.

    Note: a record failing a rule is not an exception; this class covers
    problems with the rules themselves or with evaluating them.
    """

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            message,
            status_code=kwargs.pop("status_code", ErrorCode.VALIDATION_FAILED),
            retryable=False,
            **kwargs,
        )


class RuleConfigurationError(ValidationError):
    """A rule's configuration cannot be used (bad `max`, invalid regex, ...).

    The offending rule is skipped and surfaced for administrator review.

    Example:
        raise RuleConfigurationError(
            "Rule config 'max' must be numeric",
            rule_id="r-3",
            field_name="item_name",
        )
    """

    def __init__(
        self,
        message: str,
        rule_id: str | None = None,
        field_name: str | None = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if rule_id is not None:
            details["rule_id"] = rule_id
        if field_name is not None:
            details["field"] = field_name

        component = kwargs.pop("component", "validators.rule_evaluator")

        super().__init__(
            message,
            component=component,
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.RULE_CONFIG_INVALID),
            **kwargs,
        )

    @property
    def rule_id(self) -> str | None:
        return self.details.get("rule_id")


class RuleEvaluationError(ValidationError):
    """Evaluating a single rule against a single record raised unexpectedly."""

    def __init__(
        self,
        message: str,
        rule_id: str | None = None,
        row_number: int | None = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if rule_id is not None:
            details["rule_id"] = rule_id
        if row_number is not None:
            details["row_number"] = row_number

        super().__init__(
            message,
            component=kwargs.pop("component", "validators.rule_evaluator"),
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.RULE_EVALUATION_FAILED),
            **kwargs,
        )


class EnrichmentError(ListingQAError):
    """Enrichment or auto-fix failed for reasons other than a lookup miss."""

    def __init__(self, message: str, record_id: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if record_id is not None:
            details["record_id"] = record_id

        super().__init__(
            message,
            component=kwargs.pop("component", "enrichers"),
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.ENRICHMENT_FAILED),
            **kwargs,
        )


class RepositoryError(ListingQAError):
    """An external adapter (rule store, lookup store, record store) failed.

    Aborts the run. Retryable by default since stores are usually transiently
    unavailable.

    Example:
        raise RepositoryError(
            "Rule store unavailable",
            adapter="catalog",
            operation="load_active_rules",
        )
    """

    def __init__(self, message: str, adapter: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if adapter:
            details["adapter"] = adapter

        component = kwargs.pop("component", "repositories")
        retryable = kwargs.pop("retryable", True)

        super().__init__(
            message,
            component=component,
            details=details,
            retryable=retryable,
            status_code=kwargs.pop("status_code", ErrorCode.REPOSITORY_UNAVAILABLE),
            **kwargs,
        )


class ValidationCancelledError(ListingQAError):
    """The caller cancelled a validation run before it finished."""

    def __init__(
        self,
        message: str,
        upload_id: str | None = None,
        records_processed: int | None = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if upload_id is not None:
            details["upload_id"] = upload_id
        if records_processed is not None:
            details["records_processed"] = records_processed

        super().__init__(
            message,
            component=kwargs.pop("component", "orchestrator"),
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.RUN_CANCELLED),
            retryable=False,
            **kwargs,
        )


def wrap_exception(
    original: Exception,
    error_class: type[ListingQAError],
    message: str | None = None,
    **kwargs: Any,
) -> ListingQAError:
    """Wrap a generic exception in a structured engine exception.

    Args:
        original: Original exception to wrap
        error_class: ListingQAError subclass to use
        message: Override message (defaults to original message)
        **kwargs: Additional arguments for exception constructor

    Returns:
        Instance of error_class with original exception as cause
    """
    return error_class(message or str(original), cause=original, **kwargs)


def is_retryable(exc: Exception) -> bool:
    """Check if an exception is retryable."""
    if isinstance(exc, ListingQAError):
        return exc.retryable
    return False


def get_error_code(exc: Exception) -> int | None:
    """Get error code from exception if available."""
    if isinstance(exc, ListingQAError) and exc.status_code:
        return exc.status_code.value
    return None
