"""Rule definitions as loaded from the rule store."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .quality import Severity


class RuleType(str, Enum):
    """Kinds of field rule understood by the evaluator."""

    REQUIRED = "required"
    MAX_LENGTH = "max_length"
    REGEX = "regex"
    RANGE = "range"
    LOOKUP = "lookup"
    CUSTOM = "custom"


class CustomCheck(str, Enum):
    """Closed set of named custom checks available to `custom` rules."""

    BARCODE_CHECK_DIGIT = "validateBarcodeCheckDigit"
    BARCODE_TYPE = "validateBarcodeType"
    BULLET_POINTS = "validateBulletPoints"
    DESCRIPTION = "validateDescription"
    DESCRIPTION_QUALITY = "validateDescriptionQuality"
    BULLET_POINT_QUALITY = "validateBulletPointQuality"
    URL = "validateURL"
    PRICE = "validatePrice"
    QUANTITY = "validateQuantity"
    PRICE_REASONABLENESS = "validatePriceReasonableness"
    TITLE_QUALITY = "validateTitleQuality"

    @classmethod
    def from_name(cls, name: str) -> CustomCheck:
        """Resolve a configured function name, accepting legacy seed names.

        Raises:
            ValueError: if the name is not a known check
        """
        name = LEGACY_CHECK_NAMES.get(name, name)
        return cls(name)

    @property
    def spans_record(self) -> bool:
        """Checks that read the whole record rather than one field value."""
        return self in (CustomCheck.BULLET_POINTS, CustomCheck.TITLE_QUALITY)


# Function names used by older rule seeds.
LEGACY_CHECK_NAMES: dict[str, str] = {
    "validateUPCCheckDigit": CustomCheck.BARCODE_CHECK_DIGIT.value,
    "validateUPCEAN": CustomCheck.BARCODE_CHECK_DIGIT.value,
    "checkTitleQuality": CustomCheck.TITLE_QUALITY.value,
    "checkBulletQuality": CustomCheck.BULLET_POINT_QUALITY.value,
    "checkDescriptionQuality": CustomCheck.DESCRIPTION_QUALITY.value,
    "checkPriceReasonableness": CustomCheck.PRICE_REASONABLENESS.value,
}


class FieldRule(BaseModel):
    """A configured, typed check applied to one field.

    Immutable: a run works on the snapshot of rules it loaded at start.
    """

    id: str = Field(..., description="Rule identifier")
    field_name: str = Field(..., description="Canonical field the rule applies to")
    rule_type: RuleType
    rule_config: dict[str, Any] = Field(
        default_factory=dict, description="Parameters keyed by rule type"
    )
    severity: Severity = Severity.ERROR
    message: str = Field(..., description="Message template ({min}/{max} substituted)")
    is_active: bool = True
    sort_order: int = 0

    model_config = ConfigDict(frozen=True)
