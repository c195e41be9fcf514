"""Named custom checks for `custom` rules.

Every member of :class:`~listing_qa.models.rules.CustomCheck` maps to exactly
one function in :data:`CUSTOM_CHECKS`. A check receives the field value, the
record's working data and the compiled :class:`CheckParams`, and returns a
:class:`CheckResult`. A failing result with no messages is reported with the
rule's own message; a failing result with messages yields one issue per
message.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..config.schemas import ValidationConfig
from ..models.record import BULLET_POINT_FIELDS
from ..models.rules import CustomCheck
from ..utils.text_normalization import contains_html, is_missing, is_present, to_number, to_text
from .barcode import corrected_barcode, is_barcode_shape, is_valid_check_digit


PUNCTUATION_MARKS = re.compile(r"[!?.,;:]")
PUNCTUATION_RUN = re.compile(r"[!?.,;:]{2,}")
_NON_LETTERS = re.compile(r"[^a-zA-Z]")

_HTTP_URL = TypeAdapter(HttpUrl)

BARCODE_TYPES = frozenset({"UPC", "EAN"})


@dataclass(frozen=True)
class CheckParams:
    """Thresholds a custom check may consult.

    Built once per rule at compile time from the validation config, with
    rule-level overrides (`maxThreshold`, `minLength`) applied.
    """

    max_threshold: float = 10000.0
    description_min_length: int = 100
    description_max_length: int = 2000
    bullet_min_length: int = 15
    bullet_max_length: int = 500
    bullet_point_count: int = 5
    max_title_punctuation: int = 3

    @classmethod
    def from_config(cls, config: ValidationConfig) -> CheckParams:
        return cls(
            max_threshold=config.price_max_threshold,
            description_min_length=config.description_min_length,
            description_max_length=config.description_max_length,
            bullet_min_length=config.bullet_min_length,
            bullet_max_length=config.bullet_max_length,
            bullet_point_count=config.bullet_point_count,
            max_title_punctuation=config.max_title_punctuation,
        )


@dataclass(frozen=True)
class CheckResult:
    is_valid: bool
    issues: tuple[str, ...] = ()
    suggestion: str | None = None


PASSED = CheckResult(True)
FAILED = CheckResult(False)


def _verdict(ok: bool) -> CheckResult:
    return PASSED if ok else FAILED


def _from_issues(issues: list[str]) -> CheckResult:
    return CheckResult(not issues, tuple(issues))


def check_barcode_check_digit(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    """Verify the check digit of 12/13-digit codes.

    Other shapes pass: the digit count is a format concern, not a check digit
    failure.
    """
    code = to_text(value).strip()
    if not is_barcode_shape(code):
        return PASSED
    if is_valid_check_digit(code):
        return PASSED
    return CheckResult(False, suggestion=corrected_barcode(code))


def check_barcode_type(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    return _verdict(to_text(value).strip().upper() in BARCODE_TYPES)


def check_bullet_points(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    """Record-wide bullet point check.

    A missing first bullet is reported alone; otherwise every present bullet
    is checked for length and HTML tags, one issue per violation.
    """
    fields = BULLET_POINT_FIELDS[: params.bullet_point_count]
    if is_missing(data.get(fields[0])):
        return CheckResult(False, (f"At least {fields[0]} is required",))

    issues: list[str] = []
    for key in fields:
        bullet = data.get(key)
        if is_missing(bullet):
            continue
        text = to_text(bullet).strip()
        if len(text) > params.bullet_max_length:
            issues.append(f"{key} must not exceed {params.bullet_max_length} characters")
        if contains_html(text):
            issues.append(f"{key} must not contain HTML tags")
    return _from_issues(issues)


def check_description(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    if is_missing(value):
        return CheckResult(False, ("Description is required",))

    text = to_text(value).strip()
    issues: list[str] = []
    if len(text) > params.description_max_length:
        issues.append(
            f"Description must not exceed {params.description_max_length} characters"
        )
    if contains_html(text):
        issues.append("Description must not contain HTML tags")
    return _from_issues(issues)


def check_description_quality(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    if is_missing(value):
        return FAILED
    return _verdict(len(to_text(value).strip()) >= params.description_min_length)


def check_bullet_point_quality(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    if is_missing(value):
        return PASSED
    return _verdict(len(to_text(value).strip()) >= params.bullet_min_length)


def check_url(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    """Absolute http(s) URL with a host. Well-formedness only; nothing is fetched."""
    text = to_text(value).strip()
    if not text:
        return FAILED
    try:
        _HTTP_URL.validate_python(text)
    except PydanticValidationError:
        return FAILED
    return PASSED


def check_price(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    number = to_number(value)
    return _verdict(number is not None and number > 0)


def check_quantity(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    number = to_number(value)
    return _verdict(number is not None and number >= 0 and number.is_integer())


def check_price_reasonableness(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    """Flag zero, negative, or implausibly high prices. Blank or non-numeric is not applicable."""
    number = to_number(value)
    if number is None:
        return PASSED
    return _verdict(0 < number <= params.max_threshold)


def _first_present(data: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        if is_present(data.get(key)):
            return to_text(data[key]).strip()
    return None


def check_title_quality(value: Any, data: Mapping[str, Any], params: CheckParams) -> CheckResult:
    """Check the title mentions the record's attributes and is not shouty.

    Brand, color, size and material are each flagged when the record has
    them but the title does not contain them (case-insensitive). Excessive
    punctuation is flagged once, whether from the total count or a run of
    consecutive marks.
    """
    title = to_text(value).strip()
    if not title:
        return PASSED

    lower_title = title.lower()
    components = (
        ("brand name", _first_present(data, "brand_name")),
        ("color", _first_present(data, "color_name", "color_map")),
        ("size", _first_present(data, "size_name", "size_map")),
        ("material", _first_present(data, "material_type")),
    )

    issues: list[str] = []
    for label, component in components:
        if component and component.lower() not in lower_title:
            issues.append(f"Title is missing {label}")

    letters = _NON_LETTERS.sub("", title)
    if letters and letters == letters.upper():
        issues.append("Title contains all uppercase letters")

    marks = PUNCTUATION_MARKS.findall(title)
    if len(marks) > params.max_title_punctuation or PUNCTUATION_RUN.search(title):
        issues.append("Title contains excessive punctuation")

    return _from_issues(issues)


CheckFunction = Callable[[Any, Mapping[str, Any], CheckParams], CheckResult]

CUSTOM_CHECKS: dict[CustomCheck, CheckFunction] = {
    CustomCheck.BARCODE_CHECK_DIGIT: check_barcode_check_digit,
    CustomCheck.BARCODE_TYPE: check_barcode_type,
    CustomCheck.BULLET_POINTS: check_bullet_points,
    CustomCheck.DESCRIPTION: check_description,
    CustomCheck.DESCRIPTION_QUALITY: check_description_quality,
    CustomCheck.BULLET_POINT_QUALITY: check_bullet_point_quality,
    CustomCheck.URL: check_url,
    CustomCheck.PRICE: check_price,
    CustomCheck.QUANTITY: check_quantity,
    CustomCheck.PRICE_REASONABLENESS: check_price_reasonableness,
    CustomCheck.TITLE_QUALITY: check_title_quality,
}

_unmapped = set(CustomCheck) - set(CUSTOM_CHECKS)
if _unmapped:
    raise RuntimeError(f"Custom checks without an implementation: {sorted(_unmapped)}")
