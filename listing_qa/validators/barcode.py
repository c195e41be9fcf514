"""UPC-A / EAN-13 check digit arithmetic.

Both symbologies share the same weighted sum: walking right to left from the
digit immediately left of the check digit, positions 0, 2, 4, ... weigh 3 and
positions 1, 3, 5, ... weigh 1. The check digit tops the sum up to a multiple
of ten.
"""

from __future__ import annotations

from typing import Any

from ..utils.text_normalization import to_text


BARCODE_LENGTHS = (12, 13)


def compute_check_digit(digits: str) -> int:
    """Compute the check digit for the leading 11 (UPC-A) or 12 (EAN-13) digits.

    Args:
        digits: Barcode without its check digit

    Returns:
        Check digit in 0..9

    Raises:
        ValueError: if ``digits`` is not 11 or 12 decimal digits

    Examples:
        >>> compute_check_digit("03600029145")
        2
        >>> compute_check_digit("400638133393")
        1
    """
    if not (digits.isascii() and digits.isdigit()) or len(digits) not in (11, 12):
        raise ValueError(f"Expected 11 or 12 digits, got {digits!r}")

    total = 0
    for position, char in enumerate(reversed(digits)):
        weight = 3 if position % 2 == 0 else 1
        total += int(char) * weight
    return (10 - total % 10) % 10


def is_barcode_shape(code: str) -> bool:
    """True for an all-digit string of 12 or 13 characters."""
    return code.isascii() and code.isdigit() and len(code) in BARCODE_LENGTHS


def is_valid_check_digit(code: Any) -> bool:
    """Verify the trailing check digit of a full 12/13-digit code.

    Any other shape (wrong length, non-digits, missing) is simply invalid.
    """
    text = to_text(code).strip()
    if not is_barcode_shape(text):
        return False
    return int(text[-1]) == compute_check_digit(text[:-1])


def corrected_barcode(code: str) -> str:
    """Return ``code`` with its final digit replaced by the computed check digit.

    Raises:
        ValueError: if ``code`` is not 12 or 13 digits
    """
    if not is_barcode_shape(code):
        raise ValueError(f"Expected 12 or 13 digits, got {code!r}")
    return code[:-1] + str(compute_check_digit(code[:-1]))
