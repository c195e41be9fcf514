"""Text and value normalization helpers shared by validators and enrichers.

Spreadsheet-sourced records mix strings, numbers and missing cells (None or
NaN). These helpers give every module the same answer to "is this value
present", "what is its text", and "is it a number".
"""

from __future__ import annotations

import math
import re
from typing import Any

import pandas as pd


# Opening, closing and self-closing tags; "a < b" and "<3" do not match.
HTML_TAG_PATTERN = re.compile(r"</?[a-zA-Z][a-zA-Z0-9]*[^>]*>")

_WHITESPACE_RUN = re.compile(r"\s+")
_NUMERIC_TEXT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def is_missing(value: Any) -> bool:
    """Return True for None, NaN/NaT, and strings that are blank after stripping."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # pd.isna on list-likes returns an array; those values are present.
        return False


def is_present(value: Any) -> bool:
    """Inverse of :func:`is_missing`."""
    return not is_missing(value)


def to_text(value: Any) -> str:
    """Render a record value as text.

    Whole floats render without a trailing ".0" so that a barcode or quantity
    read from a spreadsheet as 12.0 is compared as "12".
    """
    if is_missing(value):
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> float | None:
    """Coerce a value to a finite float, or None when it is not numeric.

    Accepts ints, floats and numeric strings (surrounding whitespace allowed).
    Booleans, blanks, NaN and infinities are not numeric.

    Examples:
        >>> to_number(" 12.50 ")
        12.5
        >>> to_number("12abc") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_TEXT.match(text):
            return None
        number = float(text)
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def collapse_whitespace(text: str) -> str:
    """Strip and collapse internal whitespace runs to single spaces."""
    return _WHITESPACE_RUN.sub(" ", text.strip())


def contains_html(text: str) -> bool:
    return HTML_TAG_PATTERN.search(text) is not None


def capitalize_words(text: str) -> str:
    """Title-case words, leaving acronyms and size codes untouched.

    Tokens that are entirely upper-case letters/digits ("XL", "USA") or that
    contain a digit ("2XL", "3t") are kept as written.

    Examples:
        >>> capitalize_words("  navy  blue XL ")
        'Navy Blue XL'
        >>> capitalize_words("size 2xl")
        'Size 2xl'
    """
    if not text:
        return ""

    words = []
    for word in text.split():
        if re.fullmatch(r"[A-Z0-9]+", word) or re.search(r"\d", word):
            words.append(word)
        else:
            words.append(word[0].upper() + word[1:].lower())
    return " ".join(words)
