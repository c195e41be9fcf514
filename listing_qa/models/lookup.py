"""Lookup table entries (source value to marketplace value mappings)."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.text_normalization import collapse_whitespace


class LookupCategory(str, Enum):
    """Mapping tables applied by suggestions and auto-fix.

    Other categories (``department``, ``item_type``) are plain strings that
    only supply allowed values to ``lookup`` rules.
    """

    COLOR_MAP = "color_map"
    SIZE_MAP = "size_map"


class LookupEntry(BaseModel):
    """One mapping row.

    `brand=None` marks the generic entry used when no brand-specific entry
    exists for the same (category, source_value).
    """

    category: str = Field(..., description="Lookup category, e.g. 'color_map'")
    source_value: str
    target_value: str
    brand: str | None = None
    is_active: bool = True

    model_config = ConfigDict(frozen=True)

    @field_validator("category", mode="before")
    @classmethod
    def category_name(cls, value: object) -> object:
        if isinstance(value, LookupCategory):
            return value.value
        return value

    @field_validator("target_value")
    @classmethod
    def normalize_target(cls, value: str) -> str:
        # Mapped values are written into records as-is.
        return collapse_whitespace(value)

    @field_validator("brand")
    @classmethod
    def blank_brand_is_generic(cls, value: str | None) -> str | None:
        if value is not None and value.strip() == "":
            return None
        return value
