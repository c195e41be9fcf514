"""Map spreadsheet column headers onto canonical listing field names.

Headers are normalized (lower case, runs of non-alphanumerics to ``_``),
looked up in a table of known aliases, and otherwise matched by Levenshtein
similarity against the canonical names and aliases. Only confident matches
are kept, and each canonical field is claimed by at most one column.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field
from rapidfuzz.distance import Levenshtein

from ..models.record import LISTING_FIELDS


class MappingConfidence(str, Enum):
    EXACT = "exact"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


ACCEPTED_CONFIDENCE = (MappingConfidence.EXACT, MappingConfidence.HIGH, MappingConfidence.MEDIUM)

HIGH_SIMILARITY = 0.9
MEDIUM_SIMILARITY = 0.7
LOW_SIMILARITY = 0.5


FIELD_NAME_VARIATIONS: dict[str, str] = {
    # SKU
    "sku": "item_sku",
    "product_sku": "item_sku",
    "seller_sku": "item_sku",
    # Title
    "title": "item_name",
    "product_title": "item_name",
    "product_name": "item_name",
    "name": "item_name",
    # Barcode
    "upc": "external_product_id",
    "ean": "external_product_id",
    "barcode": "external_product_id",
    "product_id": "external_product_id",
    "barcode_type": "external_product_id_type",
    "id_type": "external_product_id_type",
    # Brand and description
    "brand": "brand_name",
    "description": "product_description",
    "long_description": "product_description",
    # Price and quantity
    "price": "standard_price",
    "list_price": "standard_price",
    "unit_price": "standard_price",
    "qty": "quantity",
    "stock": "quantity",
    "inventory": "quantity",
    "available_quantity": "quantity",
    # Categorization
    "department": "department_name",
    "dept": "department_name",
    "category": "department_name",
    "type": "item_type",
    "product_type": "item_type",
    "garment_type": "clothing_type",
    # Variations
    "relationship_type": "parent_child",
    "parent": "parent_sku",
    "parent_id": "parent_sku",
    "variation_type": "variation_theme",
    # Size and color
    "size": "size_name",
    "product_size": "size_name",
    "amazon_size": "size_map",
    "color": "color_name",
    "product_color": "color_name",
    "amazon_color": "color_map",
    # Images
    "image": "main_image_url",
    "main_image": "main_image_url",
    "image_url": "main_image_url",
    "primary_image": "main_image_url",
    # Attributes
    "material": "material_type",
    "fabric": "fabric_type",
    "care": "care_instructions",
    "washing_instructions": "care_instructions",
    "country": "country_of_origin",
    "origin": "country_of_origin",
    "made_in": "country_of_origin",
    "fulfillment": "fulfillment_channel",
    "shipping_method": "fulfillment_channel",
}
FIELD_NAME_VARIATIONS.update({field: field for field in LISTING_FIELDS})
for _i in range(1, 6):
    for _alias in (f"bullet{_i}", f"bullet_{_i}", f"feature{_i}"):
        FIELD_NAME_VARIATIONS[_alias] = f"bullet_point{_i}"
for _i in range(1, 9):
    for _alias in (f"image{_i}", f"image_{_i}", f"other_image{_i}"):
        FIELD_NAME_VARIATIONS[_alias] = f"other_image_url{_i}"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class ColumnMapping(BaseModel):
    source_column: str
    field: str | None = None
    confidence: MappingConfidence = MappingConfidence.NONE
    score: float = Field(0.0, ge=0.0, le=1.0)


class AutoMappingResult(BaseModel):
    """Accepted mappings plus what was left on either side."""

    mappings: list[ColumnMapping] = Field(default_factory=list)
    unmapped_columns: list[str] = Field(default_factory=list)
    unmapped_fields: list[str] = Field(default_factory=list)

    def as_dict(self) -> dict[str, str]:
        """``{source_column: canonical_field}`` for accepted mappings."""
        return {m.source_column: m.field for m in self.mappings if m.field}


def normalize_column_name(column: str) -> str:
    """Lower-case a header and collapse separators to single underscores.

    Examples:
        >>> normalize_column_name("  Product Title ")
        'product_title'
        >>> normalize_column_name("Bullet-Point #1")
        'bullet_point_1'
    """
    return _NON_ALNUM.sub("_", column.lower().strip()).strip("_")


def _confidence(score: float) -> MappingConfidence:
    if score >= HIGH_SIMILARITY:
        return MappingConfidence.HIGH
    if score >= MEDIUM_SIMILARITY:
        return MappingConfidence.MEDIUM
    if score >= LOW_SIMILARITY:
        return MappingConfidence.LOW
    return MappingConfidence.NONE


def find_best_match(column: str) -> ColumnMapping:
    """Best canonical field for one header, with its confidence."""
    normalized = normalize_column_name(column)
    if normalized in FIELD_NAME_VARIATIONS:
        return ColumnMapping(
            source_column=column,
            field=FIELD_NAME_VARIATIONS[normalized],
            confidence=MappingConfidence.EXACT,
            score=1.0,
        )

    best_field: str | None = None
    best_score = 0.0
    candidates = [(field, field) for field in LISTING_FIELDS] + list(FIELD_NAME_VARIATIONS.items())
    for candidate, field in candidates:
        score = Levenshtein.normalized_similarity(normalized, candidate)
        if score > best_score:
            best_score, best_field = score, field

    confidence = _confidence(best_score)
    if confidence == MappingConfidence.NONE:
        best_field = None
    return ColumnMapping(
        source_column=column, field=best_field, confidence=confidence, score=best_score
    )


def auto_map_columns(source_columns: Iterable[str]) -> AutoMappingResult:
    """Map headers to canonical fields, first confident column wins each field."""
    result = AutoMappingResult()
    claimed: set[str] = set()

    for column in source_columns:
        match = find_best_match(column)
        if match.field and match.confidence in ACCEPTED_CONFIDENCE and match.field not in claimed:
            result.mappings.append(match)
            claimed.add(match.field)
        else:
            result.unmapped_columns.append(column)

    result.unmapped_fields = [field for field in LISTING_FIELDS if field not in claimed]
    if result.unmapped_columns:
        logger.debug(f"Unmapped columns: {result.unmapped_columns}")
    return result


def canonicalize_record(raw: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    """Rename a raw row's columns to canonical fields, dropping unmapped columns."""
    return {mapping[column]: value for column, value in raw.items() if column in mapping}
