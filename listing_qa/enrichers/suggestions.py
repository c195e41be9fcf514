"""Assemble enrichment suggestions for one record."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..config.schemas import EnrichmentConfig
from ..models.enrichment import Confidence, EnrichmentSuggestion
from ..models.lookup import LookupCategory
from ..utils.text_normalization import is_missing, is_present, to_text
from .inference import generate_title, infer_department, infer_item_types, optional_field_suggestions
from .lookup_resolver import LookupResolver


# (source field, target field, lookup category)
MAPPED_FIELDS = (
    ("color_name", "color_map", LookupCategory.COLOR_MAP),
    ("size_name", "size_map", LookupCategory.SIZE_MAP),
)


def mapping_suggestions(data: Mapping[str, Any], resolver: LookupResolver) -> list[EnrichmentSuggestion]:
    """Suggest color_map/size_map from lookup tables when the target is absent."""
    brand = data.get("brand_name")
    suggestions = []
    for source_field, target_field, category in MAPPED_FIELDS:
        source = data.get(source_field)
        if is_missing(source) or is_present(data.get(target_field)):
            continue
        target = resolver.resolve(category, source, brand)
        if target:
            suggestions.append(
                EnrichmentSuggestion(
                    field=target_field,
                    suggested_value=target,
                    confidence=Confidence.HIGH,
                    reason=f'Mapped from {source_field} "{to_text(source).strip()}" using lookup table',
                )
            )
    return suggestions


def suggest_enrichments(
    data: Mapping[str, Any],
    resolver: LookupResolver,
    config: EnrichmentConfig | None = None,
) -> list[EnrichmentSuggestion]:
    """All suggestions for a record's working data.

    Lookup mappings come first (high confidence), then inferred department,
    item type and title (medium), then optional-field nudges (low, empty
    value).
    """
    config = config or EnrichmentConfig()
    suggestions = mapping_suggestions(data, resolver)

    if is_missing(data.get("department_name")):
        department = infer_department(data, config.department_defaults)
        if department:
            suggestions.append(
                EnrichmentSuggestion(
                    field="department_name",
                    suggested_value=department,
                    confidence=Confidence.MEDIUM,
                    reason="Inferred from product attributes",
                )
            )

    if is_missing(data.get("item_type")):
        item_types = infer_item_types(data)
        if item_types:
            clothing_type = to_text(data.get("clothing_type")).strip()
            suggestions.append(
                EnrichmentSuggestion(
                    field="item_type",
                    suggested_value=item_types[0],
                    confidence=Confidence.MEDIUM,
                    reason=f'Inferred from clothing_type "{clothing_type}"',
                )
            )

    if config.suggest_title and is_missing(data.get("item_name")):
        title = generate_title(data, config.key_feature_words)
        if title:
            suggestions.append(
                EnrichmentSuggestion(
                    field="item_name",
                    suggested_value=title,
                    confidence=Confidence.MEDIUM,
                    reason="Generated from brand, department, product type, key feature, color and size",
                )
            )

    suggestions.extend(optional_field_suggestions(data, config.recommended_optional_fields))
    return suggestions
