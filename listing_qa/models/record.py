"""Product record model.

A record keeps its uploaded values (`original_data`) untouched. Enrichment,
auto-fix and manual edits produce a new record whose `enriched_data` holds the
working values, so both views stay available for audit.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .enrichment import EnrichmentChange


BULLET_POINT_FIELDS = tuple(f"bullet_point{i}" for i in range(1, 6))
OTHER_IMAGE_FIELDS = tuple(f"other_image_url{i}" for i in range(1, 9))

# Canonical field names produced by column mapping.
LISTING_FIELDS: tuple[str, ...] = (
    "item_sku",
    "item_name",
    "external_product_id",
    "external_product_id_type",
    "brand_name",
    "product_description",
    "standard_price",
    "quantity",
    "department_name",
    "item_type",
    "clothing_type",
    "parent_child",
    "parent_sku",
    "variation_theme",
    "size_name",
    "size_map",
    "color_name",
    "color_map",
    *BULLET_POINT_FIELDS,
    "main_image_url",
    *OTHER_IMAGE_FIELDS,
    "material_type",
    "fabric_type",
    "care_instructions",
    "country_of_origin",
    "manufacturer",
    "fulfillment_channel",
)


@dataclass(frozen=True)
class ProductRecord:
    """One product row within an upload.

    Attributes:
        record_id: Store identifier for the record
        row_number: 1-based row number within the upload
        original_data: Values as uploaded
        enriched_data: Working values after enrichment, None until first change
        history: Committed changes, oldest first
    """

    record_id: str
    row_number: int
    original_data: Mapping[str, Any] = field(default_factory=dict)
    enriched_data: Mapping[str, Any] | None = None
    history: tuple[EnrichmentChange, ...] = ()

    @property
    def data(self) -> dict[str, Any]:
        """Working view: enriched values when present, else the originals."""
        source = self.enriched_data if self.enriched_data is not None else self.original_data
        return dict(source)

    def get(self, field_name: str, default: Any = None) -> Any:
        return self.data.get(field_name, default)

    def with_changes(
        self, enriched_data: Mapping[str, Any], changes: Iterable[EnrichmentChange]
    ) -> ProductRecord:
        """Return a new record with `enriched_data` replaced and `changes` appended."""
        return replace(
            self,
            enriched_data=dict(enriched_data),
            history=self.history + tuple(changes),
        )
