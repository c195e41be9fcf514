"""Column header canonicalisation."""

from .columns import (
    FIELD_NAME_VARIATIONS,
    AutoMappingResult,
    ColumnMapping,
    MappingConfidence,
    auto_map_columns,
    canonicalize_record,
    normalize_column_name,
)


__all__ = [
    "FIELD_NAME_VARIATIONS",
    "AutoMappingResult",
    "ColumnMapping",
    "MappingConfidence",
    "auto_map_columns",
    "canonicalize_record",
    "normalize_column_name",
]
