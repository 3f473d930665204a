"""
app/mappers package marker.
"""

from app.mappers.field_mapper import (
    CANONICAL_FIELDS,
    FIELD_COLUMNS,
    FIELD_MAPPINGS,
    REQUIRED_FIELDS,
    CanonicalField,
    column_for,
    known_fields,
    map_header,
    missing_required_fields,
)

__all__ = [
    "CANONICAL_FIELDS",
    "FIELD_COLUMNS",
    "FIELD_MAPPINGS",
    "REQUIRED_FIELDS",
    "CanonicalField",
    "column_for",
    "known_fields",
    "map_header",
    "missing_required_fields",
]
