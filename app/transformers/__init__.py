"""
app/transformers package marker.
"""

from app.transformers.field_transformer import (
    FIELD_TRANSFORMERS,
    FieldTransform,
    FieldTransformer,
    transform_row,
)

__all__ = [
    "FIELD_TRANSFORMERS",
    "FieldTransform",
    "FieldTransformer",
    "transform_row",
]
