"""
app/validators package marker.
"""

from app.validators.record_validator import (
    NULLABLE_FIELDS,
    VALIDATION_RULES,
    FieldRule,
    RecordValidator,
    validate_row,
)

__all__ = [
    "NULLABLE_FIELDS",
    "VALIDATION_RULES",
    "FieldRule",
    "RecordValidator",
    "validate_row",
]
