"""
app/repositories package marker.
"""

from app.repositories.record_repository import RECORD_TARGETS, RecordRepository, RecordTarget

__all__ = [
    "RECORD_TARGETS",
    "RecordRepository",
    "RecordTarget",
]
