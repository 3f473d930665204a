"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.import_job import ImportJob, ImportJobStatus, RecordType
from db.models.player_record import PLAYER_RECORD_NATURAL_KEY, PlayerRecord
from db.models.traffic_report import TRAFFIC_REPORT_NATURAL_KEY, TrafficReport

__all__ = [
    "ImportJob",
    "ImportJobStatus",
    "RecordType",
    "PlayerRecord",
    "TrafficReport",
    "PLAYER_RECORD_NATURAL_KEY",
    "TRAFFIC_REPORT_NATURAL_KEY",
]
