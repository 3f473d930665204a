"""
app/services/record_type_detector.py

Record-type detection from a CSV header line.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from db.models.import_job import RecordType


@dataclass(frozen=True)
class RecordTypeSchema:
    record_type: RecordType
    required_columns: tuple[tuple[str, ...], ...]
    expected_column_count: int


RECORD_TYPE_SCHEMAS: tuple[RecordTypeSchema, ...] = (
    RecordTypeSchema(
        record_type=RecordType.TRAFFIC_REPORT,
        required_columns=(
            ("date",),
            ("foreignBrandId", "foreign_brand_id", "Foreign Brand ID"),
            ("foreignPartnerId", "foreign_partner_id", "Foreign Partner ID"),
            ("foreignCampaignId", "foreign_campaign_id", "Foreign Campaign ID"),
            ("allClicks", "all_clicks", "All Clicks"),
            ("uniqueClicks", "unique_clicks", "Unique Clicks"),
        ),
        expected_column_count=19,
    ),
    RecordTypeSchema(
        record_type=RecordType.PLAYERS_DATA,
        required_columns=(
            ("playerId", "player_id", "Player ID"),
            ("originalPlayerId", "original_player_id", "Original player ID"),
            ("partnerId", "partner_id", "Partner ID"),
            ("ftdSum", "ftd_sum", "FTD sum"),
            ("depositsSum", "deposits_sum", "Deposits sum"),
        ),
        expected_column_count=35,
    ),
)


@dataclass(frozen=True)
class DetectionResult:
    record_type: RecordType | None
    column_count: int
    errors: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def _missing_columns(schema: RecordTypeSchema, headers: Sequence[str]) -> list[str]:
    normalized = {header.strip().lower() for header in headers}
    return [
        variations[0]
        for variations in schema.required_columns
        if not any(variation.lower() in normalized for variation in variations)
    ]


def detect_record_type(headers: Sequence[str]) -> DetectionResult:
    """
    Identify which record family a header line belongs to.

    A type matches when every one of its required columns is present under
    any accepted spelling. A column count that differs from the expected
    width is reported as a note and does not block detection.
    """

    column_count = len(headers)
    missing_by_type = {
        schema.record_type: _missing_columns(schema, headers) for schema in RECORD_TYPE_SCHEMAS
    }

    candidates = [schema for schema in RECORD_TYPE_SCHEMAS if not missing_by_type[schema.record_type]]
    if candidates:
        exact = [schema for schema in candidates if schema.expected_column_count == column_count]
        chosen = (exact or candidates)[0]
        notes: list[str] = []
        if chosen.expected_column_count != column_count:
            notes.append(
                f"Column count {column_count} differs from the expected "
                f"{chosen.expected_column_count} for {chosen.record_type.value}"
            )
        return DetectionResult(record_type=chosen.record_type, column_count=column_count, notes=notes)

    errors: list[str] = []
    for schema in RECORD_TYPE_SCHEMAS:
        if schema.expected_column_count == column_count:
            missing = missing_by_type[schema.record_type]
            errors.append(
                f"Matches {schema.record_type.value} column count ({column_count}) "
                f"but missing: {', '.join(missing)}"
            )

    traffic_missing = missing_by_type[RecordType.TRAFFIC_REPORT]
    players_missing = missing_by_type[RecordType.PLAYERS_DATA]
    if len(traffic_missing) < len(players_missing):
        errors.append(
            f"Closest match: {RecordType.TRAFFIC_REPORT.value} "
            f"(missing {len(traffic_missing)} columns: {', '.join(traffic_missing)})"
        )
    elif len(players_missing) < len(traffic_missing):
        errors.append(
            f"Closest match: {RecordType.PLAYERS_DATA.value} "
            f"(missing {len(players_missing)} columns: {', '.join(players_missing)})"
        )
    else:
        errors.append(
            "CSV doesn't clearly match any format. "
            f"Missing for {RecordType.TRAFFIC_REPORT.value}: {', '.join(traffic_missing)} | "
            f"Missing for {RecordType.PLAYERS_DATA.value}: {', '.join(players_missing)}"
        )

    expected_counts = {schema.expected_column_count for schema in RECORD_TYPE_SCHEMAS}
    if column_count not in expected_counts:
        errors.append(
            f"Unexpected column count: {column_count}. "
            "Expected 19 (traffic_report) or 35 (players_data)"
        )

    return DetectionResult(record_type=None, column_count=column_count, errors=errors)
