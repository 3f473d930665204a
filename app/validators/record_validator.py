"""
app/validators/record_validator.py

Row-level validation of raw CSV cells before type coercion.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from app.domain.imports import FindingSeverity, ValidationFinding
from app.mappers.field_mapper import column_for, known_fields, map_header
from app.parsers.dates import is_parseable_datetime
from db.models.import_job import RecordType
from db.models.player_record import PlayerRecord
from db.models.traffic_report import TrafficReport

_IDENTIFIER_PATTERN = re.compile(r"^\d+$")
_COUNT_PATTERN = re.compile(r"^\d+(\.0+)?$")

ALLOWED_DEVICE_TYPES = frozenset({"phone", "desktop", "tablet"})


class RuleKind:
    IDENTIFIER = "identifier"
    COUNT = "count"
    AMOUNT = "amount"
    DATE = "date"
    FLAG = "flag"
    TEXT = "text"
    CHOICE = "choice"


def is_identifier(value: str) -> bool:
    return bool(_IDENTIFIER_PATTERN.match(value))


def is_count(value: str) -> bool:
    return bool(_COUNT_PATTERN.match(value))


def is_amount(value: str) -> bool:
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        return False
    return parsed.is_finite() and parsed >= 0


def is_flag(value: str) -> bool:
    return value in {"0", "1"}


def is_device_type(value: str) -> bool:
    return value.lower() in ALLOWED_DEVICE_TYPES


def _max_length(value: str, limit: int | None) -> bool:
    return limit is None or len(value) <= limit


@dataclass(frozen=True)
class FieldRule:
    predicate: Callable[[str], bool]
    kind: str
    severity: str = FindingSeverity.ERROR

    def message_for(self, header: str) -> str:
        if self.kind == RuleKind.DATE:
            return f"Invalid date format for {header}"
        if self.kind in {RuleKind.IDENTIFIER, RuleKind.COUNT, RuleKind.AMOUNT}:
            return f"Invalid numeric value for {header}"
        if self.kind == RuleKind.FLAG:
            return f"Invalid flag value for {header} (expected 0 or 1)"
        if self.kind == RuleKind.CHOICE:
            return f"Unrecognised device type for {header}"
        return f"Invalid value for {header}"


_MODELS = {
    RecordType.TRAFFIC_REPORT: TrafficReport,
    RecordType.PLAYERS_DATA: PlayerRecord,
}


def _text_rule(record_type: RecordType, field_name: str) -> FieldRule:
    column = _MODELS[record_type].__table__.c[column_for(field_name, record_type)]
    limit = getattr(column.type, "length", None)
    return FieldRule(lambda value: _max_length(value, limit), RuleKind.TEXT)


_IDENTIFIER_RULE = FieldRule(is_identifier, RuleKind.IDENTIFIER)
_COUNT_RULE = FieldRule(is_count, RuleKind.COUNT)
_AMOUNT_RULE = FieldRule(is_amount, RuleKind.AMOUNT)
_DATE_RULE = FieldRule(is_parseable_datetime, RuleKind.DATE)
_FLAG_RULE = FieldRule(is_flag, RuleKind.FLAG)


def _build_rules(
    record_type: RecordType,
    groups: Sequence[tuple[Sequence[str], FieldRule]],
    text_fields: Sequence[str],
) -> dict[str, list[FieldRule]]:
    rules: dict[str, list[FieldRule]] = {}
    for field_names, rule in groups:
        for field_name in field_names:
            rules.setdefault(field_name, []).append(rule)
    for field_name in text_fields:
        rules.setdefault(field_name, []).append(_text_rule(record_type, field_name))
    return rules


VALIDATION_RULES: dict[RecordType, dict[str, list[FieldRule]]] = {
    RecordType.TRAFFIC_REPORT: _build_rules(
        RecordType.TRAFFIC_REPORT,
        (
            (("date",), _DATE_RULE),
            (
                ("foreignBrandId", "foreignPartnerId", "foreignCampaignId", "foreignLandingId"),
                _IDENTIFIER_RULE,
            ),
            (
                ("allClicks", "uniqueClicks", "registrationsCount", "ftdCount", "depositsCount"),
                _COUNT_RULE,
            ),
            (("cr", "cftd", "cd", "rftd"), _AMOUNT_RULE),
            (
                ("deviceType",),
                FieldRule(is_device_type, RuleKind.CHOICE, severity=FindingSeverity.WARNING),
            ),
        ),
        ("trafficSource", "deviceType", "userAgentFamily", "osFamily", "country"),
    ),
    RecordType.PLAYERS_DATA: _build_rules(
        RecordType.PLAYERS_DATA,
        (
            (("playerId", "originalPlayerId", "partnerId", "campaignId", "promoId"), _IDENTIFIER_RULE),
            (("date", "signUpDate", "firstDepositDate"), _DATE_RULE),
            (("prequalified", "duplicate", "selfExcluded", "disabled"), _FLAG_RULE),
            (("ftdCount", "depositsCount", "cashoutsCount", "casinoBetsCount"), _COUNT_RULE),
            (
                (
                    "ftdSum",
                    "depositsSum",
                    "cashoutsSum",
                    "casinoRealNgr",
                    "fixedPerPlayer",
                    "casinoBetsSum",
                    "casinoWinsSum",
                ),
                _AMOUNT_RULE,
            ),
        ),
        (
            "companyName",
            "partnerTags",
            "campaignName",
            "promoCode",
            "playerCountry",
            "currency",
            "tagClickid",
            "tagOs",
            "tagSource",
            "tagSub2",
            "tagWebId",
        ),
    ),
}

# Fields that may be left empty; every other known field is required.
NULLABLE_FIELDS: dict[RecordType, frozenset[str]] = {
    RecordType.TRAFFIC_REPORT: frozenset({"trafficSource", "cr", "cftd", "cd", "rftd"}),
    RecordType.PLAYERS_DATA: frozenset(
        {
            "originalPlayerId",
            "partnerId",
            "campaignId",
            "promoId",
            "signUpDate",
            "firstDepositDate",
            "prequalified",
            "duplicate",
            "selfExcluded",
            "disabled",
            "ftdCount",
            "depositsCount",
            "cashoutsCount",
            "casinoBetsCount",
            "ftdSum",
            "depositsSum",
            "cashoutsSum",
            "casinoRealNgr",
            "fixedPerPlayer",
            "casinoBetsSum",
            "casinoWinsSum",
            "tagClickid",
            "tagOs",
            "tagSource",
            "tagSub2",
            "tagWebId",
        }
    ),
}


class RecordValidator:
    """
    Evaluates field rules against the raw cells of one row.
    """

    def __init__(
        self,
        rules: dict[RecordType, dict[str, list[FieldRule]]] | None = None,
    ) -> None:
        self._rules = rules or VALIDATION_RULES

    def validate_row(
        self,
        raw_row: Sequence[str],
        headers: Sequence[str],
        record_type: RecordType,
        row_number: int,
    ) -> list[ValidationFinding]:
        findings: list[ValidationFinding] = []
        record_rules = self._rules[record_type]
        nullable = NULLABLE_FIELDS[record_type]
        allowed = known_fields(record_type)

        for header, raw_value in zip(headers, raw_row):
            field_name = map_header(header, record_type)
            if field_name not in allowed:
                continue
            field_rules = record_rules.get(field_name, [])

            value = raw_value.strip()
            if not value:
                if field_name not in nullable:
                    findings.append(
                        ValidationFinding(
                            row_number=row_number,
                            column=header,
                            value=raw_value,
                            message=f"{header} is required",
                        )
                    )
                continue

            for rule in field_rules:
                if rule.predicate(value):
                    continue
                findings.append(
                    ValidationFinding(
                        row_number=row_number,
                        column=header,
                        value=raw_value,
                        message=rule.message_for(header),
                        severity=rule.severity,
                    )
                )
                # Stop at the first error for a cell.
                if rule.severity == FindingSeverity.ERROR:
                    break

        return findings


_DEFAULT_VALIDATOR = RecordValidator()


def validate_row(
    raw_row: Sequence[str],
    headers: Sequence[str],
    record_type: RecordType,
    row_number: int,
) -> list[ValidationFinding]:
    return _DEFAULT_VALIDATOR.validate_row(raw_row, headers, record_type, row_number)
