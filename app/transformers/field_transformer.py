"""
app/transformers/field_transformer.py

Type coercion of raw CSV cells into canonical field values.

Each record type owns a registry of small transform functions keyed by
canonical field name. A row is transformed cell by cell; a cell whose
transform raises is left out of the payload so storage defaults apply.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from app.mappers.field_mapper import known_fields, map_header
from app.parsers.dates import parse_datetime
from db.models.import_job import RecordType

logger = logging.getLogger(__name__)


def to_integer(value: str) -> int:
    """
    Truncate toward zero, so ``"12.0"`` and ``"12.9"`` both become 12.
    """

    return int(Decimal(value))


def to_decimal(value: str) -> Decimal:
    return Decimal(value)


def to_datetime(value: str) -> datetime:
    return parse_datetime(value)


def to_string(value: str) -> str:
    return value


@dataclass(frozen=True)
class FieldTransform:
    func: Callable[[str], Any]
    allow_null: bool = False
    empty_value: Any = None

    def apply(self, value: str) -> Any:
        if value == "":
            return None if self.allow_null else self.empty_value
        return self.func(value)


def _registry(
    groups: Sequence[tuple[Sequence[str], FieldTransform]],
) -> dict[str, FieldTransform]:
    registry: dict[str, FieldTransform] = {}
    for field_names, transform in groups:
        for field_name in field_names:
            registry[field_name] = transform
    return registry


_REQUIRED_INTEGER = FieldTransform(to_integer)
_REQUIRED_DATE = FieldTransform(to_datetime)
_NULLABLE_INTEGER = FieldTransform(to_integer, allow_null=True)
_NULLABLE_DECIMAL = FieldTransform(to_decimal, allow_null=True)
_NULLABLE_DATE = FieldTransform(to_datetime, allow_null=True)
_NULLABLE_STRING = FieldTransform(to_string, allow_null=True)
_DEFAULTED_DECIMAL = FieldTransform(to_decimal, empty_value=Decimal("0"))
_DEFAULTED_STRING = FieldTransform(to_string, empty_value="")
_REQUIRED_STRING = FieldTransform(to_string)

FIELD_TRANSFORMERS: dict[RecordType, dict[str, FieldTransform]] = {
    RecordType.TRAFFIC_REPORT: _registry(
        (
            (("date",), _REQUIRED_DATE),
            (
                ("foreignBrandId", "foreignPartnerId", "foreignCampaignId", "foreignLandingId"),
                _REQUIRED_INTEGER,
            ),
            (("trafficSource",), _DEFAULTED_STRING),
            (("deviceType", "userAgentFamily", "osFamily", "country"), _REQUIRED_STRING),
            (
                ("allClicks", "uniqueClicks", "registrationsCount", "ftdCount", "depositsCount"),
                _REQUIRED_INTEGER,
            ),
            (("cr", "cftd", "cd", "rftd"), _DEFAULTED_DECIMAL),
        )
    ),
    RecordType.PLAYERS_DATA: _registry(
        (
            (("playerId",), _REQUIRED_INTEGER),
            (("date",), _REQUIRED_DATE),
            (("originalPlayerId", "partnerId", "campaignId", "promoId"), _NULLABLE_INTEGER),
            (("signUpDate", "firstDepositDate"), _NULLABLE_DATE),
            (
                ("companyName", "partnerTags", "campaignName", "promoCode", "playerCountry", "currency"),
                _REQUIRED_STRING,
            ),
            (("tagClickid", "tagOs", "tagSource", "tagSub2", "tagWebId"), _NULLABLE_STRING),
            (("prequalified", "duplicate", "selfExcluded", "disabled"), _NULLABLE_INTEGER),
            (("ftdCount", "depositsCount", "cashoutsCount", "casinoBetsCount"), _NULLABLE_INTEGER),
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
                _NULLABLE_DECIMAL,
            ),
        )
    ),
}


class FieldTransformer:
    """
    Converts raw rows into canonical payloads keyed by canonical field name.
    """

    def __init__(
        self,
        registry: dict[RecordType, dict[str, FieldTransform]] | None = None,
    ) -> None:
        self._registry = registry or FIELD_TRANSFORMERS

    def transform_row(
        self,
        raw_row: Sequence[str],
        headers: Sequence[str],
        record_type: RecordType,
    ) -> dict[str, Any]:
        transforms = self._registry[record_type]
        allowed = known_fields(record_type)
        payload: dict[str, Any] = {}

        for header, raw_value in zip(headers, raw_row):
            field_name = map_header(header, record_type)
            if field_name not in allowed:
                continue

            value = raw_value.strip()
            transform = transforms.get(field_name)
            if transform is None:
                if value:
                    payload[field_name] = value
                continue

            try:
                payload[field_name] = transform.apply(value)
            except (ArithmeticError, ValueError, TypeError) as exc:
                logger.debug("Dropping untransformable cell %s=%r: %s", header, raw_value, exc)

        return payload


_DEFAULT_TRANSFORMER = FieldTransformer()


def transform_row(
    raw_row: Sequence[str],
    headers: Sequence[str],
    record_type: RecordType,
) -> dict[str, Any]:
    return _DEFAULT_TRANSFORMER.transform_row(raw_row, headers, record_type)
