"""
app/mappers/field_mapper.py

Header-to-canonical-field mapping for the two importable record families.

Each record type declares its canonical fields once, together with the
table column that stores them and the header spellings seen in partner
exports. The lookup tables below are derived from those declarations.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from db.models.import_job import RecordType

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class CanonicalField:
    """
    One canonical field: internal name, storage column, accepted headers.
    """

    name: str
    column: str
    headers: tuple[str, ...] = ()


TRAFFIC_REPORT_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField("date", "date", ("date", "Date")),
    CanonicalField("foreignBrandId", "foreign_brand_id", ("Foreign Brand ID",)),
    CanonicalField("foreignPartnerId", "foreign_partner_id", ("Foreign Partner ID",)),
    CanonicalField("foreignCampaignId", "foreign_campaign_id", ("Foreign Campaign ID",)),
    CanonicalField("foreignLandingId", "foreign_landing_id", ("Foreign Landing ID",)),
    CanonicalField("trafficSource", "traffic_source", ("Traffic Source",)),
    CanonicalField("deviceType", "device_type", ("Device Type",)),
    CanonicalField("userAgentFamily", "user_agent_family", ("User Agent Family",)),
    CanonicalField("osFamily", "os_family", ("OS Family",)),
    CanonicalField("country", "country", ("Country",)),
    CanonicalField("allClicks", "all_clicks", ("All Clicks",)),
    CanonicalField("uniqueClicks", "unique_clicks", ("Unique Clicks",)),
    CanonicalField("registrationsCount", "registrations_count", ("Registrations Count",)),
    CanonicalField("ftdCount", "ftd_count", ("FTD Count",)),
    CanonicalField("depositsCount", "deposits_count", ("Deposits Count",)),
    CanonicalField("cr", "cr", ("CR",)),
    CanonicalField("cftd", "cftd", ("CFTD",)),
    CanonicalField("cd", "cd", ("CD",)),
    CanonicalField("rftd", "rftd", ("RFTD",)),
)

PLAYERS_DATA_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField("playerId", "player_id", ("Player ID",)),
    CanonicalField("originalPlayerId", "original_player_id", ("Original player ID",)),
    CanonicalField("signUpDate", "sign_up_date", ("Sign up date",)),
    CanonicalField("firstDepositDate", "first_deposit_date", ("First deposit date",)),
    CanonicalField("partnerId", "partner_id", ("Partner ID",)),
    CanonicalField("companyName", "company_name", ("Company Name", "Company name")),
    CanonicalField("partnerTags", "partner_tags", ("Partner tags",)),
    CanonicalField("campaignId", "campaign_id", ("Campaign ID",)),
    CanonicalField("campaignName", "campaign_name", ("Campaign name",)),
    CanonicalField("promoId", "promo_id", ("Promo ID",)),
    CanonicalField("promoCode", "promo_code", ("Promo code",)),
    CanonicalField("playerCountry", "player_country", ("Player country",)),
    CanonicalField("tagClickid", "tag_clickid", ("Tag: clickid",)),
    CanonicalField("tagOs", "tag_os", ("Tag: os",)),
    CanonicalField("tagSource", "tag_source", ("Tag: source",)),
    CanonicalField("tagSub2", "tag_sub2", ("Tag: sub2",)),
    CanonicalField("tagWebId", "tag_web_id", ("Tag: webID",)),
    CanonicalField("date", "date", ("Date", "date")),
    CanonicalField("prequalified", "prequalified", ("Prequalified",)),
    CanonicalField("duplicate", "duplicate", ("Duplicate",)),
    CanonicalField("selfExcluded", "self_excluded", ("Self-excluded",)),
    CanonicalField("disabled", "disabled", ("Disabled",)),
    CanonicalField("currency", "currency", ("Currency",)),
    CanonicalField("ftdCount", "ftd_count", ("FTD count",)),
    CanonicalField("ftdSum", "ftd_sum", ("FTD sum",)),
    CanonicalField("depositsCount", "deposits_count", ("Deposits count",)),
    CanonicalField("depositsSum", "deposits_sum", ("Deposits sum",)),
    CanonicalField("cashoutsCount", "cashouts_count", ("Cashouts count",)),
    CanonicalField("cashoutsSum", "cashouts_sum", ("Cashouts sum",)),
    CanonicalField("casinoBetsCount", "casino_bets_count", ("Casino bets count",)),
    CanonicalField("casinoRealNgr", "casino_real_ngr", ("Casino Real NGR",)),
    CanonicalField("fixedPerPlayer", "fixed_per_player", ("Fixed per player",)),
    CanonicalField("casinoBetsSum", "casino_bets_sum", ("Casino bets sum",)),
    CanonicalField("casinoWinsSum", "casino_wins_sum", ("Casino wins sum",)),
)

CANONICAL_FIELDS: dict[RecordType, tuple[CanonicalField, ...]] = {
    RecordType.TRAFFIC_REPORT: TRAFFIC_REPORT_FIELDS,
    RecordType.PLAYERS_DATA: PLAYERS_DATA_FIELDS,
}

# Fields that form the storage natural key; a file must carry a header for each.
REQUIRED_FIELDS: dict[RecordType, tuple[str, ...]] = {
    RecordType.TRAFFIC_REPORT: (
        "date",
        "foreignBrandId",
        "foreignPartnerId",
        "foreignCampaignId",
        "foreignLandingId",
    ),
    RecordType.PLAYERS_DATA: ("playerId", "date"),
}


def _build_header_mapping(fields: Iterable[CanonicalField]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for canonical in fields:
        for spelling in (*canonical.headers, canonical.column, canonical.name):
            mapping.setdefault(spelling, canonical.name)
    return mapping


FIELD_MAPPINGS: dict[RecordType, dict[str, str]] = {
    record_type: _build_header_mapping(fields) for record_type, fields in CANONICAL_FIELDS.items()
}

FIELD_COLUMNS: dict[RecordType, dict[str, str]] = {
    record_type: {canonical.name: canonical.column for canonical in fields}
    for record_type, fields in CANONICAL_FIELDS.items()
}

_CASE_INSENSITIVE_MAPPINGS: dict[RecordType, dict[str, str]] = {}
for _record_type, _mapping in FIELD_MAPPINGS.items():
    _lowered: dict[str, str] = {}
    for _spelling, _canonical in _mapping.items():
        _lowered.setdefault(_spelling.lower(), _canonical)
    _CASE_INSENSITIVE_MAPPINGS[_record_type] = _lowered


def camel_case_header(header: str) -> str:
    """
    Synthesize a camelCase field name from an arbitrary header.

    Punctuation separates words the same way whitespace does.

    >>> camel_case_header("TRAFFIC SOURCE!")
    'trafficSource'
    >>> camel_case_header("Traffic-Source")
    'trafficSource'
    """

    tokens = _NON_ALPHANUMERIC.sub(" ", header.lower()).split()
    if not tokens:
        return ""
    return tokens[0] + "".join(token[:1].upper() + token[1:] for token in tokens[1:])


def map_header(header: str, record_type: RecordType) -> str:
    """
    Resolve a CSV header to its canonical field name.

    Exact spelling wins, then a case-insensitive match, then the camelCase
    fallback. Never raises; callers drop names outside ``known_fields``.
    """

    mappings = FIELD_MAPPINGS[record_type]
    exact = mappings.get(header)
    if exact is not None:
        return exact

    case_insensitive = _CASE_INSENSITIVE_MAPPINGS[record_type].get(header.lower())
    if case_insensitive is not None:
        return case_insensitive

    return camel_case_header(header)


def known_fields(record_type: RecordType) -> frozenset[str]:
    return frozenset(FIELD_COLUMNS[record_type])


def column_for(field_name: str, record_type: RecordType) -> str:
    return FIELD_COLUMNS[record_type][field_name]


def missing_required_fields(headers: Sequence[str], record_type: RecordType) -> list[str]:
    """
    Return required canonical fields that no header maps to, in declaration order.
    """

    mapped = {map_header(header, record_type) for header in headers}
    return [field_name for field_name in REQUIRED_FIELDS[record_type] if field_name not in mapped]
