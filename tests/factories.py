"""
Shared engine and CSV builders for import pipeline tests.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 registers all ORM models on Base.metadata
from db.base import Base
from db.session import create_db_engine


def make_engine() -> Engine:
    """
    In-memory SQLite shared by every session of one test.
    """

    engine = create_db_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    return engine


TRAFFIC_HEADERS = [
    "date",
    "Foreign Brand ID",
    "Foreign Partner ID",
    "Foreign Campaign ID",
    "Foreign Landing ID",
    "Traffic Source",
    "Device Type",
    "User Agent Family",
    "OS Family",
    "Country",
    "All Clicks",
    "Unique Clicks",
    "Registrations Count",
    "FTD Count",
    "Deposits Count",
    "CR",
    "CFTD",
    "CD",
    "RFTD",
]

PLAYER_HEADERS = [
    "Player ID",
    "Original player ID",
    "Sign up date",
    "First deposit date",
    "Partner ID",
    "Company name",
    "Partner tags",
    "Campaign ID",
    "Campaign name",
    "Promo ID",
    "Promo code",
    "Player country",
    "Tag: clickid",
    "Tag: os",
    "Tag: source",
    "Tag: sub2",
    "Tag: webID",
    "Date",
    "Prequalified",
    "Duplicate",
    "Self-excluded",
    "Disabled",
    "Currency",
    "FTD count",
    "FTD sum",
    "Deposits count",
    "Deposits sum",
    "Cashouts count",
    "Cashouts sum",
    "Casino bets count",
    "Casino Real NGR",
    "Fixed per player",
    "Casino bets sum",
    "Casino wins sum",
    "Notes",
]


def traffic_row(
    *,
    date: str = "2024-01-15",
    brand: str = "1",
    partner: str = "10",
    campaign: str = "100",
    landing: str = "1000",
    source: str = "seo",
    device: str = "Phone",
    clicks: str = "25",
) -> list[str]:
    return [
        date,
        brand,
        partner,
        campaign,
        landing,
        source,
        device,
        "Chrome",
        "Android",
        "DE",
        clicks,
        "20",
        "3",
        "1",
        "2",
        "12.5",
        "4.0",
        "8.00",
        "1.25",
    ]


def player_row(
    *,
    player_id: str = "5001",
    date: str = "2024-02-01",
    prequalified: str = "0",
    deposits_sum: str = "150.50",
) -> list[str]:
    return [
        player_id,
        "9001",
        "2024-01-20",
        "2024-01-21",
        "77",
        "Acme Media",
        "vip",
        "300",
        "Winter promo",
        "",
        "WINTER24",
        "DE",
        "abc123",
        "android",
        "facebook",
        "",
        "web-1",
        date,
        prequalified,
        "0",
        "0",
        "0",
        "EUR",
        "1",
        "50.00",
        "3",
        deposits_sum,
        "1",
        "20.00",
        "40",
        "35.10",
        "0",
        "400.00",
        "364.90",
        "free text",
    ]


def build_csv(headers: list[str], rows: list[list[str]]) -> bytes:
    lines = [",".join(headers)] + [",".join(row) for row in rows]
    return ("\n".join(lines) + "\n").encode("utf-8")
