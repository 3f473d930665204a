"""
db/models/traffic_report.py

Daily traffic report rows imported from partner CSV exports.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UTCDateTime

TRAFFIC_REPORT_NATURAL_KEY: tuple[str, ...] = (
    "date",
    "foreign_brand_id",
    "foreign_partner_id",
    "foreign_campaign_id",
    "foreign_landing_id",
    "traffic_source",
)


class TrafficReport(Base, TimestampMixin):
    __tablename__ = "traffic_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    import_job_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("import_jobs.id", ondelete="SET NULL"),
        nullable=True,
        comment="Job that first inserted the row",
    )

    date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    foreign_brand_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    foreign_partner_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    foreign_campaign_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    foreign_landing_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    traffic_source: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    device_type: Mapped[str] = mapped_column(String(50), nullable=False, default="", server_default="")
    user_agent_family: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    os_family: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    country: Mapped[str] = mapped_column(String(64), nullable=False, default="", server_default="")

    all_clicks: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    unique_clicks: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    registrations_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    ftd_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    deposits_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    cr: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0, server_default="0")
    cftd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0, server_default="0")
    cd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0, server_default="0")
    rftd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0, server_default="0")

    __table_args__ = (
        UniqueConstraint(*TRAFFIC_REPORT_NATURAL_KEY, name="uq_traffic_reports_natural_key"),
        CheckConstraint(
            "all_clicks >= 0 AND unique_clicks >= 0 AND registrations_count >= 0 "
            "AND ftd_count >= 0 AND deposits_count >= 0",
            name="ck_traffic_reports_non_negative_counts",
        ),
        CheckConstraint(
            "cr >= 0 AND cftd >= 0 AND cd >= 0 AND rftd >= 0",
            name="ck_traffic_reports_non_negative_rates",
        ),
        Index("ix_traffic_reports_date", "date"),
        Index("ix_traffic_reports_date_partner", "date", "foreign_partner_id"),
        Index("ix_traffic_reports_date_campaign", "date", "foreign_campaign_id"),
        Index("ix_traffic_reports_source_device", "traffic_source", "device_type"),
        Index("ix_traffic_reports_country", "country"),
        Index("ix_traffic_reports_import_job_id", "import_job_id"),
    )
