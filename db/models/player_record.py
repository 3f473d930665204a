"""
db/models/player_record.py

Per-player activity rows imported from affiliate platform CSV exports.
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

PLAYER_RECORD_NATURAL_KEY: tuple[str, ...] = ("player_id", "date")


class PlayerRecord(Base, TimestampMixin):
    __tablename__ = "player_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    import_job_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("import_jobs.id", ondelete="SET NULL"),
        nullable=True,
        comment="Job that first inserted the row",
    )

    player_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    original_player_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    partner_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    campaign_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    promo_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    sign_up_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    first_deposit_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    company_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    partner_tags: Mapped[str] = mapped_column(String(500), nullable=False, default="", server_default="")
    campaign_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    promo_code: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    player_country: Mapped[str] = mapped_column(String(64), nullable=False, default="", server_default="")
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="", server_default="")

    tag_clickid: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tag_os: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tag_source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tag_sub2: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tag_web_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    prequalified: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    duplicate: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    self_excluded: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    disabled: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)

    ftd_count: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    deposits_count: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    cashouts_count: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    casino_bets_count: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)

    ftd_sum: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True, default=0)
    deposits_sum: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True, default=0)
    cashouts_sum: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True, default=0)
    casino_real_ngr: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True, default=0)
    fixed_per_player: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True, default=0)
    casino_bets_sum: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True, default=0)
    casino_wins_sum: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True, default=0)

    __table_args__ = (
        UniqueConstraint(*PLAYER_RECORD_NATURAL_KEY, name="uq_player_records_natural_key"),
        CheckConstraint(
            "ftd_sum >= 0 AND deposits_sum >= 0 AND cashouts_sum >= 0 AND casino_real_ngr >= 0 "
            "AND fixed_per_player >= 0 AND casino_bets_sum >= 0 AND casino_wins_sum >= 0",
            name="ck_player_records_non_negative_amounts",
        ),
        CheckConstraint(
            "ftd_count >= 0 AND deposits_count >= 0 AND cashouts_count >= 0 AND casino_bets_count >= 0",
            name="ck_player_records_non_negative_counts",
        ),
        CheckConstraint(
            "prequalified IN (0, 1) AND duplicate IN (0, 1) AND self_excluded IN (0, 1) AND disabled IN (0, 1)",
            name="ck_player_records_boolean_flags",
        ),
        Index("ix_player_records_date", "date"),
        Index("ix_player_records_player_id", "player_id"),
        Index("ix_player_records_partner_campaign", "partner_id", "campaign_id"),
        Index("ix_player_records_date_partner", "date", "partner_id"),
        Index("ix_player_records_country", "player_country"),
        Index("ix_player_records_import_job_id", "import_job_id"),
    )
