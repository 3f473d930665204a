"""create import_jobs, traffic_reports and player_records tables

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _import_job_fk() -> sa.Column:
    return sa.Column(
        "import_job_id",
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("import_jobs.id", ondelete="SET NULL"),
        nullable=True,
    )


def _text(name: str, length: int) -> sa.Column:
    return sa.Column(name, sa.String(length=length), server_default="", nullable=False)


def upgrade() -> None:
    op.create_table(
        "import_jobs",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("record_type", sa.String(length=32), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("total_rows", sa.Integer(), nullable=True),
        sa.Column("processed_rows", sa.Integer(), server_default="0", nullable=False),
        sa.Column("error_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("error_severity_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "errors",
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql"),
            nullable=True,
        ),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("storage_path", sa.String(length=512), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("processed_rows >= 0", name="ck_import_jobs_processed_rows_non_negative"),
        sa.CheckConstraint(
            "total_rows IS NULL OR processed_rows <= total_rows",
            name="ck_import_jobs_processed_within_total",
        ),
    )
    op.create_index("ix_import_jobs_status", "import_jobs", ["status"], unique=False)
    op.create_index("ix_import_jobs_record_type", "import_jobs", ["record_type"], unique=False)
    op.create_index("ix_import_jobs_created_at", "import_jobs", ["created_at"], unique=False)
    op.create_index(
        "ix_import_jobs_record_type_status",
        "import_jobs",
        ["record_type", "status"],
        unique=False,
    )

    op.create_table(
        "traffic_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _import_job_fk(),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("foreign_brand_id", sa.BigInteger(), nullable=False),
        sa.Column("foreign_partner_id", sa.BigInteger(), nullable=False),
        sa.Column("foreign_campaign_id", sa.BigInteger(), nullable=False),
        sa.Column("foreign_landing_id", sa.BigInteger(), nullable=False),
        _text("traffic_source", 100),
        _text("device_type", 50),
        _text("user_agent_family", 255),
        _text("os_family", 100),
        _text("country", 64),
        *[
            sa.Column(name, sa.Integer(), server_default="0", nullable=False)
            for name in ("all_clicks", "unique_clicks", "registrations_count", "ftd_count", "deposits_count")
        ],
        *[
            sa.Column(name, sa.Numeric(10, 2), server_default="0", nullable=False)
            for name in ("cr", "cftd", "cd", "rftd")
        ],
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "date",
            "foreign_brand_id",
            "foreign_partner_id",
            "foreign_campaign_id",
            "foreign_landing_id",
            "traffic_source",
            name="uq_traffic_reports_natural_key",
        ),
        sa.CheckConstraint(
            "all_clicks >= 0 AND unique_clicks >= 0 AND registrations_count >= 0 "
            "AND ftd_count >= 0 AND deposits_count >= 0",
            name="ck_traffic_reports_non_negative_counts",
        ),
        sa.CheckConstraint(
            "cr >= 0 AND cftd >= 0 AND cd >= 0 AND rftd >= 0",
            name="ck_traffic_reports_non_negative_rates",
        ),
    )
    op.create_index("ix_traffic_reports_date", "traffic_reports", ["date"], unique=False)
    op.create_index("ix_traffic_reports_date_partner", "traffic_reports", ["date", "foreign_partner_id"], unique=False)
    op.create_index(
        "ix_traffic_reports_date_campaign",
        "traffic_reports",
        ["date", "foreign_campaign_id"],
        unique=False,
    )
    op.create_index(
        "ix_traffic_reports_source_device",
        "traffic_reports",
        ["traffic_source", "device_type"],
        unique=False,
    )
    op.create_index("ix_traffic_reports_country", "traffic_reports", ["country"], unique=False)
    op.create_index("ix_traffic_reports_import_job_id", "traffic_reports", ["import_job_id"], unique=False)

    op.create_table(
        "player_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _import_job_fk(),
        sa.Column("player_id", sa.BigInteger(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("original_player_id", sa.BigInteger(), nullable=True),
        sa.Column("partner_id", sa.BigInteger(), nullable=True),
        sa.Column("campaign_id", sa.BigInteger(), nullable=True),
        sa.Column("promo_id", sa.BigInteger(), nullable=True),
        sa.Column("sign_up_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("first_deposit_date", sa.DateTime(timezone=True), nullable=True),
        _text("company_name", 255),
        _text("partner_tags", 500),
        _text("campaign_name", 255),
        _text("promo_code", 100),
        _text("player_country", 64),
        _text("currency", 10),
        sa.Column("tag_clickid", sa.String(length=255), nullable=True),
        sa.Column("tag_os", sa.String(length=100), nullable=True),
        sa.Column("tag_source", sa.String(length=100), nullable=True),
        sa.Column("tag_sub2", sa.String(length=100), nullable=True),
        sa.Column("tag_web_id", sa.String(length=100), nullable=True),
        *[
            sa.Column(name, sa.Integer(), nullable=True)
            for name in (
                "prequalified",
                "duplicate",
                "self_excluded",
                "disabled",
                "ftd_count",
                "deposits_count",
                "cashouts_count",
                "casino_bets_count",
            )
        ],
        *[
            sa.Column(name, sa.Numeric(15, 2), nullable=True)
            for name in (
                "ftd_sum",
                "deposits_sum",
                "cashouts_sum",
                "casino_real_ngr",
                "fixed_per_player",
                "casino_bets_sum",
                "casino_wins_sum",
            )
        ],
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "date", name="uq_player_records_natural_key"),
        sa.CheckConstraint(
            "ftd_sum >= 0 AND deposits_sum >= 0 AND cashouts_sum >= 0 AND casino_real_ngr >= 0 "
            "AND fixed_per_player >= 0 AND casino_bets_sum >= 0 AND casino_wins_sum >= 0",
            name="ck_player_records_non_negative_amounts",
        ),
        sa.CheckConstraint(
            "ftd_count >= 0 AND deposits_count >= 0 AND cashouts_count >= 0 AND casino_bets_count >= 0",
            name="ck_player_records_non_negative_counts",
        ),
        sa.CheckConstraint(
            "prequalified IN (0, 1) AND duplicate IN (0, 1) AND self_excluded IN (0, 1) AND disabled IN (0, 1)",
            name="ck_player_records_boolean_flags",
        ),
    )
    op.create_index("ix_player_records_date", "player_records", ["date"], unique=False)
    op.create_index("ix_player_records_player_id", "player_records", ["player_id"], unique=False)
    op.create_index(
        "ix_player_records_partner_campaign",
        "player_records",
        ["partner_id", "campaign_id"],
        unique=False,
    )
    op.create_index("ix_player_records_date_partner", "player_records", ["date", "partner_id"], unique=False)
    op.create_index("ix_player_records_country", "player_records", ["player_country"], unique=False)
    op.create_index("ix_player_records_import_job_id", "player_records", ["import_job_id"], unique=False)


def downgrade() -> None:
    op.drop_table("player_records")
    op.drop_table("traffic_reports")
    op.drop_index("ix_import_jobs_record_type_status", table_name="import_jobs")
    op.drop_index("ix_import_jobs_created_at", table_name="import_jobs")
    op.drop_index("ix_import_jobs_record_type", table_name="import_jobs")
    op.drop_index("ix_import_jobs_status", table_name="import_jobs")
    op.drop_table("import_jobs")
