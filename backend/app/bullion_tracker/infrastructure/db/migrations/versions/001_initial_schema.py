"""Initial schema creation for Bullion Tracker.

Revision ID: 001_initial
Revises: None
Create Date: 2026-02-03

Creates the core tables:
- price_history: Append-only live spot prices
- calibration_ratios: Daily proxy instrument ratios
- price_alerts: User threshold alerts
- push_tokens: Registered push destinations
- notification_log: Delivery audit trail
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

METAL_ENUM = sa.Enum("GOLD", "SILVER", "PLATINUM", "PALLADIUM", name="metal")
DIRECTION_ENUM = sa.Enum("ABOVE", "BELOW", name="alertdirection")
INSTRUMENT_ENUM = sa.Enum("SLV", "GLD", "PPLT", "PALL", name="proxyinstrument")


def upgrade() -> None:
    """Create initial database schema."""
    # Create price_history table
    op.create_table(
        "price_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("metal", METAL_ENUM, nullable=False),
        sa.Column("price", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False, server_default="unknown"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_price_history_metal_timestamp",
        "price_history",
        ["metal", "timestamp"],
    )

    # Create calibration_ratios table
    op.create_table(
        "calibration_ratios",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("instrument", INSTRUMENT_ENUM, nullable=False),
        sa.Column("metal", METAL_ENUM, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("ratio", sa.Numeric(precision=16, scale=8), nullable=False),
        sa.Column("proxy_price", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column("spot_price_used", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("instrument", "date", name="uq_calibration_ratios_instrument_date"),
    )

    # Create price_alerts table
    op.create_table(
        "price_alerts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_ref", sa.String(length=255), nullable=False),
        sa.Column("metal", METAL_ENUM, nullable=False),
        sa.Column("target_price", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column("direction", DIRECTION_ENUM, nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("triggered", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("triggered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("triggered_price", sa.Numeric(precision=14, scale=4), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("target_price > 0", name="ck_price_alerts_target_positive"),
    )
    op.create_index("ix_price_alerts_owner_ref", "price_alerts", ["owner_ref"])
    op.create_index(
        "ix_price_alerts_enabled_triggered",
        "price_alerts",
        ["enabled", "triggered"],
    )

    # Create push_tokens table
    op.create_table(
        "push_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_ref", sa.String(length=255), nullable=False),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("platform", sa.String(length=20), nullable=True),
        sa.Column("app_version", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_active", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index("ix_push_tokens_owner_ref", "push_tokens", ["owner_ref"])
    op.create_index("ix_push_tokens_last_active", "push_tokens", ["last_active"])

    # Create notification_log table
    op.create_table(
        "notification_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("alert_id", sa.Integer(), nullable=False),
        sa.Column("push_token", sa.String(length=255), nullable=True),
        sa.Column("metal", METAL_ENUM, nullable=False),
        sa.Column("target_price", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column("actual_price", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column("direction", DIRECTION_ENUM, nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("error_message", sa.String(length=500), nullable=True),
        sa.Column("receipt_id", sa.String(length=100), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["alert_id"], ["price_alerts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_log_alert_id", "notification_log", ["alert_id"])
    op.create_index("ix_notification_log_sent_at", "notification_log", ["sent_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_notification_log_sent_at", table_name="notification_log")
    op.drop_index("ix_notification_log_alert_id", table_name="notification_log")
    op.drop_table("notification_log")

    op.drop_index("ix_push_tokens_last_active", table_name="push_tokens")
    op.drop_index("ix_push_tokens_owner_ref", table_name="push_tokens")
    op.drop_table("push_tokens")

    op.drop_index("ix_price_alerts_enabled_triggered", table_name="price_alerts")
    op.drop_index("ix_price_alerts_owner_ref", table_name="price_alerts")
    op.drop_table("price_alerts")

    op.drop_table("calibration_ratios")

    op.drop_index("ix_price_history_metal_timestamp", table_name="price_history")
    op.drop_table("price_history")

    # Drop enum types
    DIRECTION_ENUM.drop(op.get_bind(), checkfirst=True)
    INSTRUMENT_ENUM.drop(op.get_bind(), checkfirst=True)
    METAL_ENUM.drop(op.get_bind(), checkfirst=True)
