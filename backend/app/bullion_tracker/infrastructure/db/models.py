"""SQLAlchemy ORM models mapping to domain entities.

These models represent the database schema and handle persistence concerns.
They should be converted to/from domain entities via repository mappers.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import DeclarativeBase, relationship


# Import domain enums for SQLAlchemy Enum columns
from app.bullion_tracker.domain.entities.alert import AlertDirection
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class PriceHistoryModel(Base):
    """ORM model for the append-only price_history table."""

    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    metal = Column(SQLEnum(Metal), nullable=False)
    price = Column(Numeric(14, 4), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    source = Column(String(50), nullable=False, default="unknown")

    # Closest-match lookups scan one metal backwards in time
    __table_args__ = (
        Index("ix_price_history_metal_timestamp", "metal", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<PriceHistoryModel(id={self.id}, metal='{self.metal}', price={self.price})>"


class CalibrationRatioModel(Base):
    """ORM model for calibration_ratios table."""

    __tablename__ = "calibration_ratios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    instrument = Column(SQLEnum(ProxyInstrument), nullable=False)
    metal = Column(SQLEnum(Metal), nullable=False)
    date = Column(Date, nullable=False)
    ratio = Column(Numeric(16, 8), nullable=False)
    proxy_price = Column(Numeric(14, 4), nullable=False)
    spot_price_used = Column(Numeric(14, 4), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("instrument", "date", name="uq_calibration_ratios_instrument_date"),
    )

    def __repr__(self) -> str:
        return f"<CalibrationRatioModel(instrument='{self.instrument}', date={self.date})>"


class PriceAlertModel(Base):
    """ORM model for price_alerts table."""

    __tablename__ = "price_alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_ref = Column(String(255), nullable=False, index=True)
    metal = Column(SQLEnum(Metal), nullable=False)
    target_price = Column(Numeric(14, 4), nullable=False)
    direction = Column(SQLEnum(AlertDirection), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    triggered = Column(Boolean, nullable=False, default=False)
    triggered_at = Column(DateTime(timezone=True), nullable=True)
    triggered_price = Column(Numeric(14, 4), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    notifications = relationship(
        "NotificationLogModel", back_populates="alert", cascade="all, delete-orphan"
    )

    # Index for the active-alert scan
    __table_args__ = (Index("ix_price_alerts_enabled_triggered", "enabled", "triggered"),)

    def __repr__(self) -> str:
        return f"<PriceAlertModel(id={self.id}, metal='{self.metal}', target={self.target_price})>"


class PushTokenModel(Base):
    """ORM model for push_tokens table."""

    __tablename__ = "push_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_ref = Column(String(255), nullable=False, index=True)
    token = Column(String(255), unique=True, nullable=False)
    platform = Column(String(20), nullable=True)
    app_version = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_active = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<PushTokenModel(id={self.id}, owner_ref='{self.owner_ref}')>"


class NotificationLogModel(Base):
    """ORM model for the notification_log audit table."""

    __tablename__ = "notification_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    alert_id = Column(
        Integer, ForeignKey("price_alerts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    push_token = Column(String(255), nullable=True)
    metal = Column(SQLEnum(Metal), nullable=False)
    target_price = Column(Numeric(14, 4), nullable=False)
    actual_price = Column(Numeric(14, 4), nullable=False)
    direction = Column(SQLEnum(AlertDirection), nullable=False)
    success = Column(Boolean, nullable=False, default=False)
    error_message = Column(String(500), nullable=True)
    receipt_id = Column(String(100), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationships
    alert = relationship("PriceAlertModel", back_populates="notifications")

    def __repr__(self) -> str:
        return f"<NotificationLogModel(id={self.id}, alert_id={self.alert_id}, success={self.success})>"
