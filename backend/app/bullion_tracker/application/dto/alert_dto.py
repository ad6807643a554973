"""Data Transfer Objects for alert-related API requests and responses.

These DTOs represent the external contract for alert operations exposed
through the API layer. They are decoupled from domain entities and
optimized for JSON serialization.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.bullion_tracker.domain.entities.alert import Alert, AlertDirection
from app.bullion_tracker.domain.value_objects.metal import Metal


class CreateAlertRequest(BaseModel):
    """Request payload for creating a new price alert.

    Used by the API endpoint to validate incoming alert creation requests.
    """

    model_config = ConfigDict(
        json_encoders={Decimal: lambda v: float(v)},
    )

    owner_ref: str = Field(min_length=1, max_length=255, description="User or device identifier")
    metal: Metal = Field(description="Metal to monitor (gold, silver, platinum, palladium)")
    target_price: Decimal = Field(gt=0, description="Threshold price in USD per troy ounce")
    direction: AlertDirection = Field(
        description="'above' fires at or above the target, 'below' at or below it"
    )


class UpdateAlertRequest(BaseModel):
    """Request payload for enabling or disabling an alert."""

    enabled: bool = Field(description="Whether the alert should be evaluated")


class AlertDTO(BaseModel):
    """Alert data for API responses."""

    model_config = ConfigDict(
        json_encoders={Decimal: lambda v: float(v)},
        from_attributes=True,
    )

    id: int = Field(description="Unique alert identifier")
    owner_ref: str = Field(description="Owner of the alert")
    metal: Metal = Field(description="Metal being monitored")
    target_price: Decimal = Field(description="Threshold price")
    direction: AlertDirection = Field(description="Crossing direction")
    enabled: bool = Field(description="Whether the alert is evaluated")
    triggered: bool = Field(description="Whether the alert has fired")
    triggered_at: Optional[datetime] = Field(default=None, description="When the alert fired (UTC)")
    triggered_price: Optional[Decimal] = Field(default=None, description="Price that fired the alert")
    created_at: datetime = Field(description="When the alert was created (UTC)")

    @classmethod
    def from_entity(cls, alert: Alert) -> "AlertDTO":
        return cls(
            id=alert.id,  # type: ignore[arg-type]
            owner_ref=alert.owner_ref,
            metal=alert.asset,
            target_price=alert.target_price,
            direction=alert.direction,
            enabled=alert.enabled,
            triggered=alert.triggered,
            triggered_at=alert.triggered_at,
            triggered_price=alert.triggered_price,
            created_at=alert.created_at,
        )


class AlertListDTO(BaseModel):
    """List of an owner's alerts for API responses."""

    alerts: list[AlertDTO] = Field(default_factory=list, description="List of alerts")
    total: int = Field(description="Total number of alerts for the owner")


class AlertCheckSummary(BaseModel):
    """Counters reported by one alert evaluation cycle."""

    checked: int = Field(default=0, description="Active alerts evaluated")
    triggered: int = Field(default=0, description="Alerts transitioned to triggered")
    sent: int = Field(default=0, description="Notifications accepted by the transport")
    skipped: int = Field(default=0, description="Triggered alerts with no destination")
    errors: int = Field(default=0, description="Per-alert failures")
