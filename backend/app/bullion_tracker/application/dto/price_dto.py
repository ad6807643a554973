"""Data Transfer Objects for spot price and calibration API responses.

These DTOs represent the external contract for price data exposed
through the API layer. They are decoupled from domain entities and
optimized for JSON serialization.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.bullion_tracker.domain.value_objects.resolved_price import ResolvedPrice


class SpotPriceDTO(BaseModel):
    """Resolved spot price of a single metal."""

    model_config = ConfigDict(
        json_encoders={Decimal: lambda v: float(v)},
    )

    metal: str = Field(description="Metal name (e.g., 'gold')")
    code: str = Field(description="Provider symbol (e.g., 'XAU')")
    price: Decimal = Field(description="Spot price in USD per troy ounce")
    source: str = Field(description="Adapter name, or 'cached' / 'static' for fallbacks")
    provenance: str = Field(description="Tier that supplied the price: live, cached or static")
    change: Optional[Decimal] = Field(default=None, description="Day-over-day change in USD")
    change_percent: Optional[Decimal] = Field(default=None, description="Day-over-day change in percent")
    baseline_date: Optional[date] = Field(
        default=None,
        description="Trading day the change is measured against"
    )
    timestamp: datetime = Field(description="When the price was resolved (UTC)")

    @classmethod
    def from_resolved(cls, price: ResolvedPrice) -> "SpotPriceDTO":
        return cls(
            metal=price.asset.value,
            code=price.asset.code,
            price=price.amount,
            source=price.provenance.source,
            provenance=price.provenance.kind.value,
            change=price.change_amount,
            change_percent=price.change_percent,
            baseline_date=price.change_baseline_date,
            timestamp=price.timestamp,
        )


class SpotPricesDTO(BaseModel):
    """Spot prices for every tracked metal."""

    prices: list[SpotPriceDTO] = Field(default_factory=list, description="One entry per metal")
    all_live: bool = Field(description="Whether every price came from a live source")
    timestamp: datetime = Field(description="When the response was built (UTC)")


class CalibrationDTO(BaseModel):
    """Calibration ratio for a proxy instrument."""

    model_config = ConfigDict(
        json_encoders={Decimal: lambda v: float(v)},
    )

    instrument: str = Field(description="Proxy instrument symbol (e.g., 'SLV')")
    metal: str = Field(description="Metal the instrument tracks")
    ratio: Decimal = Field(description="Instrument price / spot price")
    calibrated_on: Optional[date] = Field(default=None, description="Date the ratio was calibrated")
    proxy_price: Optional[Decimal] = Field(default=None, description="Instrument price at calibration")
    spot_price: Optional[Decimal] = Field(default=None, description="Spot price used at calibration")
    is_stale: bool = Field(default=False, description="Whether the ratio is older than requested")
    is_default: bool = Field(default=False, description="Whether the hardcoded default ratio is used")


class HistoricalSpotDTO(BaseModel):
    """Spot price of a metal on a past date, estimated from its proxy ETF."""

    model_config = ConfigDict(
        json_encoders={Decimal: lambda v: float(v)},
    )

    metal: str = Field(description="Metal name (e.g., 'gold')")
    requested_date: date = Field(description="Requested date")
    used_date: date = Field(description="Trading day whose proxy close was used")
    price: Decimal = Field(description="Estimated spot price in USD per troy ounce")
    source: str = Field(default="proxy-estimate", description="How the price was obtained")
    instrument: str = Field(description="Proxy instrument symbol (e.g., 'GLD')")
    proxy_close: Decimal = Field(description="Proxy closing price on used_date")
    ratio: Decimal = Field(description="Proxy to spot ratio applied")
    ratio_is_default: bool = Field(default=False, description="Whether the hardcoded default ratio was applied")
