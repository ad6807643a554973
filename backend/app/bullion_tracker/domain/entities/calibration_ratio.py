"""CalibrationRatio entity for daily proxy-to-spot conversion ratios."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument


@dataclass
class CalibrationRatio:
    """Daily ratio between a proxy instrument's price and the spot price.

    One row exists per (instrument, date); recalibrating on the same date
    overwrites the row.

    Attributes:
        id: Database identifier (None for unsaved entities).
        instrument: The proxy instrument that was calibrated.
        date: Calendar date (UTC) the ratio applies to.
        instrument_ratio: proxy_price / spot_price_used.
        proxy_price: Instrument price at calibration time.
        spot_price_used: Resolved spot price at calibration time.
        updated_at: When the row was last written.
    """

    id: Optional[int]
    instrument: ProxyInstrument
    date: date
    instrument_ratio: Decimal
    proxy_price: Decimal
    spot_price_used: Decimal
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_spot(self, proxy_price: Decimal) -> Decimal:
        """Convert a proxy price to an estimated spot price with this ratio."""
        return proxy_price / self.instrument_ratio
