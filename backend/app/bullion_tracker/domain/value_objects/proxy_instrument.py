"""Proxy instruments (ETFs) that track a metal's spot price."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from app.bullion_tracker.domain.value_objects.metal import Metal

# Share price / spot price. Each share represents a fixed fraction of an
# ounce that erodes by the fund's expense ratio (~0.5%/year).
DEFAULT_RATIOS: dict[str, Decimal] = {
    "SLV": Decimal("0.92"),
    "GLD": Decimal("0.092"),
    "PPLT": Decimal("0.096"),
    "PALL": Decimal("0.096"),
}

_TRACKED_METALS: dict[str, Metal] = {
    "SLV": Metal.SILVER,
    "GLD": Metal.GOLD,
    "PPLT": Metal.PLATINUM,
    "PALL": Metal.PALLADIUM,
}


class ProxyInstrument(Enum):
    """Exchange-traded funds used as proxies for metal spot prices."""

    SLV = "SLV"
    GLD = "GLD"
    PPLT = "PPLT"
    PALL = "PALL"

    @property
    def asset(self) -> Metal:
        """The metal this instrument tracks."""
        return _TRACKED_METALS[self.value]

    @property
    def default_ratio(self) -> Decimal:
        """Ratio used when the instrument has never been calibrated."""
        return DEFAULT_RATIOS[self.value]

    @classmethod
    def for_asset(cls, asset: Metal) -> Optional["ProxyInstrument"]:
        for instrument in cls:
            if instrument.asset == asset:
                return instrument
        return None
