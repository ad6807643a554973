"""Domain value objects for the Bullion Tracker.

This module exports immutable value objects used throughout the domain layer:
- Metal: The tracked commodities
- ResolvedPrice / Provenance: One cycle's price and the tier that supplied it
- PriceChange: Day-over-day movement against a baseline
- ProxyInstrument: ETFs calibrated against spot prices
"""

from app.bullion_tracker.domain.value_objects.metal import ALL_METALS, Metal
from app.bullion_tracker.domain.value_objects.price_change import PriceChange
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.domain.value_objects.resolved_price import (
    Provenance,
    ProvenanceKind,
    ResolvedPrice,
)

__all__ = [
    "ALL_METALS",
    "Metal",
    "PriceChange",
    "Provenance",
    "ProvenanceKind",
    "ProxyInstrument",
    "ResolvedPrice",
]
