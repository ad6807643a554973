"""PriceHistoryRecord entity for the append-only spot price log."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from app.bullion_tracker.domain.value_objects.metal import Metal


@dataclass
class PriceHistoryRecord:
    """One successful live resolution of a metal's spot price.

    Attributes:
        id: Database identifier (None for unsaved entities).
        asset: The metal that was priced.
        amount: Spot price in USD per troy ounce.
        timestamp: UTC time of the resolution.
        source: Name of the upstream source that supplied the price.
    """

    id: Optional[int]
    asset: Metal
    amount: Decimal
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "unknown"
