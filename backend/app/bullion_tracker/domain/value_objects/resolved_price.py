"""ResolvedPrice value object and its provenance tag."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Self

from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.price_change import PriceChange

CACHED_SOURCE = "cached"
STATIC_SOURCE = "static"


class ProvenanceKind(Enum):
    """Which tier of the fallback chain produced a price."""

    LIVE = "live"
    CACHED = "cached"
    STATIC = "static"


@dataclass(frozen=True)
class Provenance:
    """Tag naming the single tier that supplied a resolved price.

    Attributes:
        kind: Live upstream source, in-process cache, or hardcoded constant.
        source: Adapter name for live prices, "cached" or "static" otherwise.
    """

    kind: ProvenanceKind
    source: str

    @classmethod
    def live(cls, source_name: str) -> Self:
        return cls(ProvenanceKind.LIVE, source_name)

    @classmethod
    def cached(cls) -> Self:
        return cls(ProvenanceKind.CACHED, CACHED_SOURCE)

    @classmethod
    def static(cls) -> Self:
        return cls(ProvenanceKind.STATIC, STATIC_SOURCE)

    @property
    def is_live(self) -> bool:
        return self.kind == ProvenanceKind.LIVE

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True)
class ResolvedPrice:
    """Immutable snapshot of one asset's price for one resolution cycle.

    Instances are never mutated; enrichment with change data produces a
    new instance via ``with_change``.

    Attributes:
        asset: The metal this price is for.
        amount: Spot price in USD per troy ounce.
        timestamp: UTC time the price was resolved.
        provenance: The tier that supplied the amount.
        change_amount: Day-over-day change in USD, None when unavailable.
        change_percent: Day-over-day change in percent, None when unavailable.
        change_baseline_date: Trading day the change is measured against.
    """

    asset: Metal
    amount: Decimal
    timestamp: datetime
    provenance: Provenance
    change_amount: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    change_baseline_date: Optional[date] = None

    @property
    def has_change(self) -> bool:
        """Whether a day-over-day change figure is available."""
        return self.change_amount is not None and self.change_percent is not None

    @property
    def change(self) -> Optional[PriceChange]:
        if not self.has_change:
            return None
        return PriceChange(
            amount=self.change_amount,  # type: ignore[arg-type]
            percent=self.change_percent,  # type: ignore[arg-type]
            baseline_date=self.change_baseline_date,
        )

    def with_change(self, change: Optional[PriceChange]) -> "ResolvedPrice":
        """Return a copy carrying the given change (or none)."""
        if change is None:
            return replace(
                self,
                change_amount=None,
                change_percent=None,
                change_baseline_date=None,
            )
        return replace(
            self,
            change_amount=change.amount,
            change_percent=change.percent,
            change_baseline_date=change.baseline_date,
        )
