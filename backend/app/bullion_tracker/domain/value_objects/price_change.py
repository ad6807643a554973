"""PriceChange value object for day-over-day movement."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class PriceChange:
    """Movement of a price against a previous trading day's baseline.

    A missing change is represented by ``None`` at the call site, never by
    a zero-valued PriceChange.

    Attributes:
        amount: Absolute change (current - baseline), rounded to cents.
        percent: Relative change in percent, rounded to two decimals.
        baseline_amount: The price the change was measured against, if known.
        baseline_date: The trading day the baseline belongs to, if known.
    """

    amount: Decimal
    percent: Decimal
    baseline_amount: Optional[Decimal] = None
    baseline_date: Optional[date] = None

    @property
    def is_up(self) -> bool:
        return self.amount > 0
