"""Day-over-day price change arithmetic."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from app.bullion_tracker.domain.value_objects.price_change import PriceChange

_CENTS = Decimal("0.01")


def calculate_change(
    current: Decimal,
    baseline_amount: Optional[Decimal],
    baseline_date: Optional[date] = None,
) -> Optional[PriceChange]:
    """Compute the change of ``current`` against a baseline price.

    Args:
        current: The price being reported.
        baseline_amount: The previous trading day's price, if one exists.
        baseline_date: The trading day the baseline belongs to.

    Returns:
        PriceChange with amount and percent rounded to two decimals, or None
        if there is no baseline or it is not positive.
    """
    if baseline_amount is None or baseline_amount <= 0:
        return None

    amount = current - baseline_amount
    percent = amount / baseline_amount * Decimal("100")

    return PriceChange(
        amount=amount.quantize(_CENTS, rounding=ROUND_HALF_UP),
        percent=percent.quantize(_CENTS, rounding=ROUND_HALF_UP),
        baseline_amount=baseline_amount,
        baseline_date=baseline_date,
    )
