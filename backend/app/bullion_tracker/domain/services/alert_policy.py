"""Alert policy domain service for alert trigger evaluation.

- An alert is evaluated only while enabled and not yet triggered
- Fires when the price reaches the target from the alert's side (inclusive)
- Fallback prices (cached or static) are eligible only when allowed
"""

from decimal import Decimal
from typing import Optional

from app.bullion_tracker.domain.entities.alert import Alert
from app.bullion_tracker.domain.value_objects.resolved_price import (
    ProvenanceKind,
    ResolvedPrice,
)


class AlertPolicy:
    """Domain service for evaluating alert trigger conditions.

    This service implements pure domain logic with no infrastructure
    dependencies. Whether a cached or static price may fire an alert is a
    deployment decision, so both are configurable.

    Attributes:
        fire_on_cached: Whether last-known-good prices may trigger alerts.
        fire_on_static: Whether hardcoded fallback prices may trigger alerts.
    """

    def __init__(self, fire_on_cached: bool = True, fire_on_static: bool = True) -> None:
        self.fire_on_cached = fire_on_cached
        self.fire_on_static = fire_on_static

    def is_eligible_price(self, price: Optional[ResolvedPrice]) -> bool:
        """Check whether a resolved price may be used to evaluate alerts.

        Args:
            price: The resolved price for the alert's asset, if any.

        Returns:
            False for missing or non-positive prices, or for fallback tiers
            the policy excludes.
        """
        if price is None or price.amount <= 0:
            return False

        kind = price.provenance.kind
        if kind == ProvenanceKind.CACHED:
            return self.fire_on_cached
        if kind == ProvenanceKind.STATIC:
            return self.fire_on_static
        return True

    def should_trigger(self, alert: Alert, price: Optional[ResolvedPrice]) -> bool:
        """Determine if an alert should fire at the given price.

        Rules:
        1. Alert must be active (enabled and not triggered)
        2. Price must be eligible under the fallback policy
        3. above fires at price >= target, below at price <= target

        Args:
            alert: The alert to evaluate.
            price: The resolved price for the alert's asset.

        Returns:
            True if the alert should trigger, False otherwise.
        """
        if not alert.is_active:
            return False

        if not self.is_eligible_price(price):
            return False

        return alert.is_crossed_by(price.amount)  # type: ignore[union-attr]

    @staticmethod
    def is_valid_target(target_price: Decimal) -> bool:
        return target_price > 0
