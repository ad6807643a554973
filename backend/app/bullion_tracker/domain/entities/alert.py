"""Alert entity representing a user's price threshold alert."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from app.bullion_tracker.domain.value_objects.metal import Metal


class AlertDirection(Enum):
    """Which side of the target price fires the alert."""

    ABOVE = "above"
    BELOW = "below"


@dataclass
class Alert:
    """Domain entity representing a threshold alert on a metal's spot price.

    An alert is active while enabled and not yet triggered. Triggering is
    terminal: once fired the alert is never evaluated again.

    Attributes:
        id: Database identifier (None for unsaved entities).
        owner_ref: Opaque reference to the owner (user id or device id).
        asset: Metal whose price is watched.
        target_price: Threshold price in USD per troy ounce.
        direction: Fire when the price reaches the target from this side.
        enabled: Whether the owner wants the alert evaluated.
        triggered: Whether the alert has already fired.
        triggered_at: When the alert fired.
        triggered_price: The resolved price that fired the alert.
        created_at: Timestamp when the alert was created.
    """

    id: Optional[int]
    owner_ref: str
    asset: Metal
    target_price: Decimal
    direction: AlertDirection
    enabled: bool = True
    triggered: bool = False
    triggered_at: Optional[datetime] = None
    triggered_price: Optional[Decimal] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self) -> bool:
        """Active alerts are enabled and have not fired yet."""
        return self.enabled and not self.triggered

    def is_crossed_by(self, price: Decimal) -> bool:
        """Check whether a price satisfies the alert's condition.

        The boundary is inclusive in both directions.

        Args:
            price: Current resolved price.

        Returns:
            True if the price is at or beyond the target on the alert's side.
        """
        if self.direction == AlertDirection.ABOVE:
            return price >= self.target_price
        return price <= self.target_price

    def mark_triggered(self, price: Decimal, at: Optional[datetime] = None) -> bool:
        """Apply the terminal triggered transition.

        Args:
            price: The price that fired the alert.
            at: Time of the transition (defaults to now).

        Returns:
            True if the transition happened, False if already triggered.
        """
        if self.triggered:
            return False
        self.triggered = True
        self.triggered_at = at or datetime.now(timezone.utc)
        self.triggered_price = price
        return True

    def disable(self) -> None:
        self.enabled = False

    def enable(self) -> None:
        self.enabled = True
