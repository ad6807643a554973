"""NotificationRecord entity for the delivery audit trail."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from app.bullion_tracker.domain.entities.alert import AlertDirection
from app.bullion_tracker.domain.value_objects.metal import Metal


@dataclass
class NotificationRecord:
    """Write-once audit row for one dispatch attempt of a triggered alert.

    Attributes:
        id: Database identifier (None for unsaved entities).
        alert_id: The alert that fired.
        destination_token: Token the notification went to; None when
            delivery was skipped because the owner had no destination.
        asset: Metal of the alert.
        target_price: The alert's threshold.
        requested_price: The resolved price that fired the alert.
        direction: The alert's direction.
        delivery_success: Whether the transport accepted the message.
        error_detail: Categorized failure reason, if any.
        receipt_id: Transport receipt id for later delivery confirmation.
        sent_at: When the attempt was made.
    """

    id: Optional[int]
    alert_id: int
    destination_token: Optional[str]
    asset: Metal
    target_price: Decimal
    requested_price: Decimal
    direction: AlertDirection
    delivery_success: bool
    error_detail: Optional[str] = None
    receipt_id: Optional[str] = None
    sent_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
