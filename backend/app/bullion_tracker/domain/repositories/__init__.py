"""Domain repository interfaces for the Bullion Tracker.

These interfaces are the persisted-store contract used by the pricing,
calibration and alerting cycles:

- append price history and query it by closest match to a date
- upsert calibration ratios by date
- query active alerts and conditionally mark them triggered
- look up and register push destinations
- append notification audit rows

Concrete implementations live in the infrastructure layer
(backend/app/bullion_tracker/infrastructure/repositories/).
"""

from app.bullion_tracker.domain.repositories.alert_repository import AlertRepository
from app.bullion_tracker.domain.repositories.calibration_repository import (
    CalibrationRepository,
)
from app.bullion_tracker.domain.repositories.destination_repository import (
    DestinationRepository,
)
from app.bullion_tracker.domain.repositories.notification_repository import (
    NotificationRepository,
)
from app.bullion_tracker.domain.repositories.price_history_repository import (
    PriceHistoryRepository,
)

__all__ = [
    "AlertRepository",
    "CalibrationRepository",
    "DestinationRepository",
    "NotificationRepository",
    "PriceHistoryRepository",
]
