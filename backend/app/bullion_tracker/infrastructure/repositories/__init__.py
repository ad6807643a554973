"""Infrastructure repository implementations.

This module exports concrete repository implementations that fulfill
the abstract interfaces defined in the domain layer.
"""

from app.bullion_tracker.infrastructure.repositories.sql_alert_repository import (
    SqlAlertRepository,
)
from app.bullion_tracker.infrastructure.repositories.sql_calibration_repository import (
    SqlCalibrationRepository,
)
from app.bullion_tracker.infrastructure.repositories.sql_destination_repository import (
    SqlDestinationRepository,
)
from app.bullion_tracker.infrastructure.repositories.sql_notification_repository import (
    SqlNotificationRepository,
)
from app.bullion_tracker.infrastructure.repositories.sql_price_history_repository import (
    SqlPriceHistoryRepository,
)

__all__ = [
    "SqlAlertRepository",
    "SqlCalibrationRepository",
    "SqlDestinationRepository",
    "SqlNotificationRepository",
    "SqlPriceHistoryRepository",
]
