"""Domain entities for the Bullion Tracker.

This module exports the core business entities used throughout the domain layer.
"""

from app.bullion_tracker.domain.entities.alert import Alert, AlertDirection
from app.bullion_tracker.domain.entities.calibration_ratio import CalibrationRatio
from app.bullion_tracker.domain.entities.notification_record import NotificationRecord
from app.bullion_tracker.domain.entities.price_history_record import PriceHistoryRecord
from app.bullion_tracker.domain.entities.push_destination import PushDestination

__all__ = [
    "Alert",
    "AlertDirection",
    "CalibrationRatio",
    "NotificationRecord",
    "PriceHistoryRecord",
    "PushDestination",
]
