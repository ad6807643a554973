"""Domain services implementing core business rules.

These are pure domain services with no infrastructure dependencies:
- last_trading_day / end_of_day: Trading calendar for change baselines
- calculate_change: Day-over-day change arithmetic
- AlertPolicy: Alert trigger rules
"""

from app.bullion_tracker.domain.services.alert_policy import AlertPolicy
from app.bullion_tracker.domain.services.price_change import calculate_change
from app.bullion_tracker.domain.services.trading_calendar import (
    end_of_day,
    last_trading_day,
)

__all__ = [
    "AlertPolicy",
    "calculate_change",
    "end_of_day",
    "last_trading_day",
]
