"""Application use cases for orchestrating domain logic."""

from app.bullion_tracker.application.use_cases.calibrate_ratios import (
    CalibrationService,
    RatioResult,
)
from app.bullion_tracker.application.use_cases.compute_price_change import (
    ChangeCalculator,
)
from app.bullion_tracker.application.use_cases.dispatch_notifications import (
    DispatchResult,
    NotificationDispatcher,
)
from app.bullion_tracker.application.use_cases.evaluate_alerts import AlertEvaluator
from app.bullion_tracker.application.use_cases.manage_alerts import (
    CreateAlertUseCase,
    DeleteAlertUseCase,
    GetAlertsByOwnerUseCase,
    UpdateAlertUseCase,
)
from app.bullion_tracker.application.use_cases.manage_destinations import (
    RegisterDestinationUseCase,
    RemoveDestinationUseCase,
)
from app.bullion_tracker.application.use_cases.resolve_prices import (
    STATIC_FALLBACK_PRICES,
    LastKnownPriceCache,
    PriceResolver,
)
from app.bullion_tracker.application.use_cases.run_pricing_cycle import (
    LatestPriceStore,
    PriceSnapshot,
    PricingCycle,
    PricingCycleResult,
)

__all__ = [
    # Pricing
    "PriceResolver",
    "LastKnownPriceCache",
    "STATIC_FALLBACK_PRICES",
    "ChangeCalculator",
    "PricingCycle",
    "PricingCycleResult",
    "PriceSnapshot",
    "LatestPriceStore",
    # Calibration
    "CalibrationService",
    "RatioResult",
    # Alerts and notifications
    "AlertEvaluator",
    "NotificationDispatcher",
    "DispatchResult",
    "CreateAlertUseCase",
    "GetAlertsByOwnerUseCase",
    "UpdateAlertUseCase",
    "DeleteAlertUseCase",
    "RegisterDestinationUseCase",
    "RemoveDestinationUseCase",
]
