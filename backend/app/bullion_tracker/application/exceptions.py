"""Application-layer exceptions for use case error handling.

These exceptions represent business logic errors that can occur during
use case execution. Cycle-level errors are absorbed by the scheduled
cycles; control-surface errors are caught and mapped to appropriate HTTP
responses by the presentation layer.
"""

from datetime import date
from typing import Optional


class ApplicationError(Exception):
    """Base class for all application-layer exceptions."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class SourceUnavailableError(ApplicationError):
    """Raised when an upstream provider cannot supply data.

    Price sources report this as a FetchError instead of raising; the proxy
    quote source raises it and the calibration service absorbs it.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(
            message=f"Source '{source}' unavailable: {reason}",
            code="SOURCE_UNAVAILABLE"
        )
        self.source = source
        self.reason = reason


class NoBaselineDataError(ApplicationError):
    """Raised when no history exists to compute a day-over-day change."""

    def __init__(self, asset: str, baseline_date: date) -> None:
        super().__init__(
            message=f"No {asset} price recorded for {baseline_date.isoformat()}",
            code="NO_BASELINE_DATA"
        )
        self.asset = asset
        self.baseline_date = baseline_date


class CalibrationStaleError(ApplicationError):
    """Raised when a fresh calibration could not be computed.

    Callers fall back to the most recent stored ratio (or the default).
    """

    def __init__(self, instrument: str, reason: str) -> None:
        super().__init__(
            message=f"Could not calibrate {instrument}: {reason}",
            code="CALIBRATION_STALE"
        )
        self.instrument = instrument
        self.reason = reason


class HistoricalPriceUnavailableError(ApplicationError):
    """Raised when no proxy close exists to estimate a historical spot price."""

    def __init__(self, asset: str, on_date: date) -> None:
        super().__init__(
            message=f"No {asset} price available for {on_date.isoformat()}",
            code="HISTORICAL_PRICE_UNAVAILABLE"
        )
        self.asset = asset
        self.on_date = on_date


class DeliveryRejectedError(ApplicationError):
    """Raised when the notification transport rejects a whole batch."""

    def __init__(self, reason: str, rate_limited: bool = False) -> None:
        super().__init__(
            message=f"Push delivery rejected: {reason}",
            code="DELIVERY_REJECTED"
        )
        self.reason = reason
        self.rate_limited = rate_limited


class PersistenceFailureError(ApplicationError):
    """Raised when a write to the persisted store fails."""

    def __init__(self, operation: str, reason: Optional[str] = None) -> None:
        message = f"Persistence failure during {operation}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, code="PERSISTENCE_FAILURE")
        self.operation = operation


class AlertNotFoundError(ApplicationError):
    """Raised when a requested alert does not exist."""

    def __init__(self, alert_id: int) -> None:
        super().__init__(
            message=f"Alert with ID {alert_id} not found",
            code="ALERT_NOT_FOUND"
        )
        self.alert_id = alert_id


class InvalidDestinationError(ApplicationError):
    """Raised when a push token is not a valid destination for the transport."""

    def __init__(self, token: str) -> None:
        super().__init__(
            message=f"Invalid push token format: {token}",
            code="INVALID_DESTINATION"
        )
        self.token = token


class UnsupportedAssetError(ApplicationError):
    """Raised when a requested metal or proxy instrument is not tracked."""

    def __init__(self, symbol: str) -> None:
        super().__init__(
            message=f"Asset '{symbol}' is not supported",
            code="UNSUPPORTED_ASSET"
        )
        self.symbol = symbol
