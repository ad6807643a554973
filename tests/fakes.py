"""In-memory fakes of the repositories, sources and transport used by tests."""

import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from app.bullion_tracker.application.exceptions import (
    DeliveryRejectedError,
    SourceUnavailableError,
)
from app.bullion_tracker.application.interfaces.clock import Clock
from app.bullion_tracker.application.interfaces.notification_transport import (
    DeliveryErrorCategory,
    NotificationTransport,
    PushMessage,
    PushReceipt,
    PushTicket,
)
from app.bullion_tracker.application.interfaces.price_source import (
    FetchErrorKind,
    FetchResult,
    PriceQuote,
    PriceSource,
)
from app.bullion_tracker.application.interfaces.proxy_quote_source import (
    ProxyClose,
    ProxyQuoteSource,
)
from app.bullion_tracker.domain.entities.alert import Alert
from app.bullion_tracker.domain.entities.calibration_ratio import CalibrationRatio
from app.bullion_tracker.domain.entities.notification_record import NotificationRecord
from app.bullion_tracker.domain.entities.price_history_record import PriceHistoryRecord
from app.bullion_tracker.domain.entities.push_destination import PushDestination
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
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.infrastructure.external.expo_push_client import is_expo_push_token

# Wednesday, so the last trading day is the previous calendar day
FIXED_NOW = datetime(2026, 1, 14, 15, 30, tzinfo=timezone.utc)


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self._now = now
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


class StubPriceSource(PriceSource):
    """Price source returning canned results and recording requests."""

    def __init__(
        self,
        name: str,
        amounts: Optional[dict[Metal, Decimal]] = None,
        error: Optional[FetchErrorKind] = None,
        raises: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self._name = name
        self._amounts = amounts or {}
        self._error = error
        self._raises = raises
        self._gate = gate
        self.requests: list[list[Metal]] = []
        self.closed = False

    @property
    def source_name(self) -> str:
        return self._name

    async def fetch(self, assets: Iterable[Metal]) -> FetchResult:
        requested = list(assets)
        self.requests.append(requested)
        if self._gate is not None:
            await self._gate.wait()
        if self._raises is not None:
            raise self._raises
        if self._error is not None:
            return FetchResult.failure(self._error, f"{self._name} failed")
        return FetchResult.success(
            PriceQuote(
                source=self._name,
                amounts={m: a for m, a in self._amounts.items() if m in requested},
                timestamp=FIXED_NOW,
            )
        )

    async def close(self) -> None:
        self.closed = True


class InMemoryPriceHistoryRepository(PriceHistoryRepository):
    def __init__(self, records: Optional[List[PriceHistoryRecord]] = None) -> None:
        self.records: List[PriceHistoryRecord] = list(records or [])

    async def append(self, records: List[PriceHistoryRecord]) -> List[PriceHistoryRecord]:
        for record in records:
            record.id = len(self.records) + 1
            self.records.append(record)
        return records

    async def find_closest(
        self, asset: Metal, target: datetime, max_distance: timedelta
    ) -> Optional[PriceHistoryRecord]:
        candidates = [
            r for r in self.records
            if r.asset == asset and target - max_distance <= r.timestamp <= target
        ]
        return max(candidates, key=lambda r: r.timestamp, default=None)

    async def get_latest(self, asset: Metal) -> Optional[PriceHistoryRecord]:
        candidates = [r for r in self.records if r.asset == asset]
        return max(candidates, key=lambda r: r.timestamp, default=None)


class InMemoryCalibrationRepository(CalibrationRepository):
    def __init__(self) -> None:
        self.rows: dict[tuple[ProxyInstrument, date], CalibrationRatio] = {}

    async def upsert(self, ratio: CalibrationRatio) -> CalibrationRatio:
        key = (ratio.instrument, ratio.date)
        existing = self.rows.get(key)
        ratio.id = existing.id if existing else len(self.rows) + 1
        self.rows[key] = ratio
        return ratio

    async def get_for_date(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[CalibrationRatio]:
        return self.rows.get((instrument, on_date))

    async def get_latest_on_or_before(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[CalibrationRatio]:
        candidates = [
            r for (i, d), r in self.rows.items() if i == instrument and d <= on_date
        ]
        return max(candidates, key=lambda r: r.date, default=None)


class InMemoryAlertRepository(AlertRepository):
    def __init__(self, alerts: Optional[List[Alert]] = None) -> None:
        self.alerts: dict[int, Alert] = {}
        for alert in alerts or []:
            self.alerts[alert.id] = alert  # type: ignore[index]

    async def get_by_id(self, alert_id: int) -> Optional[Alert]:
        return self.alerts.get(alert_id)

    async def get_active(self) -> List[Alert]:
        return [a for a in self.alerts.values() if a.is_active]

    async def get_by_owner(self, owner_ref: str) -> List[Alert]:
        return [a for a in self.alerts.values() if a.owner_ref == owner_ref]

    async def save(self, alert: Alert) -> Alert:
        if alert.id is None:
            alert.id = max(self.alerts, default=0) + 1
        self.alerts[alert.id] = alert
        return alert

    async def set_enabled(self, alert_id: int, enabled: bool) -> bool:
        alert = self.alerts.get(alert_id)
        if alert is None:
            return False
        alert.enabled = enabled
        return True

    async def mark_triggered(
        self, alert_id: int, triggered_price: Decimal, triggered_at: datetime
    ) -> bool:
        alert = self.alerts.get(alert_id)
        if alert is None or not alert.is_active:
            return False
        return alert.mark_triggered(triggered_price, triggered_at)

    async def delete(self, alert_id: int) -> bool:
        return self.alerts.pop(alert_id, None) is not None


class InMemoryDestinationRepository(DestinationRepository):
    def __init__(self, destinations: Optional[List[PushDestination]] = None) -> None:
        self.destinations: dict[str, PushDestination] = {
            d.token: d for d in destinations or []
        }

    async def register(self, destination: PushDestination) -> PushDestination:
        existing = self.destinations.get(destination.token)
        if existing is not None:
            existing.owner_ref = destination.owner_ref
            existing.touch()
            return existing
        destination.id = len(self.destinations) + 1
        self.destinations[destination.token] = destination
        return destination

    async def remove(self, token: str) -> bool:
        return self.destinations.pop(token, None) is not None

    async def get_latest_for_owner(self, owner_ref: str) -> Optional[PushDestination]:
        owned = [d for d in self.destinations.values() if d.owner_ref == owner_ref]
        return max(owned, key=lambda d: d.last_active, default=None)


class InMemoryNotificationRepository(NotificationRepository):
    def __init__(self) -> None:
        self.records: List[NotificationRecord] = []

    async def append(self, records: List[NotificationRecord]) -> List[NotificationRecord]:
        for record in records:
            record.id = len(self.records) + 1
            self.records.append(record)
        return records

    async def get_for_alert(self, alert_id: int) -> List[NotificationRecord]:
        return [r for r in self.records if r.alert_id == alert_id]


class FakeTransport(NotificationTransport):
    """Transport accepting every message except those addressed to ``failing``."""

    def __init__(
        self,
        failing: Iterable[str] = (),
        reject_batches: bool = False,
    ) -> None:
        self.failing = set(failing)
        self.reject_batches = reject_batches
        self.batches: list[list[PushMessage]] = []

    def is_valid_destination(self, token: str) -> bool:
        return is_expo_push_token(token)

    async def send_batch(self, messages: list[PushMessage]) -> list[PushTicket]:
        self.batches.append(list(messages))
        if self.reject_batches:
            raise DeliveryRejectedError("HTTP 429", rate_limited=True)
        tickets = []
        for message in messages:
            if message.to in self.failing:
                tickets.append(
                    PushTicket(
                        ok=False,
                        error_category=DeliveryErrorCategory.INVALID_DESTINATION,
                        error_detail="DeviceNotRegistered",
                    )
                )
            else:
                tickets.append(PushTicket(ok=True, receipt_id=f"receipt-{message.to[-4:-1]}"))
        return tickets

    async def get_receipts(self, receipt_ids: list[str]) -> dict[str, PushReceipt]:
        return {rid: PushReceipt(receipt_id=rid, ok=True) for rid in receipt_ids}

    async def close(self) -> None:
        pass


def expo_token(n: int) -> str:
    return f"ExponentPushToken[device-{n:04d}]"


class StubProxyQuoteSource(ProxyQuoteSource):
    """Proxy quote source returning canned ETF prices and daily closes."""

    def __init__(
        self,
        quotes: Optional[dict[ProxyInstrument, Decimal]] = None,
        unavailable: bool = False,
        closes: Optional[Iterable[ProxyClose]] = None,
    ) -> None:
        self.quotes = dict(quotes or {})
        self.unavailable = unavailable
        self.closes = list(closes or [])
        self.requests: list[list[ProxyInstrument]] = []
        self.close_requests: list[tuple[ProxyInstrument, date]] = []

    async def fetch_quotes(
        self, instruments: Iterable[ProxyInstrument]
    ) -> dict[ProxyInstrument, Decimal]:
        requested = list(instruments)
        self.requests.append(requested)
        if self.unavailable:
            raise SourceUnavailableError("stub-proxy", "connection refused")
        return {i: p for i, p in self.quotes.items() if i in requested}

    async def fetch_close(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[ProxyClose]:
        self.close_requests.append((instrument, on_date))
        if self.unavailable:
            raise SourceUnavailableError("stub-proxy", "connection refused")
        eligible = [
            c for c in self.closes
            if c.instrument == instrument and c.trading_date <= on_date
        ]
        return max(eligible, key=lambda c: c.trading_date, default=None)

    async def close(self) -> None:
        pass
