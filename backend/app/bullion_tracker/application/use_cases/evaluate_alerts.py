"""Use case for evaluating price alerts against resolved prices.

Implements the alert cycle:
1. Load active alerts (enabled and not triggered)
2. Check each against its metal's resolved price
3. Claim crossed alerts through a conditional write, so an alert fires at
   most once even when cycles overlap
4. Send notifications for claimed alerts in one batch
5. Record an audit row per delivery attempt

Delivery failures never undo a claimed transition.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.bullion_tracker.application.dto.alert_dto import AlertCheckSummary
from app.bullion_tracker.application.interfaces.clock import Clock, SystemClock
from app.bullion_tracker.application.interfaces.notification_transport import PushMessage
from app.bullion_tracker.application.use_cases.dispatch_notifications import (
    DispatchResult,
    NotificationDispatcher,
)
from app.bullion_tracker.domain.entities.alert import Alert, AlertDirection
from app.bullion_tracker.domain.entities.notification_record import NotificationRecord
from app.bullion_tracker.domain.repositories.alert_repository import AlertRepository
from app.bullion_tracker.domain.repositories.destination_repository import (
    DestinationRepository,
)
from app.bullion_tracker.domain.repositories.notification_repository import (
    NotificationRepository,
)
from app.bullion_tracker.domain.services.alert_policy import AlertPolicy
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.resolved_price import ResolvedPrice

logger = logging.getLogger(__name__)

NO_DESTINATION_DETAIL = "No push destination registered"


def build_alert_message(alert: Alert, price: Decimal, token: str) -> PushMessage:
    """Build the push notification announcing a triggered alert."""
    metal = alert.asset.display_name
    verb = "risen to" if alert.direction == AlertDirection.ABOVE else "fallen to"
    return PushMessage(
        to=token,
        title=f"{metal} Price Alert",
        body=f"{metal} has {verb} ${price:.2f}",
        data={
            "type": "price_alert",
            "alert_id": alert.id,
            "metal": alert.asset.value,
            "target_price": float(alert.target_price),
            "current_price": float(price),
            "direction": alert.direction.value,
        },
    )


@dataclass
class _ClaimedAlert:
    alert: Alert
    price: Decimal
    message: PushMessage


class AlertEvaluator:
    """Application service running one alert evaluation cycle.

    Every failure is isolated to the alert it concerns and counted in the
    returned summary; ``evaluate`` itself does not raise.
    """

    def __init__(
        self,
        alert_repository: AlertRepository,
        destination_repository: DestinationRepository,
        notification_repository: NotificationRepository,
        dispatcher: NotificationDispatcher,
        policy: Optional[AlertPolicy] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize the evaluator with required dependencies.

        Args:
            alert_repository: Repository for alert reads and the triggered claim.
            destination_repository: Repository for owners' push destinations.
            notification_repository: Repository for the audit trail.
            dispatcher: Batch notification sender.
            policy: Trigger rules (defaults allow fallback prices).
            clock: Time source for trigger timestamps.
        """
        self._alert_repository = alert_repository
        self._destination_repository = destination_repository
        self._notification_repository = notification_repository
        self._dispatcher = dispatcher
        self._policy = policy or AlertPolicy()
        self._clock = clock or SystemClock()

    async def evaluate(self, prices: dict[Metal, ResolvedPrice]) -> AlertCheckSummary:
        """Evaluate every active alert against a cycle's resolved prices.

        Args:
            prices: Resolved prices keyed by metal.

        Returns:
            AlertCheckSummary with cycle counters.
        """
        summary = AlertCheckSummary()

        try:
            alerts = await self._alert_repository.get_active()
        except Exception as e:
            logger.error(f"Failed to load active alerts: {e}")
            summary.errors += 1
            return summary

        summary.checked = len(alerts)
        if not alerts:
            logger.debug("No active alerts to check")
            return summary

        claimed: list[_ClaimedAlert] = []
        for alert in alerts:
            try:
                price = await self._claim(alert, prices.get(alert.asset))
                if price is None:
                    continue

                summary.triggered += 1
                destination = await self._destination_repository.get_latest_for_owner(
                    alert.owner_ref
                )
                if destination is None:
                    logger.info(f"Alert {alert.id} triggered but owner has no push destination")
                    await self._notification_repository.append(
                        [self._audit_record(alert, price, None, None)]
                    )
                    summary.skipped += 1
                    continue

                claimed.append(
                    _ClaimedAlert(alert, price, build_alert_message(alert, price, destination.token))
                )
            except Exception as e:
                summary.errors += 1
                logger.error(f"Error processing alert {alert.id}: {e}")

        if claimed:
            await self._deliver(claimed, summary)

        logger.info(
            f"Alert check complete: {summary.checked} checked, {summary.triggered} triggered, "
            f"{summary.sent} sent, {summary.skipped} skipped, {summary.errors} errors"
        )
        return summary

    async def _claim(
        self, alert: Alert, price: Optional[ResolvedPrice]
    ) -> Optional[Decimal]:
        """Return the firing price if this cycle claimed the alert."""
        if not self._policy.is_eligible_price(price):
            logger.debug(f"No eligible {alert.asset.value} price, skipping alert {alert.id}")
            return None

        if not self._policy.should_trigger(alert, price):
            return None

        amount = price.amount  # type: ignore[union-attr]
        now = self._clock.now()
        if not await self._alert_repository.mark_triggered(alert.id, amount, now):  # type: ignore[arg-type]
            logger.info(f"Alert {alert.id} already claimed by another cycle")
            return None

        alert.mark_triggered(amount, now)
        logger.info(
            f"Alert {alert.id} triggered: {alert.asset.value} {alert.direction.value} "
            f"${alert.target_price} (current ${amount})"
        )
        return amount

    async def _deliver(self, claimed: list[_ClaimedAlert], summary: AlertCheckSummary) -> None:
        results = await self._dispatcher.dispatch([c.message for c in claimed])

        records: list[NotificationRecord] = []
        for item, result in zip(claimed, results):
            if result.success:
                summary.sent += 1
            else:
                summary.errors += 1
                logger.warning(
                    f"Notification for alert {item.alert.id} failed: "
                    f"{result.error_category.value if result.error_category else 'unknown'}"
                )
            records.append(self._audit_record(item.alert, item.price, item.message.to, result))

        try:
            await self._notification_repository.append(records)
        except Exception as e:
            summary.errors += 1
            logger.error(f"Failed to record {len(records)} notification attempts: {e}")

    @staticmethod
    def _audit_record(
        alert: Alert,
        price: Decimal,
        token: Optional[str],
        result: Optional[DispatchResult],
    ) -> NotificationRecord:
        if result is None:
            success, detail, receipt = False, NO_DESTINATION_DETAIL, None
        else:
            success = result.success
            receipt = result.receipt_id
            detail = None
            if not result.success:
                category = result.error_category.value if result.error_category else "unknown"
                detail = f"{category}: {result.error_detail}" if result.error_detail else category

        return NotificationRecord(
            id=None,
            alert_id=alert.id,  # type: ignore[arg-type]
            destination_token=token,
            asset=alert.asset,
            target_price=alert.target_price,
            requested_price=price,
            direction=alert.direction,
            delivery_success=success,
            error_detail=detail,
            receipt_id=receipt,
        )
