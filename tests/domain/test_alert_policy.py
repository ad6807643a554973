"""Unit tests for the Alert entity and AlertPolicy domain service."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.bullion_tracker.domain.entities.alert import Alert, AlertDirection
from app.bullion_tracker.domain.services.alert_policy import AlertPolicy
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.resolved_price import (
    Provenance,
    ResolvedPrice,
)

NOW = datetime(2026, 1, 14, 12, 0, tzinfo=timezone.utc)


def _alert(direction: AlertDirection, target: str = "5000", **kwargs) -> Alert:
    return Alert(
        id=1,
        owner_ref="user-1",
        asset=Metal.GOLD,
        target_price=Decimal(target),
        direction=direction,
        **kwargs,
    )


def _price(amount: str, provenance: Provenance = Provenance.live("metalpriceapi")) -> ResolvedPrice:
    return ResolvedPrice(
        asset=Metal.GOLD,
        amount=Decimal(amount),
        timestamp=NOW,
        provenance=provenance,
    )


class TestAlert:
    """Tests for the Alert entity."""

    @pytest.mark.parametrize(
        ("direction", "price", "expected"),
        [
            (AlertDirection.ABOVE, "5000", True),
            (AlertDirection.ABOVE, "5000.01", True),
            (AlertDirection.ABOVE, "4999.99", False),
            (AlertDirection.BELOW, "5000", True),
            (AlertDirection.BELOW, "4999.99", True),
            (AlertDirection.BELOW, "5000.01", False),
        ],
    )
    def test_boundary_is_inclusive(
        self, direction: AlertDirection, price: str, expected: bool
    ) -> None:
        assert _alert(direction).is_crossed_by(Decimal(price)) is expected

    def test_mark_triggered_is_terminal(self) -> None:
        alert = _alert(AlertDirection.ABOVE)

        assert alert.mark_triggered(Decimal("5010"), NOW) is True
        assert alert.triggered
        assert alert.triggered_price == Decimal("5010")
        assert alert.triggered_at == NOW
        assert not alert.is_active

        assert alert.mark_triggered(Decimal("5020"), NOW) is False
        assert alert.triggered_price == Decimal("5010")

    def test_disabled_alert_is_not_active(self) -> None:
        alert = _alert(AlertDirection.ABOVE)
        alert.disable()
        assert not alert.is_active


class TestAlertPolicy:
    """Tests for AlertPolicy."""

    def test_should_trigger_on_crossing(self) -> None:
        policy = AlertPolicy()
        assert policy.should_trigger(_alert(AlertDirection.ABOVE), _price("5000"))

    def test_does_not_trigger_without_price(self) -> None:
        assert not AlertPolicy().should_trigger(_alert(AlertDirection.ABOVE), None)

    def test_does_not_trigger_on_non_positive_price(self) -> None:
        alert = _alert(AlertDirection.BELOW)
        assert not AlertPolicy().should_trigger(alert, _price("0"))

    def test_triggered_alert_never_fires_again(self) -> None:
        alert = _alert(AlertDirection.ABOVE, triggered=True)
        assert not AlertPolicy().should_trigger(alert, _price("6000"))

    def test_disabled_alert_does_not_fire(self) -> None:
        alert = _alert(AlertDirection.ABOVE, enabled=False)
        assert not AlertPolicy().should_trigger(alert, _price("6000"))

    def test_fallback_prices_eligible_by_default(self) -> None:
        policy = AlertPolicy()
        assert policy.is_eligible_price(_price("5100", Provenance.cached()))
        assert policy.is_eligible_price(_price("5100", Provenance.static()))

    def test_fallback_prices_can_be_excluded(self) -> None:
        policy = AlertPolicy(fire_on_cached=False, fire_on_static=False)
        alert = _alert(AlertDirection.ABOVE)

        assert not policy.should_trigger(alert, _price("5100", Provenance.cached()))
        assert not policy.should_trigger(alert, _price("5100", Provenance.static()))
        assert policy.should_trigger(alert, _price("5100"))

    def test_is_valid_target(self) -> None:
        assert AlertPolicy.is_valid_target(Decimal("0.01"))
        assert not AlertPolicy.is_valid_target(Decimal("0"))
