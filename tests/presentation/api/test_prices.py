"""Tests for the spot price, calibration and historical spot API router."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.bullion_tracker.application.interfaces.price_source import FetchErrorKind
from app.bullion_tracker.application.interfaces.proxy_quote_source import ProxyClose
from app.bullion_tracker.application.use_cases.calibrate_ratios import CalibrationService
from app.bullion_tracker.application.use_cases.compute_price_change import ChangeCalculator
from app.bullion_tracker.application.use_cases.resolve_prices import (
    LastKnownPriceCache,
    PriceResolver,
)
from app.bullion_tracker.application.use_cases.run_pricing_cycle import (
    LatestPriceStore,
    PricingCycle,
)
from app.bullion_tracker.domain.entities.calibration_ratio import CalibrationRatio
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.infrastructure.db.session import get_db_session
from app.bullion_tracker.presentation.api.dependencies import (
    get_calibration_service,
    get_pricing_cycle,
)
from app.bullion_tracker.presentation.api.prices import router
from app.core.config import Settings, get_settings
from fakes import StubPriceSource, StubProxyQuoteSource


@pytest.fixture
def source() -> StubPriceSource:
    return StubPriceSource(
        "metalpriceapi",
        amounts={
            Metal.GOLD: Decimal("5012.35"),
            Metal.SILVER: Decimal("31.20"),
            Metal.PLATINUM: Decimal("2410.00"),
            Metal.PALLADIUM: Decimal("1890.50"),
        },
    )


@pytest.fixture
def resolver(clock, source) -> PriceResolver:
    return PriceResolver([source], LastKnownPriceCache(), clock=clock)


@pytest.fixture
def proxy() -> StubProxyQuoteSource:
    return StubProxyQuoteSource(
        {ProxyInstrument.GLD: Decimal("461.13")},
        closes=[ProxyClose(ProxyInstrument.GLD, date(2026, 1, 9), Decimal("460.00"))],
    )


@pytest.fixture
def app(clock, resolver, proxy, history_repository, calibration_repository) -> FastAPI:
    """Create a test FastAPI app with the prices router over in-memory fakes."""
    cycle = PricingCycle(
        resolver=resolver,
        change_calculator=ChangeCalculator(history_repository),
        history_repository=history_repository,
        latest_store=LatestPriceStore(),
        clock=clock,
    )
    service = CalibrationService(
        proxy,
        resolver,
        calibration_repository,
        clock=clock,
    )

    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.dependency_overrides[get_pricing_cycle] = lambda: cycle
    app.dependency_overrides[get_calibration_service] = lambda: service
    app.dependency_overrides[get_db_session] = lambda: AsyncMock()
    app.dependency_overrides[get_settings] = lambda: Settings(spot_price_max_age_seconds=600)
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(app)


class TestSpotPrices:
    """Tests for GET /api/spot-prices."""

    def test_every_metal_is_priced(self, client: TestClient, history_repository) -> None:
        response = client.get("/api/spot-prices")

        assert response.status_code == 200
        data = response.json()
        assert data["all_live"] is True
        prices = {p["metal"]: p for p in data["prices"]}
        assert set(prices) == {"gold", "silver", "platinum", "palladium"}
        assert float(prices["gold"]["price"]) == 5012.35
        assert prices["gold"]["code"] == "XAU"
        assert prices["gold"]["provenance"] == "live"
        assert prices["gold"]["source"] == "metalpriceapi"
        assert prices["gold"]["change"] is None
        assert len(history_repository.records) == 4

    def test_fresh_snapshot_is_reused(self, client: TestClient, source) -> None:
        client.get("/api/spot-prices")
        client.get("/api/spot-prices")

        assert len(source.requests) == 1

    def test_all_sources_down_still_answers(self, clock, history_repository) -> None:
        """Test that an outage degrades to static prices instead of failing."""
        resolver = PriceResolver(
            [StubPriceSource("a", error=FetchErrorKind.UNAVAILABLE)],
            LastKnownPriceCache(),
            clock=clock,
        )
        cycle = PricingCycle(
            resolver, ChangeCalculator(history_repository), history_repository, clock=clock
        )
        app = FastAPI()
        app.include_router(router, prefix="/api")
        app.dependency_overrides[get_pricing_cycle] = lambda: cycle
        app.dependency_overrides[get_db_session] = lambda: AsyncMock()

        response = TestClient(app).get("/api/spot-prices")

        assert response.status_code == 200
        data = response.json()
        assert data["all_live"] is False
        assert {p["provenance"] for p in data["prices"]} == {"static"}
        assert history_repository.records == []


class TestCalibration:
    """Tests for GET /api/calibration/{instrument}."""

    def test_calibrates_today_on_demand(self, client: TestClient, calibration_repository) -> None:
        response = client.get("/api/calibration/gld")

        assert response.status_code == 200
        data = response.json()
        assert data["instrument"] == "GLD"
        assert data["metal"] == "gold"
        assert data["calibrated_on"] == "2026-01-14"
        assert data["is_stale"] is False
        assert len(calibration_repository.rows) == 1

    def test_past_date_serves_latest_on_or_before(self, client: TestClient, calibration_repository) -> None:
        calibration_repository.rows[(ProxyInstrument.SLV, date(2026, 1, 5))] = CalibrationRatio(
            id=1,
            instrument=ProxyInstrument.SLV,
            date=date(2026, 1, 5),
            instrument_ratio=Decimal("0.9180"),
            proxy_price=Decimal("27.54"),
            spot_price_used=Decimal("30.00"),
        )

        response = client.get("/api/calibration/SLV", params={"date": "2026-01-09"})

        data = response.json()
        assert float(data["ratio"]) == 0.918
        assert data["calibrated_on"] == "2026-01-05"
        assert data["is_stale"] is True

    def test_uncalibrated_instrument_uses_default(self, client: TestClient) -> None:
        response = client.get("/api/calibration/PALL")

        data = response.json()
        assert data["is_default"] is True
        assert float(data["ratio"]) == float(ProxyInstrument.PALL.default_ratio)

    def test_unknown_instrument(self, client: TestClient) -> None:
        response = client.get("/api/calibration/XYZ")

        assert response.status_code == 404
        assert "not supported" in response.json()["detail"]


class TestHistoricalSpot:
    """Tests for GET /api/historical-spot."""

    def test_weekend_date_estimated_from_friday_close(self, client: TestClient) -> None:
        response = client.get("/api/historical-spot", params={"metal": "gold", "date": "2026-01-11"})

        assert response.status_code == 200
        data = response.json()
        assert data["metal"] == "gold"
        assert data["requested_date"] == "2026-01-11"
        assert data["used_date"] == "2026-01-09"
        assert data["instrument"] == "GLD"
        assert data["source"] == "proxy-estimate"
        assert data["ratio_is_default"] is True
        assert float(data["price"]) == 5000.00

    def test_calibrated_ratio_is_applied(self, client: TestClient, calibration_repository) -> None:
        calibration_repository.rows[(ProxyInstrument.GLD, date(2026, 1, 2))] = CalibrationRatio(
            id=1,
            instrument=ProxyInstrument.GLD,
            date=date(2026, 1, 2),
            instrument_ratio=Decimal("0.0920"),
            proxy_price=Decimal("460.00"),
            spot_price_used=Decimal("5000.00"),
        )

        response = client.get("/api/historical-spot", params={"date": "2026-01-09"})

        data = response.json()
        assert data["ratio_is_default"] is False
        assert float(data["ratio"]) == 0.092
        assert float(data["price"]) == 5000.00

    def test_unknown_metal(self, client: TestClient) -> None:
        response = client.get("/api/historical-spot", params={"metal": "rhodium", "date": "2026-01-09"})

        assert response.status_code == 400

    def test_future_date(self, client: TestClient) -> None:
        response = client.get("/api/historical-spot", params={"date": "2026-02-01"})

        assert response.status_code == 400
        assert "future" in response.json()["detail"]

    def test_invalid_date_format(self, client: TestClient) -> None:
        response = client.get("/api/historical-spot", params={"date": "01/09/2026"})

        assert response.status_code == 422

    def test_no_proxy_session(self, client: TestClient) -> None:
        response = client.get("/api/historical-spot", params={"metal": "silver", "date": "2026-01-09"})

        assert response.status_code == 404

    def test_proxy_provider_down(self, client: TestClient, proxy) -> None:
        proxy.unavailable = True

        response = client.get("/api/historical-spot", params={"date": "2026-01-09"})

        assert response.status_code == 503
