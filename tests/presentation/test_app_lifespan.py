"""Tests for the application factory and its startup/shutdown lifespan."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app.bullion_tracker.application.use_cases.run_pricing_cycle import LatestPriceStore
from app.core.config import Settings
from app.main import create_app


def _runtime() -> AsyncMock:
    runtime = AsyncMock()
    runtime.latest_store = LatestPriceStore()
    return runtime


class TestLifespan:
    """Tests for create_app."""

    def test_runtime_seeded_and_closed(self) -> None:
        runtime = _runtime()
        app = create_app(Settings(run_schedulers=False), runtime=runtime)

        with TestClient(app) as client:
            response = client.get("/api/health")

        assert response.status_code == 200
        runtime.seed_cache.assert_awaited_once()
        runtime.close.assert_awaited_once()
        runtime.run_pricing_cycle.assert_not_awaited()

    def test_seed_failure_does_not_block_startup(self) -> None:
        runtime = _runtime()
        runtime.seed_cache.side_effect = ConnectionRefusedError("database unavailable")
        app = create_app(Settings(run_schedulers=False), runtime=runtime)

        with TestClient(app) as client:
            assert client.get("/api/health").status_code == 200

    def test_routes_mounted_under_api(self) -> None:
        app = create_app(Settings(run_schedulers=False), runtime=_runtime())
        paths = {route.path for route in app.routes}

        assert {
            "/api/health",
            "/api/spot-prices",
            "/api/calibration/{instrument}",
            "/api/price-alerts",
            "/api/price-alerts/{alert_id}",
            "/api/push-tokens",
            "/api/push-tokens/{token}",
        } <= paths
