"""Tests for the push token API router."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.bullion_tracker.infrastructure.db.session import get_db_session
from app.bullion_tracker.presentation.api.dependencies import (
    get_destination_repository,
    get_notification_transport,
)
from app.bullion_tracker.presentation.api.push_tokens import router
from fakes import expo_token


@pytest.fixture
def app(destination_repository, transport) -> FastAPI:
    """Create a test FastAPI app with the push token router."""
    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.dependency_overrides[get_destination_repository] = lambda: destination_repository
    app.dependency_overrides[get_notification_transport] = lambda: transport
    app.dependency_overrides[get_db_session] = lambda: AsyncMock()
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(app)


class TestRegisterPushToken:
    """Tests for POST /api/push-tokens."""

    def test_register(self, client: TestClient, destination_repository) -> None:
        response = client.post(
            "/api/push-tokens",
            json={"owner_ref": "device-abc", "token": expo_token(1), "platform": "android"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token"] == expo_token(1)
        assert data["platform"] == "android"
        assert expo_token(1) in destination_repository.destinations

    def test_invalid_token_format(self, client: TestClient) -> None:
        response = client.post(
            "/api/push-tokens",
            json={"owner_ref": "device-abc", "token": "fcm:abcdef"},
        )

        assert response.status_code == 400
        assert "invalid push token" in response.json()["detail"].lower()

    def test_invalid_platform(self, client: TestClient) -> None:
        response = client.post(
            "/api/push-tokens",
            json={"owner_ref": "device-abc", "token": expo_token(1), "platform": "windows"},
        )

        assert response.status_code == 422


class TestRemovePushToken:
    """Tests for DELETE /api/push-tokens/{token}."""

    def test_remove(self, client: TestClient, destination_repository) -> None:
        client.post("/api/push-tokens", json={"owner_ref": "device-abc", "token": expo_token(1)})

        response = client.delete(f"/api/push-tokens/{expo_token(1)}")

        assert response.status_code == 204
        assert destination_repository.destinations == {}

    def test_remove_unknown(self, client: TestClient) -> None:
        response = client.delete(f"/api/push-tokens/{expo_token(9)}")

        assert response.status_code == 404
