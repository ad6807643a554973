"""Unit tests for MetalPriceApiClient using httpx.MockTransport."""

from decimal import Decimal

import httpx
import pytest

from app.bullion_tracker.application.interfaces.price_source import FetchErrorKind
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.infrastructure.external.metal_price_api_client import (
    MetalPriceApiClient,
)


def _client(handler, api_key: str = "test-key") -> MetalPriceApiClient:
    return MetalPriceApiClient(api_key, transport=httpx.MockTransport(handler))


class TestMetalPriceApiClient:
    """Tests for MetalPriceApiClient.fetch."""

    @pytest.mark.asyncio
    async def test_inverts_rates_to_usd_per_ounce(self) -> None:
        # Arrange
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"success": True, "base": "USD", "rates": {"XAU": 0.0002, "XAG": 0.032}},
            )

        # Act
        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD, Metal.SILVER])

        # Assert
        assert result.error is None
        assert result.quote.source == "metalpriceapi"
        assert result.quote.amounts == {
            Metal.GOLD: Decimal("5000.00"),
            Metal.SILVER: Decimal("31.25"),
        }
        assert result.quote.changes == {}

        [request] = seen
        assert request.url.path == "/v1/latest"
        assert request.url.params["api_key"] == "test-key"
        assert request.url.params["base"] == "USD"
        assert request.url.params["currencies"] == "XAU,XAG"

    @pytest.mark.asyncio
    async def test_unusable_rates_are_left_out(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True, "rates": {"XAU": 0.0002, "XPT": 0}})

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD, Metal.PLATINUM, Metal.PALLADIUM])

        assert set(result.quote.amounts) == {Metal.GOLD}

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with _client(handler, api_key="") as client:
            result = await client.fetch([Metal.GOLD])

        assert result.error.kind == FetchErrorKind.UNAUTHORIZED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, expected",
        [
            ({"statusCode": 101, "info": "Invalid API key"}, FetchErrorKind.UNAUTHORIZED),
            ({"statusCode": 104, "info": "Monthly quota reached"}, FetchErrorKind.UNAVAILABLE),
        ],
    )
    async def test_error_body(self, error, expected) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "error": error})

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD])

        assert result.quote is None
        assert result.error.kind == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, expected",
        [
            (401, FetchErrorKind.UNAUTHORIZED),
            (403, FetchErrorKind.UNAUTHORIZED),
            (500, FetchErrorKind.UNAVAILABLE),
            (503, FetchErrorKind.UNAVAILABLE),
        ],
    )
    async def test_http_status(self, status, expected) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={})

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD])

        assert result.error.kind == expected

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD])

        assert result.error.kind == FetchErrorKind.TIMEOUT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [b"<html>Bad Gateway</html>", b'{"success": true}', b'{"success": true, "rates": {}}'],
    )
    async def test_malformed_response(self, body) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD])

        assert result.error.kind == FetchErrorKind.MALFORMED_RESPONSE
