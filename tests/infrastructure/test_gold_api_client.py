"""Unit tests for GoldApiClient using httpx.MockTransport."""

from decimal import Decimal

import httpx
import pytest

from app.bullion_tracker.application.interfaces.price_source import FetchErrorKind
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.infrastructure.external.gold_api_client import GoldApiClient

PAYLOADS = {
    "XAU": {"metal": "XAU", "price": 5012.345, "ch": 12.3, "chp": 0.246, "prev_close_price": 5000.045},
    "XAG": {"metal": "XAG", "price": 31.2},
}


def _client(handler) -> GoldApiClient:
    return GoldApiClient("goldapi-token", transport=httpx.MockTransport(handler))


class TestGoldApiClient:
    """Tests for GoldApiClient.fetch."""

    @pytest.mark.asyncio
    async def test_prices_and_native_change(self) -> None:
        # Arrange
        tokens = []

        def handler(request: httpx.Request) -> httpx.Response:
            tokens.append(request.headers["x-access-token"])
            code = request.url.path.split("/")[2]
            return httpx.Response(200, json=PAYLOADS[code])

        # Act
        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD, Metal.SILVER])

        # Assert
        quote = result.quote
        assert quote.source == "goldapi-io"
        assert quote.amounts == {Metal.GOLD: Decimal("5012.35"), Metal.SILVER: Decimal("31.20")}
        gold_change = quote.changes[Metal.GOLD]
        assert gold_change.amount == Decimal("12.30")
        assert gold_change.percent == Decimal("0.25")
        assert gold_change.previous_close == Decimal("5000.05")
        assert Metal.SILVER not in quote.changes
        assert tokens == ["goldapi-token", "goldapi-token"]

    @pytest.mark.asyncio
    async def test_partial_failure_returns_partial_quote(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "XAG" in request.url.path:
                return httpx.Response(500)
            return httpx.Response(200, json=PAYLOADS["XAU"])

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD, Metal.SILVER])

        assert result.error is None
        assert set(result.quote.amounts) == {Metal.GOLD}

    @pytest.mark.asyncio
    async def test_total_failure_reports_most_severe_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "XAU" in request.url.path:
                return httpx.Response(403)
            raise httpx.ConnectTimeout("timed out", request=request)

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD, Metal.SILVER])

        assert result.quote is None
        assert result.error.kind == FetchErrorKind.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_missing_price_is_malformed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"metal": "XAU", "error": "No data"})

        async with _client(handler) as client:
            result = await client.fetch([Metal.GOLD])

        assert result.error.kind == FetchErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_missing_key(self) -> None:
        client = GoldApiClient(None, transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        result = await client.fetch([Metal.GOLD])
        await client.close()

        assert result.error.kind == FetchErrorKind.UNAUTHORIZED
