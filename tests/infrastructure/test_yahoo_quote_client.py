"""Unit tests for YahooQuoteClient using httpx.MockTransport."""

from datetime import date, datetime, timezone
from decimal import Decimal

import httpx
import pytest

from app.bullion_tracker.application.exceptions import SourceUnavailableError
from app.bullion_tracker.application.interfaces.proxy_quote_source import ProxyClose
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.infrastructure.external.yahoo_quote_client import YahooQuoteClient


def _chart(price) -> dict:
    return {"chart": {"result": [{"meta": {"regularMarketPrice": price}}], "error": None}}


class TestYahooQuoteClient:
    """Tests for YahooQuoteClient.fetch_quotes."""

    @pytest.mark.asyncio
    async def test_reads_regular_market_price(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["interval"] == "1d"
            symbol = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=_chart({"GLD": 460.12, "SLV": 28.4}[symbol]))

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        quotes = await client.fetch_quotes([ProxyInstrument.GLD, ProxyInstrument.SLV])
        await client.close()

        assert quotes == {
            ProxyInstrument.GLD: Decimal("460.12"),
            ProxyInstrument.SLV: Decimal("28.4"),
        }

    @pytest.mark.asyncio
    async def test_unpriced_instruments_are_omitted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/PALL"):
                return httpx.Response(200, json={"chart": {"result": [], "error": None}})
            if request.url.path.endswith("/PPLT"):
                return httpx.Response(200, json=_chart(0))
            return httpx.Response(200, json=_chart(460.12))

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        quotes = await client.fetch_quotes(list(ProxyInstrument))
        await client.close()

        assert set(quotes) == {ProxyInstrument.GLD, ProxyInstrument.SLV}

    @pytest.mark.asyncio
    async def test_nothing_priced_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        with pytest.raises(SourceUnavailableError):
            await client.fetch_quotes([ProxyInstrument.GLD])
        await client.close()


def _session(day: date) -> int:
    return int(datetime(day.year, day.month, day.day, 14, 30, tzinfo=timezone.utc).timestamp())


def _history(days: list, closes: list) -> dict:
    return {
        "chart": {
            "result": [
                {
                    "timestamp": [_session(d) for d in days],
                    "indicators": {"quote": [{"close": closes}]},
                }
            ],
            "error": None,
        }
    }


class TestYahooFetchClose:
    """Tests for YahooQuoteClient.fetch_close."""

    @pytest.mark.asyncio
    async def test_weekend_resolves_to_friday_close(self) -> None:
        sunday = date(2026, 1, 11)

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v8/finance/chart/GLD"
            start = datetime(2026, 1, 6, tzinfo=timezone.utc)
            end = datetime(2026, 1, 12, tzinfo=timezone.utc)
            assert request.url.params["period1"] == str(int(start.timestamp()))
            assert request.url.params["period2"] == str(int(end.timestamp()))
            return httpx.Response(
                200,
                json=_history([date(2026, 1, 8), date(2026, 1, 9)], [455.5, 460.25]),
            )

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        close = await client.fetch_close(ProxyInstrument.GLD, sunday)
        await client.close()

        assert close == ProxyClose(ProxyInstrument.GLD, date(2026, 1, 9), Decimal("460.25"))

    @pytest.mark.asyncio
    async def test_null_closes_are_skipped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json=_history([date(2026, 1, 8), date(2026, 1, 9)], [28.1, None]),
            )

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        close = await client.fetch_close(ProxyInstrument.SLV, date(2026, 1, 9))
        await client.close()

        assert close is not None
        assert close.trading_date == date(2026, 1, 8)
        assert close.price == Decimal("28.1")

    @pytest.mark.asyncio
    async def test_no_session_in_window_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"chart": {"result": [{"indicators": {"quote": [{}]}}]}})

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        assert await client.fetch_close(ProxyInstrument.PALL, date(2026, 1, 1)) is None
        await client.close()

    @pytest.mark.asyncio
    async def test_http_error_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        with pytest.raises(SourceUnavailableError):
            await client.fetch_close(ProxyInstrument.GLD, date(2026, 1, 9))
        await client.close()

    @pytest.mark.asyncio
    async def test_null_result_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"chart": {"result": None, "error": {"code": "Not Found"}}}
            )

        client = YahooQuoteClient(transport=httpx.MockTransport(handler))
        with pytest.raises(SourceUnavailableError):
            await client.fetch_close(ProxyInstrument.GLD, date(2026, 1, 9))
        await client.close()
