"""Yahoo Finance chart API client for proxy instrument (ETF) quotes.

Uses the public ``/v8/finance/chart/{symbol}`` endpoint. Current prices
come from ``chart.result[0].meta.regularMarketPrice``; daily closes from
``chart.result[0].indicators.quote[0].close`` paired with
``chart.result[0].timestamp``. No authentication is needed.
"""

import asyncio
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

import httpx

from app.bullion_tracker.application.exceptions import SourceUnavailableError
from app.bullion_tracker.application.interfaces.proxy_quote_source import (
    ProxyClose,
    ProxyQuoteSource,
)
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.infrastructure.external.http_errors import describe_http_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

# Covers a weekend plus a one-day market holiday
CLOSE_LOOKBACK_DAYS = 5

SOURCE_NAME = "yahoo-finance"


class YahooQuoteClient(ProxyQuoteSource):
    """Yahoo Finance client implementing the ProxyQuoteSource interface."""

    def __init__(
        self,
        base_url: str = "https://query1.finance.yahoo.com",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the Yahoo Finance client.

        Args:
            base_url: Chart API base URL.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={
                "Accept": "application/json",
                "User-Agent": "Mozilla/5.0 (compatible; bullion-tracker)",
            },
            transport=transport,
        )

    async def fetch_quotes(
        self, instruments: Iterable[ProxyInstrument]
    ) -> dict[ProxyInstrument, Decimal]:
        """Fetch the latest market price of each instrument concurrently.

        Args:
            instruments: Instruments to quote.

        Returns:
            Prices keyed by instrument; unpriced instruments are omitted.

        Raises:
            SourceUnavailableError: If no instrument could be priced.
        """
        targets = list(instruments)
        if not targets:
            return {}

        prices = await asyncio.gather(*(self._fetch_price(i) for i in targets))
        quotes = {
            instrument: price
            for instrument, price in zip(targets, prices)
            if price is not None
        }

        if not quotes:
            raise SourceUnavailableError(SOURCE_NAME, "no instrument could be priced")

        logger.debug(f"Fetched {len(quotes)}/{len(targets)} proxy quotes")
        return quotes

    async def _fetch_price(self, instrument: ProxyInstrument) -> Optional[Decimal]:
        try:
            response = await self._client.get(
                f"/v8/finance/chart/{instrument.value}",
                params={"interval": "1d", "range": "1d"},
            )
            response.raise_for_status()
            data = response.json()
            price = data["chart"]["result"][0]["meta"]["regularMarketPrice"]
            value = Decimal(str(price))
        except httpx.TimeoutException:
            logger.error(f"Timeout fetching {instrument.value} quote")
            return None
        except httpx.HTTPError as e:
            logger.error(f"HTTP error fetching {instrument.value} quote: {e}")
            return None
        except (KeyError, IndexError, TypeError, ValueError, InvalidOperation) as e:
            logger.error(f"Error parsing {instrument.value} quote: {e}")
            return None

        if not value.is_finite() or value <= 0:
            logger.warning(f"Ignoring non-positive {instrument.value} quote: {price}")
            return None
        return value

    async def fetch_close(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[ProxyClose]:
        """Fetch the close of the last session on or before ``on_date``.

        Requests daily bars for the ``CLOSE_LOOKBACK_DAYS`` days ending on
        ``on_date`` so that weekends resolve to the preceding Friday.

        Args:
            instrument: Instrument to look up.
            on_date: Date of interest.

        Returns:
            ProxyClose for the latest session in the window, or None.

        Raises:
            SourceUnavailableError: If the request failed or the body is unusable.
        """
        start = datetime.combine(
            on_date - timedelta(days=CLOSE_LOOKBACK_DAYS), time.min, tzinfo=timezone.utc
        )
        end = datetime.combine(on_date + timedelta(days=1), time.min, tzinfo=timezone.utc)

        try:
            response = await self._client.get(
                f"/v8/finance/chart/{instrument.value}",
                params={
                    "interval": "1d",
                    "period1": int(start.timestamp()),
                    "period2": int(end.timestamp()),
                },
            )
            response.raise_for_status()
            result = response.json()["chart"]["result"][0]
            timestamps = result.get("timestamp") or []
            quotes = result.get("indicators", {}).get("quote") or [{}]
            closes = quotes[0].get("close") or []
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to fetch {instrument.value} history for {on_date}: "
                f"{describe_http_error(e)}"
            )
            raise SourceUnavailableError(SOURCE_NAME, describe_http_error(e)) from e
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            logger.error(f"Error parsing {instrument.value} history: {e}")
            raise SourceUnavailableError(SOURCE_NAME, f"unparsable chart response: {e}") from e

        latest: Optional[ProxyClose] = None
        for timestamp, close in zip(timestamps, closes):
            if close is None or isinstance(timestamp, bool):
                continue
            try:
                trading_date = datetime.fromtimestamp(timestamp, tz=timezone.utc).date()
                price = Decimal(str(close))
            except (TypeError, ValueError, OverflowError, OSError, InvalidOperation):
                continue
            if trading_date > on_date or not price.is_finite() or price <= 0:
                continue
            if latest is None or trading_date >= latest.trading_date:
                latest = ProxyClose(instrument, trading_date, price)

        if latest is None:
            logger.info(f"No {instrument.value} session on or before {on_date}")
        return latest

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
