"""Market data HTTP client for monthly price history"""

import asyncio
import logging
import time
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

import httpx

from save_invest.config import settings
from save_invest.domain.exceptions import MarketDataError
from save_invest.domain.models import VehicleMetrics
from save_invest.domain.vehicles import compute_vehicle_metrics
from save_invest.infrastructure.observability.metrics import market_data_failures_counter

TIME_SERIES_KEY = "Monthly Time Series"
CLOSE_KEY = "4. close"


def parse_monthly_closes(payload: dict) -> List[Tuple[date, float]]:
    """
    Extract (month end, close) pairs from a monthly time series response.

    Raises:
        MarketDataError: rate-limit notes or a missing/malformed series
    """
    if not isinstance(payload, dict):
        raise MarketDataError("Unexpected market data response")

    note = payload.get("Note") or payload.get("Information")
    if note:
        raise MarketDataError(f"Market data API refused request: {note}")

    series = payload.get(TIME_SERIES_KEY)
    if not isinstance(series, dict):
        raise MarketDataError("Invalid time series data structure")

    try:
        return [(date.fromisoformat(day), float(values[CLOSE_KEY])) for day, values in series.items()]
    except (KeyError, ValueError, TypeError) as e:
        raise MarketDataError(f"Invalid price data: {e}") from e


class MarketDataClient:
    """Client for an Alpha Vantage style monthly time series API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        cache_seconds: float | None = None,
        min_interval_seconds: float | None = None,
        risk_free_rate: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.market_data_api_base
        self.api_key = api_key or settings.market_data_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.cache_seconds = settings.market_data_cache_seconds if cache_seconds is None else cache_seconds
        self.min_interval_seconds = (
            settings.market_data_min_interval_seconds if min_interval_seconds is None else min_interval_seconds
        )
        self.risk_free_rate = settings.risk_free_rate if risk_free_rate is None else risk_free_rate
        self.transport = transport
        self._cache: Dict[str, Tuple[float, VehicleMetrics]] = {}
        self._last_call: Optional[float] = None

    def _cached(self, ticker: str) -> Optional[VehicleMetrics]:
        entry = self._cache.get(ticker)
        if entry and time.monotonic() - entry[0] < self.cache_seconds:
            return entry[1]
        return None

    async def _throttle(self) -> None:
        if self._last_call is not None:
            wait = self.min_interval_seconds - (time.monotonic() - self._last_call)
            if wait > 0:
                await asyncio.sleep(wait)
        self._last_call = time.monotonic()

    async def get_metrics(self, ticker: str) -> VehicleMetrics:
        """
        Fetch monthly closes for a ticker and derive return/volatility metrics.

        Raises:
            MarketDataError: On timeout, HTTP errors, rate limiting, or unusable data
        """
        cached = self._cached(ticker)
        if cached is not None:
            return cached

        await self._throttle()

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    self.base_url,
                    params={"function": "TIME_SERIES_MONTHLY", "symbol": ticker, "apikey": self.api_key},
                )
                response.raise_for_status()
                payload = response.json()
            except httpx.TimeoutException as e:
                raise MarketDataError(f"Market data API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise MarketDataError(f"Market data API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise MarketDataError(f"Market data API unreachable: {e}") from e
            except ValueError as e:
                raise MarketDataError(f"Market data API returned invalid JSON: {e}") from e

        metrics = compute_vehicle_metrics(ticker, parse_monthly_closes(payload), self.risk_free_rate)
        if metrics is None:
            raise MarketDataError(f"Not enough price history for {ticker}")

        self._cache[ticker] = (time.monotonic(), metrics)
        return metrics

    async def refresh(self, tickers: Sequence[str]) -> Dict[str, VehicleMetrics]:
        """Fetch metrics for each ticker; failures are logged and left out of the result"""
        result: Dict[str, VehicleMetrics] = {}
        for ticker in tickers:
            try:
                result[ticker] = await self.get_metrics(ticker)
            except MarketDataError as e:
                market_data_failures_counter.inc()
                logging.warning(f"Market data refresh failed for {ticker}: {e}", extra={"ticker": ticker})
        return result
