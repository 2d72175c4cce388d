#services/fmp/client.py
"""
Financial Modeling Prep: quotes, company profiles, daily technicals and
daily price history. An empty list from a quote/profile endpoint means the
symbol is unknown to FMP and is reported as an error.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from services.http.client import QUOTE_TIMEOUT_SEC, SECONDARY_TIMEOUT_SEC, UpstreamError, get_json
from services.stocks.models import StockSnapshot, Technicals
from utils.common_helpers import safe_float, safe_int

logger = logging.getLogger(__name__)

PROVIDER = "FMP"


def _parse_range(value: Any) -> tuple[Optional[float], Optional[float]]:
    """FMP profile `range` looks like "124.17-199.62"."""
    if not isinstance(value, str) or "-" not in value:
        return None, None
    low, _, high = value.partition("-")
    return safe_float(low), safe_float(high)


class FmpClient:
    BASE_URL = "https://financialmodelingprep.com/api/v3"

    def __init__(self, api_key: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.client = client

    def _auth_params(self, **params: Any) -> Dict[str, Any]:
        return {**params, "apikey": self.api_key}

    async def _first_row(self, path: str, symbol: str, timeout: float) -> Dict[str, Any]:
        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/{path}/{symbol}",
            params=self._auth_params(),
            timeout=timeout,
        )
        if isinstance(data, dict) and data.get("Error Message"):
            raise UpstreamError(PROVIDER, data["Error Message"])
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise UpstreamError(PROVIDER, f"no {path} data for {symbol}")
        return data[0]

    async def quote(self, symbol: str) -> Dict[str, Any]:
        return await self._first_row("quote", symbol, QUOTE_TIMEOUT_SEC)

    async def profile(self, symbol: str) -> Dict[str, Any]:
        return await self._first_row("profile", symbol, SECONDARY_TIMEOUT_SEC)

    async def _indicator(self, symbol: str, kind: str, period: int) -> List[Dict[str, Any]]:
        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/technical_indicator/1day/{symbol}",
            params=self._auth_params(period=period, type=kind),
            timeout=SECONDARY_TIMEOUT_SEC,
        )
        return data if isinstance(data, list) else []

    async def technicals(self, symbol: str) -> Technicals:
        """
        RSI(14) plus a MACD proxy: the day-over-day change of SMA(12).
        Signal and histogram are not offered on this tier.
        """
        rsi_rows, sma_rows = await asyncio.gather(
            self._indicator(symbol, "rsi", 14),
            self._indicator(symbol, "sma", 12),
            return_exceptions=True,
        )
        rsi = None
        if isinstance(rsi_rows, list) and rsi_rows:
            rsi = safe_float(rsi_rows[0].get("rsi"))
        macd = None
        if isinstance(sma_rows, list) and len(sma_rows) > 1:
            latest, prior = safe_float(sma_rows[0].get("sma")), safe_float(sma_rows[1].get("sma"))
            if latest is not None and prior is not None:
                macd = latest - prior
        if isinstance(rsi_rows, Exception) and isinstance(sma_rows, Exception):
            raise UpstreamError(PROVIDER, f"technicals unavailable for {symbol}")
        return Technicals(rsi=rsi, macd=macd)

    async def snapshot(self, symbol: str, include_technicals: bool = False) -> StockSnapshot:
        quote, profile = await asyncio.gather(
            self.quote(symbol),
            self.profile(symbol),
            return_exceptions=True,
        )
        if isinstance(quote, BaseException):
            raise quote
        if isinstance(profile, BaseException):
            logger.debug("FMP profile unavailable for %s: %s", symbol, profile)
            profile = {}

        technicals = None
        if include_technicals:
            try:
                technicals = await self.technicals(symbol)
            except UpstreamError as e:
                logger.debug("FMP technicals unavailable for %s: %s", symbol, e)

        price = safe_float(quote.get("price")) or 0.0
        last_div = safe_float(profile.get("lastDiv"))
        range_low, range_high = _parse_range(profile.get("range"))
        return StockSnapshot(
            symbol=(quote.get("symbol") or symbol).upper(),
            name=profile.get("companyName") or quote.get("name") or f"{symbol.upper()} Stock",
            sector=profile.get("sector") or "Unknown",
            industry=profile.get("industry") or "Unknown",
            price=price,
            change=safe_float(quote.get("change")) or 0.0,
            change_percent=safe_float(quote.get("changesPercentage")) or 0.0,
            volume=safe_int(quote.get("volume")) or 0,
            market_cap=safe_float(quote.get("marketCap")) or safe_float(profile.get("mktCap")),
            pe=safe_float(quote.get("pe")) or safe_float(profile.get("pe")),
            eps=safe_float(quote.get("eps")) or safe_float(profile.get("eps")),
            dividend_yield=(last_div / price * 100) if last_div and price else None,
            beta=safe_float(profile.get("beta")),
            week52_high=safe_float(quote.get("yearHigh")) or range_high,
            week52_low=safe_float(quote.get("yearLow")) or range_low,
            technicals=technicals,
            exchange=profile.get("exchangeShortName") or None,
            currency=profile.get("currency") or None,
        )

    async def daily_closes(self, symbol: str, start: date, end: date) -> List[Dict[str, Any]]:
        """[{date, value}] oldest first."""
        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/historical-price-full/{symbol}",
            params=self._auth_params(**{"from": start.isoformat(), "to": end.isoformat()}),
            timeout=QUOTE_TIMEOUT_SEC,
        )
        rows = data.get("historical") if isinstance(data, dict) else None
        if not rows:
            raise UpstreamError(PROVIDER, f"no price history for {symbol}")

        series = []
        for row in rows:
            close = safe_float(row.get("close"))
            if row.get("date") and close is not None:
                series.append({"date": row["date"], "value": close})
        series.sort(key=lambda r: r["date"])
        return series
