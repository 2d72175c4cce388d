#services/alpha_vantage/client.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from services.http.client import QUOTE_TIMEOUT_SEC, SECONDARY_TIMEOUT_SEC, UpstreamError, get_json
from services.stocks.models import StockSnapshot, Technicals
from utils.common_helpers import safe_float, safe_int

logger = logging.getLogger(__name__)

PROVIDER = "Alpha Vantage"

# Alpha Vantage answers 200 with one of these keys when throttled or misused
_ERROR_KEYS = ("Error Message", "Note", "Information")


def _latest(series: Any) -> Dict[str, Any]:
    """Most recent row of a "Technical Analysis: X" map (keys are dates)."""
    if not isinstance(series, dict) or not series:
        return {}
    return series[max(series)] or {}


class AlphaVantageClient:
    BASE_URL = "https://www.alphavantage.co/query"

    def __init__(self, api_key: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.client = client

    async def _query(self, function: str, timeout: float, **params: Any) -> Dict[str, Any]:
        data = await get_json(
            self.client,
            PROVIDER,
            self.BASE_URL,
            params={"function": function, **params, "apikey": self.api_key},
            timeout=timeout,
        )
        if not isinstance(data, dict):
            raise UpstreamError(PROVIDER, f"unexpected {function} payload")
        for key in _ERROR_KEYS:
            if data.get(key):
                raise UpstreamError(PROVIDER, f"API limit: {data[key]}")
        return data

    async def global_quote(self, symbol: str) -> Dict[str, Any]:
        data = await self._query("GLOBAL_QUOTE", QUOTE_TIMEOUT_SEC, symbol=symbol)
        quote = data.get("Global Quote")
        if not quote:
            raise UpstreamError(PROVIDER, f"no quote data for {symbol}")
        return quote

    async def overview(self, symbol: str) -> Dict[str, Any]:
        return await self._query("OVERVIEW", SECONDARY_TIMEOUT_SEC, symbol=symbol)

    async def technicals(self, symbol: str) -> Technicals:
        rsi_data, macd_data = await asyncio.gather(
            self._query("RSI", SECONDARY_TIMEOUT_SEC, symbol=symbol, interval="daily", time_period=14, series_type="close"),
            self._query("MACD", SECONDARY_TIMEOUT_SEC, symbol=symbol, interval="daily", series_type="close"),
            return_exceptions=True,
        )
        if isinstance(rsi_data, Exception) and isinstance(macd_data, Exception):
            raise UpstreamError(PROVIDER, f"technicals unavailable for {symbol}")

        rsi_row = {} if isinstance(rsi_data, Exception) else _latest(rsi_data.get("Technical Analysis: RSI"))
        macd_row = {} if isinstance(macd_data, Exception) else _latest(macd_data.get("Technical Analysis: MACD"))
        return Technicals(
            rsi=safe_float(rsi_row.get("RSI")),
            macd=safe_float(macd_row.get("MACD")),
            macd_signal=safe_float(macd_row.get("MACD_Signal")),
            macd_hist=safe_float(macd_row.get("MACD_Hist")),
        )

    async def price(self, symbol: str) -> float:
        quote = await self.global_quote(symbol)
        value = safe_float(quote.get("05. price"))
        if not value:
            raise UpstreamError(PROVIDER, f"no price for {symbol}")
        return value

    async def snapshot(
        self,
        symbol: str,
        include_technicals: bool = False,
        *,
        fallback_name: Optional[str] = None,
    ) -> StockSnapshot:
        quote, overview = await asyncio.gather(
            self.global_quote(symbol),
            self.overview(symbol),
            return_exceptions=True,
        )
        if isinstance(quote, BaseException):
            raise quote
        if isinstance(overview, BaseException):
            logger.debug("Alpha Vantage overview unavailable for %s: %s", symbol, overview)
            overview = {}

        technicals = None
        if include_technicals:
            try:
                technicals = await self.technicals(symbol)
            except UpstreamError as e:
                logger.debug("Alpha Vantage technicals unavailable for %s: %s", symbol, e)

        price = safe_float(quote.get("05. price")) or 0.0
        previous = safe_float(quote.get("08. previous close")) or price
        change = safe_float(quote.get("09. change"))
        if change is None:
            change = price - previous
        change_percent = safe_float(quote.get("10. change percent"))
        if change_percent is None:
            change_percent = (change / previous * 100) if previous else 0.0

        return StockSnapshot(
            symbol=(quote.get("01. symbol") or symbol).upper(),
            name=overview.get("Name") or fallback_name or f"{symbol.upper()} Stock",
            sector=overview.get("Sector") or "Unknown",
            industry=overview.get("Industry") or "Unknown",
            price=price,
            change=change,
            change_percent=change_percent,
            volume=safe_int(quote.get("06. volume")) or 0,
            market_cap=safe_float(overview.get("MarketCapitalization")),
            pe=safe_float(overview.get("PERatio")),
            eps=safe_float(overview.get("EPS")),
            dividend_yield=safe_float(overview.get("DividendYield")),
            beta=safe_float(overview.get("Beta")),
            week52_high=safe_float(overview.get("52WeekHigh")),
            week52_low=safe_float(overview.get("52WeekLow")),
            technicals=technicals,
        )
