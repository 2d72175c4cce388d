# services/valuation/shiller_service.py
"""
Shiller P/E (CAPE) snapshot: current reading, historical statistics and
optional return forecasts.

History comes from the multpl.com monthly table, then FRED, then a synthetic
series. The S&P 500 level is approximated from SPY x10 on Alpha Vantage.
When history is live the current CAPE is its latest observation; otherwise it
is the index level over the modeled ten-year average earnings.
"""
from __future__ import annotations

import asyncio
import logging
import random
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from config.settings import Settings
from services.alpha_vantage.client import AlphaVantageClient
from services.fred.client import FredClient
from services.http.client import UpstreamError
from services.mock_data.valuation import (
    DEFAULT_PERIOD,
    FALLBACK_SP500,
    period_months,
    synthetic_shiller_history,
    ten_year_average_earnings,
)
from services.multpl.client import fetch_shiller_table
from services.orchestrator import (
    DataQuality,
    FetchResult,
    Provider,
    first_successful,
    quality_of,
    response_metadata,
)
from services.stats.statistics import valuation_statistics
from services.valuation.forecaster import forecast_returns
from utils.common_helpers import iso_now, round_half_up, safe_float

logger = logging.getLogger(__name__)

FRED_CAPE_SERIES = "CAPE"
SPY_TO_SP500 = 10


def _trim(rows: List[Dict[str, Any]], period: str) -> List[Dict[str, Any]]:
    if period == "max":
        return rows
    return rows[-period_months(period):]


async def _sp500_level(av: AlphaVantageClient) -> Dict[str, float]:
    quote = await av.global_quote("SPY")
    price = safe_float(quote.get("05. price"))
    if not price:
        raise UpstreamError("Alpha Vantage", "no price for SPY")
    change_pct = safe_float(str(quote.get("10. change percent") or "").rstrip("%")) or 0.0
    return {
        "price": round_half_up(price * SPY_TO_SP500, 2),
        "change": round_half_up((safe_float(quote.get("09. change")) or 0.0) * SPY_TO_SP500, 2),
        "changePercent": round_half_up(change_pct, 2),
    }


def _assemble(
    history: FetchResult[List[Dict[str, Any]]],
    sp500: FetchResult[Dict[str, float]],
    *,
    period: str,
    include_forecasts: bool,
    today: Optional[date],
    error: Optional[str] = None,
    quality: Optional[DataQuality] = None,
) -> Dict[str, Any]:
    rows = history.value
    avg_earnings = ten_year_average_earnings(today)

    if history.is_live and rows:
        current = rows[-1]["shillerPE"]
    else:
        current = sp500.value["price"] / avg_earnings

    values = [r["shillerPE"] for r in rows]
    stats = valuation_statistics(values, current).to_dict() if values else None

    sources = [history.source or "synthetic", sp500.source or "sample", "modeled earnings"]
    if error is None:
        notes = [m for m in (history.error_message(), sp500.error_message()) if m]
        error = "; ".join(notes) or None

    return {
        "current": {
            "shillerPE": round_half_up(current, 1),
            "sp500Price": sp500.value["price"],
            "sp500Change": sp500.value["change"],
            "sp500ChangePercent": sp500.value["changePercent"],
            "tenYearAvgEarnings": round_half_up(avg_earnings, 2),
            "lastUpdated": iso_now(),
        },
        "statistics": stats,
        "historical": {"period": period, "data": rows, "count": len(rows)},
        "forecasts": forecast_returns(current) if include_forecasts else None,
        "metadata": response_metadata(
            quality or quality_of(history.is_live, sp500.is_live),
            error=error,
            sources=sources,
        ),
    }


async def get_shiller_pe(
    settings: Settings,
    client: httpx.AsyncClient,
    *,
    period: str = DEFAULT_PERIOD,
    include_forecasts: bool = False,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()

    async def _multpl() -> List[Dict[str, Any]]:
        return _trim(await fetch_shiller_table(client, settings.user_agent), period)

    async def _fred() -> List[Dict[str, Any]]:
        observations = await FredClient(settings.fred_api_key, client).observations(FRED_CAPE_SERIES)
        return _trim([{"date": o["date"], "shillerPE": o["value"]} for o in observations], period)

    av = AlphaVantageClient(settings.alpha_vantage_api_key or "", client)

    history, sp500 = await asyncio.gather(
        first_successful(
            [
                Provider("multpl.com", True, _multpl),
                Provider("FRED", bool(settings.fred_api_key), _fred),
            ],
            lambda: synthetic_shiller_history(period, rng, today),
            dataset="shiller-history",
        ),
        first_successful(
            [Provider("Alpha Vantage", bool(settings.alpha_vantage_api_key), lambda: _sp500_level(av))],
            lambda: dict(FALLBACK_SP500),
            dataset="sp500",
        ),
    )
    return _assemble(history, sp500, period=period, include_forecasts=include_forecasts, today=today)


def shiller_fallback(
    error: str,
    *,
    period: str = DEFAULT_PERIOD,
    include_forecasts: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    history = FetchResult(value=synthetic_shiller_history(period, rng or random.Random()), quality=DataQuality.MOCK)
    sp500 = FetchResult(value=dict(FALLBACK_SP500), quality=DataQuality.MOCK)
    return _assemble(
        history,
        sp500,
        period=period,
        include_forecasts=include_forecasts,
        today=None,
        error=error,
        quality=DataQuality.MOCK,
    )
