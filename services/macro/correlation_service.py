# services/macro/correlation_service.py
"""
Daily-return correlations between equities and macro indicators.

Price history comes from FMP; indicators with a FRED series are read from
FRED when a FRED key is configured. Series are joined on date before returns
are taken, so weekends and holidays missing from one side do not shift the
other. A pair without enough overlapping history falls back to its typical
correlation and is tagged "mock".
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

import httpx

from config.settings import Settings
from services.fmp.client import FmpClient
from services.fred.client import FredClient
from services.http.client import UpstreamError
from services.mock_data.macro import typical_correlation
from services.orchestrator import (
    DataQuality,
    FallbackReason,
    FetchResult,
    combine_quality,
    response_metadata,
)
from services.stats.statistics import align_by_date, pearson, returns
from utils.common_helpers import round_half_up

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"1m": 30, "3m": 90, "6m": 180, "1y": 365, "2y": 730}
DEFAULT_PERIOD = "1y"
DEFAULT_SYMBOLS = ("SPY",)
MIN_OVERLAP = 3


@dataclass(frozen=True)
class MacroIndicator:
    symbol: str
    name: str
    fmp_symbol: str
    fred_code: Optional[str] = None


MACRO_INDICATORS: Sequence[MacroIndicator] = (
    MacroIndicator("DXY", "US Dollar Index", "DX-Y.NYB", "DEXUSEU"),
    MacroIndicator("TNX", "10-Year Treasury", "^TNX", "DGS10"),
    MacroIndicator("VIX", "Volatility Index", "^VIX"),
    MacroIndicator("GLD", "Gold ETF", "GLD", "GOLDAMGBD228NLBM"),
    MacroIndicator("OIL", "Oil Futures", "CLUSD", "DCOILWTICO"),
    MacroIndicator("BTC-USD", "Bitcoin", "BTCUSD"),
    MacroIndicator("EUR=X", "EUR/USD", "EURUSD", "DEXUSEU"),
)


def period_days(period: str) -> int:
    return PERIOD_DAYS.get(period, PERIOD_DAYS[DEFAULT_PERIOD])


def period_window(period: str, today: Optional[date] = None) -> tuple[date, date]:
    end = today or date.today()
    return end - timedelta(days=period_days(period)), end


def _entry(stock: str, indicator: MacroIndicator, r: float) -> Dict[str, Any]:
    return {
        "stock": stock,
        "macro": indicator.symbol,
        "correlation": round_half_up(r, 2),
        "macroName": indicator.name,
    }


def return_correlation(left: List[Dict[str, Any]], right: List[Dict[str, Any]]) -> float:
    """Pearson r of daily returns over the dates both series share."""
    joined = align_by_date(left, right)
    if len(joined) < MIN_OVERLAP:
        raise UpstreamError("history", f"only {len(joined)} overlapping observations")
    return pearson(returns(joined["left"]), returns(joined["right"]))


async def _indicator_series(
    indicator: MacroIndicator,
    fmp: FmpClient,
    fred: Optional[FredClient],
    start: date,
    end: date,
) -> tuple[str, List[Dict[str, Any]]]:
    if fred is not None and indicator.fred_code:
        return "FRED", await fred.observations(indicator.fred_code, start=start)
    return "FMP", await fmp.daily_closes(indicator.fmp_symbol, start, end)


def _insights(results: Sequence[FetchResult[Dict[str, Any]]]) -> Dict[str, str]:
    entries = [r.value for r in results]
    if not entries:
        return {
            "strongestPositive": "No correlations computed",
            "strongestNegative": "No correlations computed",
            "volatilityDriver": "No correlations computed",
        }

    top = max(entries, key=lambda e: e["correlation"])
    bottom = min(entries, key=lambda e: e["correlation"])

    by_macro: Dict[str, List[float]] = {}
    names: Dict[str, str] = {}
    for e in entries:
        by_macro.setdefault(e["macro"], []).append(abs(e["correlation"]))
        names[e["macro"]] = e["macroName"]
    driver = max(by_macro, key=lambda m: sum(by_macro[m]) / len(by_macro[m]))

    positive = (
        f"{top['stock']} moves most closely with {top['macroName']} (r = {top['correlation']:+.2f})"
        if top["correlation"] > 0
        else "No positive macro relationships in this window"
    )
    negative = (
        f"{bottom['stock']} moves most inversely to {bottom['macroName']} (r = {bottom['correlation']:+.2f})"
        if bottom["correlation"] < 0
        else "No inverse macro relationships in this window"
    )
    return {
        "strongestPositive": positive,
        "strongestNegative": negative,
        "volatilityDriver": f"{names[driver]} shows the largest average co-movement with the selected stocks",
    }


def _payload(
    symbols: Sequence[str],
    period: str,
    results: Sequence[FetchResult[Dict[str, Any]]],
    error: Optional[str],
) -> Dict[str, Any]:
    quality = combine_quality(results)
    correlations = [{**r.value, "dataQuality": r.quality.value} for r in results]
    return {
        "correlations": correlations,
        "insights": _insights(results),
        "metadata": response_metadata(quality, error=error, symbols=list(symbols), period=period),
    }


def _typical_results(
    symbols: Sequence[str],
    rng: random.Random,
    reason: FallbackReason,
) -> List[FetchResult[Dict[str, Any]]]:
    return [
        FetchResult.mock(_entry(stock, ind, typical_correlation(stock, ind.symbol, rng)), reason)
        for stock in symbols
        for ind in MACRO_INDICATORS
    ]


async def get_macro_correlations(
    settings: Settings,
    client: httpx.AsyncClient,
    symbols: Sequence[str],
    *,
    period: str = DEFAULT_PERIOD,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()

    if not settings.fmp_api_key:
        logger.info("macro-correlations: no price-history credentials configured, using typical correlations")
        results = _typical_results(symbols, rng, FallbackReason.NO_CREDENTIALS)
        return _payload(symbols, period, results, results[0].error_message() if results else None)

    start, end = period_window(period, today)
    fmp = FmpClient(settings.fmp_api_key, client)
    fred = FredClient(settings.fred_api_key, client) if settings.fred_api_key else None

    stock_series, macro_series = await asyncio.gather(
        asyncio.gather(*(fmp.daily_closes(s, start, end) for s in symbols), return_exceptions=True),
        asyncio.gather(*(_indicator_series(i, fmp, fred, start, end) for i in MACRO_INDICATORS), return_exceptions=True),
    )

    results: List[FetchResult[Dict[str, Any]]] = []
    for stock, s_series in zip(symbols, stock_series):
        for indicator, m_series in zip(MACRO_INDICATORS, macro_series):
            try:
                if isinstance(s_series, Exception):
                    raise s_series
                if isinstance(m_series, Exception):
                    raise m_series
                source, series = m_series
                r = return_correlation(s_series, series)
            except UpstreamError as e:
                logger.warning("macro-correlations: %s vs %s unavailable: %s", stock, indicator.symbol, e)
                fallback = _entry(stock, indicator, typical_correlation(stock, indicator.symbol, rng))
                results.append(FetchResult.mock(fallback, FallbackReason.UPSTREAM_FAILED, [str(e)]))
                continue
            results.append(FetchResult.live(_entry(stock, indicator, r), f"FMP+{source}" if source != "FMP" else "FMP"))

    quality = combine_quality(results)
    error = None
    if quality is not DataQuality.LIVE:
        failed = sum(1 for r in results if not r.is_live)
        error = f"Live data unavailable for {failed} of {len(results)} pairs - showing typical correlations"
    return _payload(symbols, period, results, error)


def macro_correlations_fallback(
    symbols: Sequence[str],
    error: str,
    *,
    period: str = DEFAULT_PERIOD,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    results = _typical_results(symbols, rng or random.Random(), FallbackReason.UNEXPECTED_ERROR)
    return _payload(symbols, period, results, error)
