from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx

from config.settings import Settings
from services.fmp.client import FmpClient
from services.macro.correlation_service import period_days, period_window
from services.mock_data.macro import mock_market_history, mock_sentiment_history
from services.orchestrator import DataQuality, FetchResult, Provider, first_successful, response_metadata
from services.stats.statistics import correlation_summary, pearson
from utils.common_helpers import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = "6m"
DEFAULT_METRIC = "sp500"
DEFAULT_PLATFORM = "combined"

MARKET_SYMBOLS = {"sp500": "^GSPC", "nasdaq": "^IXIC", "vix": "^VIX"}

# platform -> sentiment column
_PLATFORM_COLUMNS = {"reddit": "reddit", "twitter": "twitter", "combined": "sentiment"}


def _market_rows(closes: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Close series -> rows shaped like the synthetic history; `return` is the move in points."""
    rows = []
    prev = None
    for c in closes:
        move = 0.0 if prev is None else c["value"] - prev
        rows.append({
            "date": c["date"],
            "price": round_half_up(c["value"], 2),
            "return": round_half_up(move, 2),
            "volume": None,
        })
        prev = c["value"]
    return rows


def combine_series(
    sentiment: Sequence[Dict[str, Any]],
    market: Sequence[Dict[str, Any]],
    column: str = "sentiment",
) -> List[Dict[str, Any]]:
    by_date = {m["date"]: m for m in market}
    out = []
    for s in sentiment:
        m = by_date.get(s["date"])
        if m is None:
            continue
        out.append({
            "date": s["date"],
            "sentiment": s[column],
            "marketPrice": m["price"],
            "marketReturn": m["return"],
            "volume": m["volume"],
        })
    return out


def correlation_insights(r: float) -> Dict[str, str]:
    return {
        "leadingIndicator": (
            "Sentiment appears to lead market movements by 1-3 days"
            if r > 0.2
            else "No clear leading relationship detected"
        ),
        "strongestCorrelation": "Reddit sentiment shows stronger correlation than Twitter during volatile periods",
        "volatilityImpact": "Extreme sentiment readings often precede increased market volatility",
        "extremeEvents": f"Extreme sentiment readings predict market direction with {round(abs(r) * 100)}% correlation",
        "recommendation": (
            "Sentiment can be used as a supplementary indicator for market timing"
            if r > 0.3
            else "Sentiment shows weak predictive power - use with caution"
        ),
    }


def _payload(
    sentiment: List[Dict[str, Any]],
    market: List[Dict[str, Any]],
    *,
    period: str,
    metric: str,
    platform: str,
    quality: DataQuality,
    error: Optional[str],
) -> Dict[str, Any]:
    combined = combine_series(sentiment, market, _PLATFORM_COLUMNS.get(platform, "sentiment"))
    r = pearson([c["sentiment"] for c in combined], [c["marketReturn"] for c in combined])
    return {
        "correlation": correlation_summary(r),
        "data": {"combined": combined, "sentiment": sentiment, "market": market},
        "insights": correlation_insights(r),
        "metadata": response_metadata(
            quality,
            error=error,
            period=period,
            metric=metric,
            platform=platform,
            dataPoints=len(combined),
        ),
    }


async def get_sentiment_correlation(
    settings: Settings,
    client: httpx.AsyncClient,
    *,
    period: str = DEFAULT_PERIOD,
    metric: str = DEFAULT_METRIC,
    platform: str = DEFAULT_PLATFORM,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Sentiment history is always synthetic (nothing is persisted between
    requests), so the best achievable quality is "mixed": synthetic
    sentiment against live index history.
    """
    rng = rng or random.Random()
    days = period_days(period)
    start, end = period_window(period, today)
    sentiment = mock_sentiment_history(days, rng, today)

    async def _index_history() -> List[Dict[str, Any]]:
        symbol = MARKET_SYMBOLS.get(metric, MARKET_SYMBOLS[DEFAULT_METRIC])
        closes = await FmpClient(settings.fmp_api_key, client).daily_closes(symbol, start, end)
        return _market_rows(closes)

    market: FetchResult[List[Dict[str, Any]]] = await first_successful(
        [Provider("FMP", bool(settings.fmp_api_key), _index_history)],
        lambda: mock_market_history(days, rng, today),
        dataset="sentiment-correlation",
    )

    quality = DataQuality.MIXED if market.is_live else DataQuality.MOCK
    error = market.error_message()
    if error is None:
        error = "Historical sentiment is simulated"
    return _payload(
        sentiment,
        market.value,
        period=period,
        metric=metric,
        platform=platform,
        quality=quality,
        error=error,
    )


def sentiment_correlation_fallback(
    error: str,
    *,
    period: str = DEFAULT_PERIOD,
    metric: str = DEFAULT_METRIC,
    platform: str = DEFAULT_PLATFORM,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()
    days = period_days(period)
    return _payload(
        mock_sentiment_history(days, rng),
        mock_market_history(days, rng),
        period=period,
        metric=metric,
        platform=platform,
        quality=DataQuality.MOCK,
        error=error,
    )
