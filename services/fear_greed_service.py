"""
Fear & Greed index: seven 0-100 component scores blended with fixed weights.

Only market volatility is observed live (VIX via FMP); the remaining inputs
are fixed readings, so a live VIX makes the index "mixed" at best.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import httpx

from config.settings import Settings
from services.fmp.client import FmpClient
from services.http.client import UpstreamError
from services.orchestrator import DataQuality, Provider, first_successful, response_metadata
from utils.common_helpers import clamp, round_int, safe_float

logger = logging.getLogger(__name__)

WEIGHTS: Dict[str, float] = {
    "stockPriceMomentum": 0.2,
    "stockPriceStrength": 0.2,
    "stockPriceBreadth": 0.1,
    "putCallRatio": 0.1,
    "junkBondDemand": 0.1,
    "marketVolatility": 0.2,
    "safeHavenDemand": 0.1,
}

DEFAULT_VIX = 18.5
PUT_CALL_RATIO = 0.85
ADVANCING, DECLINING = 1200, 800
HIGH_YIELD_SPREAD = 4.2
MOMENTUM_SCORE = 75.0
STRENGTH_SCORE = 70.0
SAFE_HAVEN_SCORE = 65.0


def fear_greed_label(index: float) -> str:
    if index <= 25:
        return "Extreme Fear"
    if index <= 45:
        return "Fear"
    if index <= 55:
        return "Neutral"
    if index <= 75:
        return "Greed"
    return "Extreme Greed"


def _display_name(key: str) -> str:
    # stockPriceMomentum -> Stock Price Momentum
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return spaced[:1].upper() + spaced[1:]


def component_scores(vix: float) -> Dict[str, float]:
    """Lower VIX, put/call ratio and junk spreads all read as greed."""
    return {
        "stockPriceMomentum": MOMENTUM_SCORE,
        "stockPriceStrength": STRENGTH_SCORE,
        "stockPriceBreadth": ADVANCING / (ADVANCING + DECLINING) * 100,
        "putCallRatio": clamp((2 - PUT_CALL_RATIO) * 50, 0, 100),
        "junkBondDemand": clamp((10 - HIGH_YIELD_SPREAD) * 10, 0, 100),
        "marketVolatility": clamp((50 - vix) * 2, 0, 100),
        "safeHavenDemand": SAFE_HAVEN_SCORE,
    }


def build_index(vix: float) -> Dict[str, Any]:
    scores = component_scores(vix)
    index = round_int(sum(scores[k] * w for k, w in WEIGHTS.items()))
    return {
        "index": index,
        "label": fear_greed_label(index),
        "components": [
            {"name": _display_name(k), "value": round_int(v), "weight": round_int(WEIGHTS[k] * 100)}
            for k, v in scores.items()
        ],
        "vix": vix,
    }


async def get_fear_greed(settings: Settings, client: httpx.AsyncClient) -> Dict[str, Any]:
    async def _vix() -> float:
        quote = await FmpClient(settings.fmp_api_key, client).quote("^VIX")
        value = safe_float(quote.get("price"))
        if not value:
            raise UpstreamError("FMP", "no VIX level")
        return value

    vix = await first_successful(
        [Provider("FMP", bool(settings.fmp_api_key), _vix)],
        lambda: DEFAULT_VIX,
        dataset="fear-greed",
    )
    payload = build_index(vix.value)
    quality = DataQuality.MIXED if vix.is_live else DataQuality.MOCK
    payload["metadata"] = response_metadata(
        quality,
        error=vix.error_message(),
        vixSource=vix.source or "default",
    )
    return payload


def fear_greed_fallback(error: str) -> Dict[str, Any]:
    payload = build_index(DEFAULT_VIX)
    payload["metadata"] = response_metadata(DataQuality.MOCK, error=error, vixSource="default")
    return payload
