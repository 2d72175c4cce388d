# macro_routes.py
import logging
import random
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from config.settings import Settings
from routers.dependencies import get_app_settings, get_http_client, get_rng
from schemas.envelopes import MacroCorrelationsResponse, SentimentCorrelationResponse
from services.macro import correlation_service, sentiment_correlation_service as sentiment_corr
from utils.common_helpers import parse_symbols

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/macro-correlations", response_model=MacroCorrelationsResponse)
async def macro_correlations(
    symbols: Optional[str] = None,
    period: str = correlation_service.DEFAULT_PERIOD,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    rng: random.Random = Depends(get_rng),
):
    wanted = [s.upper() for s in parse_symbols(symbols, list(correlation_service.DEFAULT_SYMBOLS))]
    try:
        return await correlation_service.get_macro_correlations(settings, client, wanted, period=period, rng=rng)
    except Exception as e:
        logger.exception("macro-correlations: unexpected failure")
        return correlation_service.macro_correlations_fallback(
            wanted, f"Failed to calculate macro correlations: {e}", period=period, rng=rng
        )


@router.get("/sentiment-correlation", response_model=SentimentCorrelationResponse)
async def sentiment_correlation(
    period: str = sentiment_corr.DEFAULT_PERIOD,
    metric: str = sentiment_corr.DEFAULT_METRIC,
    platform: str = sentiment_corr.DEFAULT_PLATFORM,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    rng: random.Random = Depends(get_rng),
):
    try:
        return await sentiment_corr.get_sentiment_correlation(
            settings, client, period=period, metric=metric, platform=platform, rng=rng
        )
    except Exception as e:
        logger.exception("sentiment-correlation: unexpected failure")
        return sentiment_corr.sentiment_correlation_fallback(
            f"Failed to calculate sentiment correlation: {e}",
            period=period,
            metric=metric,
            platform=platform,
            rng=rng,
        )
