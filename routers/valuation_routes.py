# valuation_routes.py
import logging
import random
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from config.settings import Settings
from routers.dependencies import get_app_settings, get_http_client, get_rng
from schemas.envelopes import FearGreedResponse, ShillerResponse
from services.fear_greed_service import fear_greed_fallback, get_fear_greed
from services.mock_data.valuation import DEFAULT_PERIOD
from services.valuation.shiller_service import get_shiller_pe, shiller_fallback
from utils.common_helpers import parse_flag

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/shiller-pe", response_model=ShillerResponse)
async def shiller_pe(
    period: str = DEFAULT_PERIOD,
    forecasts: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    rng: random.Random = Depends(get_rng),
):
    include_forecasts = parse_flag(forecasts)
    try:
        return await get_shiller_pe(settings, client, period=period, include_forecasts=include_forecasts, rng=rng)
    except Exception as e:
        logger.exception("shiller-pe: unexpected failure")
        return shiller_fallback(
            f"Failed to fetch Shiller P/E data: {e}", period=period, include_forecasts=include_forecasts, rng=rng
        )


@router.get("/fear-greed", response_model=FearGreedResponse)
async def fear_greed(
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        return await get_fear_greed(settings, client)
    except Exception as e:
        logger.exception("fear-greed: unexpected failure")
        return fear_greed_fallback(f"Failed to calculate Fear & Greed Index: {e}")
