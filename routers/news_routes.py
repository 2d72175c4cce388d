# news_routes.py
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from config.settings import Settings
from routers.dependencies import get_app_settings, get_http_client
from schemas.envelopes import NewsResponse
from services.news.news_service import (
    DEFAULT_EU_QUERY,
    DEFAULT_HOURS,
    DEFAULT_LIMIT,
    DEFAULT_QUERY,
    european_news_fallback,
    get_european_news,
    get_market_news,
    market_news_fallback,
)
from utils.common_helpers import parse_int

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/news", response_model=NewsResponse)
async def market_news(
    query: str = DEFAULT_QUERY,
    limit: Optional[str] = None,
    hours: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    # unparsable or out-of-range values fall back to defaults or are clamped
    limit_n, hours_n = parse_int(limit, DEFAULT_LIMIT), parse_int(hours, DEFAULT_HOURS)
    try:
        return await get_market_news(settings, client, query=query, limit=limit_n, hours=hours_n)
    except Exception as e:
        logger.exception("news: unexpected failure")
        return market_news_fallback(
            f"Failed to fetch news: {e}", query=query, limit=limit_n, hours=hours_n
        )


@router.get("/eu-news", response_model=NewsResponse)
async def european_news(
    query: str = DEFAULT_EU_QUERY,
    limit: Optional[str] = None,
    hours: Optional[str] = None,
    country: str = "all",
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    # unparsable or out-of-range values fall back to defaults or are clamped
    limit_n, hours_n = parse_int(limit, DEFAULT_LIMIT), parse_int(hours, DEFAULT_HOURS)
    try:
        return await get_european_news(
            settings, client, query=query, limit=limit_n, hours=hours_n, country=country
        )
    except Exception as e:
        logger.exception("eu-news: unexpected failure")
        return european_news_fallback(
            f"Failed to fetch European news: {e}",
            query=query,
            limit=limit_n,
            hours=hours_n,
            country=country,
        )
