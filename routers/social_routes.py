# social_routes.py
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from config.settings import Settings
from routers.dependencies import get_app_settings, get_http_client
from schemas.envelopes import RedditResponse, TwitterResponse
from services.social.social_service import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_REDDIT_LIMIT,
    DEFAULT_SUBREDDIT,
    DEFAULT_TIMEFRAME,
    DEFAULT_TWITTER_QUERY,
    get_reddit_posts,
    get_tweets,
    reddit_fallback,
    twitter_fallback,
)
from utils.common_helpers import parse_int

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/reddit", response_model=RedditResponse)
async def reddit_posts(
    subreddit: str = DEFAULT_SUBREDDIT,
    limit: Optional[str] = None,
    timeframe: str = DEFAULT_TIMEFRAME,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        return await get_reddit_posts(
            settings,
            client,
            subreddit=subreddit,
            limit=parse_int(limit, DEFAULT_REDDIT_LIMIT),
            timeframe=timeframe,
        )
    except Exception as e:
        logger.exception("reddit: unexpected failure")
        return reddit_fallback(f"Failed to fetch Reddit posts: {e}")


@router.get("/twitter", response_model=TwitterResponse)
async def tweets(
    query: str = DEFAULT_TWITTER_QUERY,
    max_results: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    # unparsable max_results means the default; out-of-range values are clamped by the service
    try:
        return await get_tweets(
            settings, client, query=query, max_results=parse_int(max_results, DEFAULT_MAX_RESULTS)
        )
    except Exception as e:
        logger.exception("twitter: unexpected failure")
        return twitter_fallback(f"Failed to fetch tweets: {e}", query=query)
