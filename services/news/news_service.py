# services/news/news_service.py
"""
US and European market news with per-article sentiment, aggregate metrics
and topic buckets.

Providers are tried in order (NewsAPI, GNews, then Finnhub for US news) and
accumulated until `limit` articles are collected. Without any news key, or
when nothing usable comes back, the curated sample articles are scored
instead and the payload is tagged "mock".
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from config.settings import Settings
from services.finnhub.finnhub_service import FinnhubService
from services.gnews.client import GNewsClient
from services.mock_data.news import mock_european_news, mock_market_news
from services.news import regions
from services.news.articles import NewsArticle, finalize_articles, published_after
from services.newsapi.client import NewsApiClient
from services.orchestrator import (
    BatchProvider,
    DataQuality,
    FetchResult,
    collect_until,
    response_metadata,
)
from services.sentiment.lexicon import EUROPEAN_NEWS, MARKET_NEWS, LexiconConfig, score_text
from services.sentiment.metrics import sentiment_metrics
from services.sentiment.topics import EUROPEAN_TOPICS, MARKET_TOPICS, article_text, extract_topics
from utils.common_helpers import clamp

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "stock market finance investing economy"
DEFAULT_EU_QUERY = "european stocks finance investing economy ECB"
DEFAULT_LIMIT = 20
DEFAULT_HOURS = 24
MAX_LIMIT = 100


def bounded_window(limit: int, hours: int) -> tuple[int, int]:
    """Out-of-range requests are clamped, never rejected: limit to 1..100, hours to at least 1."""
    return int(clamp(limit, 1, MAX_LIMIT)), max(1, hours)


def score_articles(articles: Sequence[NewsArticle], lexicon: LexiconConfig) -> List[NewsArticle]:
    return [{**a, "sentiment": score_text(article_text(a), lexicon)} for a in articles]


def _news_payload(
    articles: Sequence[NewsArticle],
    *,
    lexicon: LexiconConfig,
    topic_keywords: Mapping[str, Sequence[str]],
    quality: DataQuality,
    error: Optional[str],
    **meta: Any,
) -> Dict[str, Any]:
    scored = score_articles(articles, lexicon)
    return {
        "articles": scored,
        "metrics": sentiment_metrics(a["sentiment"] for a in scored).to_dict(),
        "topics": extract_topics(scored, topic_keywords),
        "metadata": response_metadata(quality, error=error, count=len(scored), **meta),
    }


def _from_result(result: FetchResult[List[NewsArticle]], **kwargs: Any) -> Dict[str, Any]:
    return _news_payload(
        result.value,
        quality=result.quality,
        error=result.error_message(),
        source=result.source or "sample",
        **kwargs,
    )


# -----------------------
# US market news
# -----------------------

async def get_market_news(
    settings: Settings,
    client: httpx.AsyncClient,
    *,
    query: str = DEFAULT_QUERY,
    limit: int = DEFAULT_LIMIT,
    hours: int = DEFAULT_HOURS,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    limit, hours = bounded_window(limit, hours)
    since = now - timedelta(hours=hours)

    async def _newsapi(n: int) -> List[NewsArticle]:
        # NewsAPI only filters by day
        items = await NewsApiClient(settings.news_api_key, client, settings.user_agent).everything(
            query, limit=n, since=since
        )
        return [a for a in items if published_after(a, since)]

    async def _gnews(n: int) -> List[NewsArticle]:
        return await GNewsClient(settings.gnews_api_key, client, settings.user_agent).search(
            query, limit=n, since=since
        )

    async def _finnhub(n: int) -> List[NewsArticle]:
        items = await FinnhubService(settings.finnhub_api_key, client).general_news(limit=max(n, 50))
        return [a for a in items if published_after(a, since)][:n]

    result = await collect_until(
        [
            BatchProvider("NewsAPI", bool(settings.news_api_key), _newsapi),
            BatchProvider("GNews", bool(settings.gnews_api_key), _gnews),
            BatchProvider("Finnhub", bool(settings.finnhub_api_key), _finnhub),
        ],
        lambda: finalize_articles(mock_market_news(now), limit),
        dataset="news",
        want=limit,
        finalize=lambda items: finalize_articles(items, limit),
    )
    return _from_result(
        result,
        lexicon=MARKET_NEWS,
        topic_keywords=MARKET_TOPICS,
        query=query,
        hours=hours,
    )


def market_news_fallback(
    error: str,
    *,
    query: str = DEFAULT_QUERY,
    limit: int = DEFAULT_LIMIT,
    hours: int = DEFAULT_HOURS,
) -> Dict[str, Any]:
    limit, hours = bounded_window(limit, hours)
    return _news_payload(
        finalize_articles(mock_market_news(), limit),
        lexicon=MARKET_NEWS,
        topic_keywords=MARKET_TOPICS,
        quality=DataQuality.MOCK,
        error=error,
        query=query,
        hours=hours,
        source="sample",
    )


# -----------------------
# European news
# -----------------------

def _tag_country(article: NewsArticle) -> NewsArticle:
    return {**article, "country": regions.detect_country(article_text(article))}


async def get_european_news(
    settings: Settings,
    client: httpx.AsyncClient,
    *,
    query: str = DEFAULT_EU_QUERY,
    limit: int = DEFAULT_LIMIT,
    hours: int = DEFAULT_HOURS,
    country: str = "all",
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    limit, hours = bounded_window(limit, hours)
    since = now - timedelta(hours=hours)
    codes = regions.country_codes(country)

    async def _newsapi(n: int) -> List[NewsArticle]:
        items = await NewsApiClient(settings.news_api_key, client, settings.user_agent).everything(
            regions.newsapi_query(query), limit=n, since=since, keep=regions.is_european
        )
        return [_tag_country(a) for a in items if published_after(a, since)]

    async def _gnews(n: int) -> List[NewsArticle]:
        # GNews takes a single country
        items = await GNewsClient(settings.gnews_api_key, client, settings.user_agent).search(
            regions.gnews_query(query), limit=n, since=since, country=codes[0]
        )
        return [_tag_country(a) for a in items]

    result = await collect_until(
        [
            BatchProvider("NewsAPI", bool(settings.news_api_key), _newsapi),
            BatchProvider("GNews", bool(settings.gnews_api_key), _gnews),
        ],
        lambda: finalize_articles(mock_european_news(now), limit),
        dataset="eu-news",
        want=limit,
        finalize=lambda items: finalize_articles(items, limit),
    )
    return _from_result(
        result,
        lexicon=EUROPEAN_NEWS,
        topic_keywords=EUROPEAN_TOPICS,
        query=query,
        country=country,
        hours=hours,
    )


def european_news_fallback(
    error: str,
    *,
    query: str = DEFAULT_EU_QUERY,
    limit: int = DEFAULT_LIMIT,
    hours: int = DEFAULT_HOURS,
    country: str = "all",
) -> Dict[str, Any]:
    limit, hours = bounded_window(limit, hours)
    return _news_payload(
        finalize_articles(mock_european_news(), limit),
        lexicon=EUROPEAN_NEWS,
        topic_keywords=EUROPEAN_TOPICS,
        quality=DataQuality.MOCK,
        error=error,
        query=query,
        country=country,
        hours=hours,
        source="sample",
    )
