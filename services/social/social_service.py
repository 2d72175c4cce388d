from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from config.settings import Settings
from services.mock_data.social import mock_reddit_posts, mock_tweets
from services.orchestrator import DataQuality, FetchResult, Provider, first_successful, response_metadata
from services.reddit.client import FALLBACK_SUBREDDITS, RedditClient, RedditPost
from services.sentiment.lexicon import REDDIT, TWITTER, score_text
from services.sentiment.metrics import sentiment_metrics
from services.twitter.client import Tweet, TwitterClient, clamp_max_results
from utils.common_helpers import clamp

logger = logging.getLogger(__name__)

DEFAULT_SUBREDDIT = "investing+stocks+SecurityAnalysis"
DEFAULT_TIMEFRAME = "day"
DEFAULT_REDDIT_LIMIT = 25
MAX_REDDIT_LIMIT = 100
DEFAULT_TWITTER_QUERY = '$SPY OR $QQQ OR "stock market" OR "investing"'
DEFAULT_MAX_RESULTS = 50


# -----------------------
# Reddit
# -----------------------

def _reddit_payload(
    posts: Sequence[RedditPost],
    quality: DataQuality,
    error: Optional[str],
    **meta: Any,
) -> Dict[str, Any]:
    scored = [{**p, "sentiment": score_text(f"{p['title']} {p['selftext']}", REDDIT)} for p in posts]
    return {
        "posts": scored,
        "metrics": sentiment_metrics(p["sentiment"] for p in scored).to_dict(),
        "metadata": response_metadata(quality, error=error, count=len(scored), **meta),
    }


async def get_reddit_posts(
    settings: Settings,
    client: httpx.AsyncClient,
    *,
    subreddit: str = DEFAULT_SUBREDDIT,
    limit: int = DEFAULT_REDDIT_LIMIT,
    timeframe: str = DEFAULT_TIMEFRAME,
) -> Dict[str, Any]:
    """Requested listing first, then r/investing and r/stocks; public endpoints need no key."""
    limit = int(clamp(limit, 1, MAX_REDDIT_LIMIT))
    reddit = RedditClient(client, settings.user_agent)

    providers: List[Provider[List[RedditPost]]] = [
        Provider(f"r/{subreddit}", True, lambda: reddit.hot(subreddit, limit=limit, timeframe=timeframe)),
    ]
    for name in FALLBACK_SUBREDDITS:
        if name != subreddit:
            providers.append(Provider(f"r/{name}", True, lambda name=name: reddit.hot(name, limit=limit)))

    result: FetchResult[List[RedditPost]] = await first_successful(providers, mock_reddit_posts, dataset="reddit")
    return _reddit_payload(
        result.value,
        result.quality,
        result.error_message(),
        subreddit=result.source or "sample",
    )


def reddit_fallback(error: str) -> Dict[str, Any]:
    return _reddit_payload(mock_reddit_posts(), DataQuality.MOCK, error, subreddit="sample")


# -----------------------
# Twitter
# -----------------------

def _twitter_payload(
    tweets: Sequence[Tweet],
    quality: DataQuality,
    error: Optional[str],
    **meta: Any,
) -> Dict[str, Any]:
    scored = [{**t, "sentiment": score_text(t["text"], TWITTER)} for t in tweets]
    metrics = sentiment_metrics(t["sentiment"] for t in scored).to_dict()
    return {
        "tweets": scored,
        "metrics": {"totalTweets": len(scored), **metrics},
        "metadata": response_metadata(quality, error=error, count=len(scored), **meta),
    }


async def get_tweets(
    settings: Settings,
    client: httpx.AsyncClient,
    *,
    query: str = DEFAULT_TWITTER_QUERY,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> Dict[str, Any]:
    max_results = clamp_max_results(max_results)

    async def _search() -> List[Tweet]:
        return await TwitterClient(settings.twitter_bearer_token, client).recent_search(query, max_results=max_results)

    result = await first_successful(
        [Provider("Twitter", bool(settings.twitter_bearer_token), _search)],
        mock_tweets,
        dataset="twitter",
    )
    return _twitter_payload(result.value, result.quality, result.error_message(), query=query)


def twitter_fallback(error: str, *, query: str = DEFAULT_TWITTER_QUERY) -> Dict[str, Any]:
    return _twitter_payload(mock_tweets(), DataQuality.MOCK, error, query=query)
