from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict

import httpx

from services.http.client import QUOTE_TIMEOUT_SEC, UpstreamError, get_json

PROVIDER = "Reddit"
BASE_URL = "https://www.reddit.com"
FALLBACK_SUBREDDITS = ("investing", "stocks")


class RedditPost(TypedDict, total=False):
    id: str
    title: str
    selftext: str
    score: int
    num_comments: int
    created_utc: float
    subreddit: str
    url: Optional[str]
    author: Optional[str]
    sentiment: int


def _normalize_post(raw: Dict[str, Any]) -> RedditPost:
    return {
        "id": raw.get("id") or "",
        "title": raw.get("title") or "",
        "selftext": raw.get("selftext") or "",
        "score": int(raw.get("score") or 0),
        "num_comments": int(raw.get("num_comments") or 0),
        "created_utc": float(raw.get("created_utc") or 0),
        "subreddit": raw.get("subreddit") or "",
        "url": raw.get("url"),
        "author": raw.get("author"),
    }


class RedditClient:
    """Public `.json` listings; no credentials, but Reddit rejects blank user agents."""

    def __init__(self, client: httpx.AsyncClient, user_agent: str):
        self.client = client
        self.user_agent = user_agent

    async def hot(self, subreddit: str, *, limit: int, timeframe: Optional[str] = None) -> List[RedditPost]:
        params: Dict[str, Any] = {"limit": limit}
        if timeframe:
            params["t"] = timeframe
        data = await get_json(
            self.client,
            PROVIDER,
            f"{BASE_URL}/r/{subreddit}/hot.json",
            params=params,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            timeout=QUOTE_TIMEOUT_SEC,
        )
        children = (data.get("data") or {}).get("children") if isinstance(data, dict) else None
        if not isinstance(children, list):
            raise UpstreamError(PROVIDER, f"unexpected listing for r/{subreddit}")
        return [_normalize_post(c.get("data") or {}) for c in children if isinstance(c, dict)]
