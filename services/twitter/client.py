from __future__ import annotations

from typing import Any, Dict, List, TypedDict

import httpx

from services.http.client import NEWS_TIMEOUT_SEC, UpstreamError, get_json

PROVIDER = "Twitter"
SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"
MIN_RESULTS = 10
MAX_RESULTS = 100

_EMPTY_METRICS = {"like_count": 0, "retweet_count": 0, "reply_count": 0}


class Tweet(TypedDict, total=False):
    id: str
    text: str
    created_at: str
    public_metrics: Dict[str, int]
    sentiment: int


def clamp_max_results(value: int) -> int:
    """The v2 recent-search endpoint only accepts 10..100."""
    return max(MIN_RESULTS, min(MAX_RESULTS, int(value)))


class TwitterClient:
    def __init__(self, bearer_token: str, client: httpx.AsyncClient):
        self.bearer_token = bearer_token
        self.client = client

    async def recent_search(self, query: str, *, max_results: int) -> List[Tweet]:
        data = await get_json(
            self.client,
            PROVIDER,
            SEARCH_URL,
            params={
                "query": query,
                "max_results": clamp_max_results(max_results),
                "tweet.fields": "created_at,public_metrics,context_annotations",
                "expansions": "author_id",
            },
            headers={"Authorization": f"Bearer {self.bearer_token}"},
            timeout=NEWS_TIMEOUT_SEC,
        )
        if not isinstance(data, dict):
            raise UpstreamError(PROVIDER, "unexpected payload")
        if data.get("errors") and not data.get("data"):
            first: Any = data["errors"][0] if isinstance(data["errors"], list) else data["errors"]
            detail = first.get("detail") or first.get("message") if isinstance(first, dict) else first
            raise UpstreamError(PROVIDER, str(detail))

        return [
            {
                "id": str(raw.get("id") or ""),
                "text": raw.get("text") or "",
                "created_at": raw.get("created_at") or "",
                "public_metrics": raw.get("public_metrics") or dict(_EMPTY_METRICS),
            }
            for raw in data.get("data") or []
            if isinstance(raw, dict)
        ]
