from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx

from services.http.client import NEWS_TIMEOUT_SEC, UpstreamError, get_json
from services.news.articles import NewsArticle, is_usable, make_article
from utils.common_helpers import iso_date

PROVIDER = "NewsAPI"


class NewsApiClient:
    """Thin async wrapper over newsapi.org `/v2/everything`."""

    BASE_URL = "https://newsapi.org/v2"

    def __init__(self, api_key: str, client: httpx.AsyncClient, user_agent: str):
        self.api_key = api_key
        self.client = client
        self.user_agent = user_agent

    def _auth_params(self, **params: Any) -> Dict[str, Any]:
        return {**params, "apiKey": self.api_key}

    async def everything(
        self,
        query: str,
        *,
        limit: int,
        since: datetime,
        keep: Optional[Callable[[NewsArticle], bool]] = None,
    ) -> List[NewsArticle]:
        params = self._auth_params(
            q=query,
            sortBy="publishedAt",
            pageSize=min(limit, 100),
            language="en",
        )
        params["from"] = iso_date(since)  # day granularity only

        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/everything",
            params=params,
            headers={"User-Agent": self.user_agent},
            timeout=NEWS_TIMEOUT_SEC,
        )
        if not isinstance(data, dict):
            raise UpstreamError(PROVIDER, "unexpected payload")
        if data.get("status") == "error":
            raise UpstreamError(PROVIDER, data.get("message") or "error status")

        out: List[NewsArticle] = []
        for raw in data.get("articles") or []:
            article = make_article(
                title=raw.get("title"),
                description=raw.get("description"),
                source=(raw.get("source") or {}).get("name"),
                url=raw.get("url"),
                published_at=raw.get("publishedAt"),
                image=raw.get("urlToImage"),
            )
            if not is_usable(article):
                continue
            if keep is not None and not keep(article):
                continue
            out.append(article)
        return out
