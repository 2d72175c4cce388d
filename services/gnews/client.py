from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

import httpx

from services.http.client import NEWS_TIMEOUT_SEC, UpstreamError, get_json
from services.news.articles import NewsArticle, is_usable, make_article, published_after

PROVIDER = "GNews"


class GNewsClient:
    BASE_URL = "https://gnews.io/api/v4"

    def __init__(self, api_key: str, client: httpx.AsyncClient, user_agent: str):
        self.api_key = api_key
        self.client = client
        self.user_agent = user_agent

    def _auth_params(self, **params: Any) -> Dict[str, Any]:
        return {**params, "apikey": self.api_key}

    async def search(
        self,
        query: str,
        *,
        limit: int,
        since: datetime,
        country: str = "us",
    ) -> List[NewsArticle]:
        """
        GNews only accepts a single country code, and its `from` filter is
        plan-dependent, so recency is enforced client-side.
        """
        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/search",
            params=self._auth_params(q=query, lang="en", country=country, max=min(limit, 100)),
            headers={"User-Agent": self.user_agent},
            timeout=NEWS_TIMEOUT_SEC,
        )
        if not isinstance(data, dict):
            raise UpstreamError(PROVIDER, "unexpected payload")
        errors = data.get("errors")
        if errors:
            if isinstance(errors, (list, tuple)):
                errors = ", ".join(str(e) for e in errors)
            raise UpstreamError(PROVIDER, str(errors))

        out: List[NewsArticle] = []
        for raw in data.get("articles") or []:
            article = make_article(
                title=raw.get("title"),
                description=raw.get("description"),
                source=(raw.get("source") or {}).get("name"),
                url=raw.get("url"),
                published_at=raw.get("publishedAt"),
                image=raw.get("image"),
            )
            if is_usable(article) and published_after(article, since):
                out.append(article)
        return out
