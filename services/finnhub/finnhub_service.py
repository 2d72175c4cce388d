# services/finnhub/finnhub_service.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import finnhub
import httpx
from finnhub.exceptions import FinnhubAPIException, FinnhubRequestException

from services.http.client import NEWS_TIMEOUT_SEC, QUOTE_TIMEOUT_SEC, SECONDARY_TIMEOUT_SEC, UpstreamError, get_json
from services.news.articles import NewsArticle, is_usable, make_article
from services.stocks.models import StockSnapshot

logger = logging.getLogger(__name__)

PROVIDER = "Finnhub"


@dataclass(frozen=True)
class Quote:
    current_price: float
    previous_close: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None


def _opt_float(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    return float(value) if value is not None else None


def _normalize_news(raw: Dict[str, Any]) -> NewsArticle:
    # general_news schema: {headline, summary, source, url, datetime, image, category, ...}
    return make_article(
        title=raw.get("headline"),
        description=raw.get("summary"),
        source=raw.get("source"),
        url=raw.get("url"),
        published_at=raw.get("datetime"),
        image=raw.get("image"),
    )


class FinnhubService:
    """
    Async access to Finnhub quotes and profiles over the shared httpx client,
    plus market news through the official (blocking) SDK run in a thread.
    """

    BASE_URL = "https://finnhub.io/api/v1"

    def __init__(self, api_key: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.client = client

    def _auth_params(self, **params: Any) -> Dict[str, Any]:
        return {**params, "token": self.api_key}

    def get_finnhub_client(self) -> finnhub.Client:
        return finnhub.Client(api_key=self.api_key)

    async def get_price(self, symbol: str) -> Quote:
        """Raises UpstreamError when Finnhub has no price (it answers c == 0)."""
        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/quote",
            params=self._auth_params(symbol=symbol),
            timeout=QUOTE_TIMEOUT_SEC,
        )
        if not isinstance(data, dict) or data.get("c") in (None, 0):
            raise UpstreamError(PROVIDER, f"price not available for {symbol}")

        return Quote(
            current_price=float(data["c"]),
            previous_close=_opt_float(data, "pc"),
            change=_opt_float(data, "d"),
            change_percent=_opt_float(data, "dp"),
            high=_opt_float(data, "h"),
            low=_opt_float(data, "l"),
            open=_opt_float(data, "o"),
        )

    async def fetch_profile(self, symbol: str) -> Dict[str, Any]:
        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/stock/profile2",
            params=self._auth_params(symbol=symbol),
            timeout=SECONDARY_TIMEOUT_SEC,
        )
        return data if isinstance(data, dict) else {}

    async def snapshot(self, symbol: str) -> StockSnapshot:
        quote, profile = await asyncio.gather(
            self.get_price(symbol),
            self.fetch_profile(symbol),
            return_exceptions=True,
        )
        if isinstance(quote, BaseException):
            raise quote
        if isinstance(profile, BaseException):
            logger.debug("Finnhub profile unavailable for %s: %s", symbol, profile)
            profile = {}

        market_cap = profile.get("marketCapitalization")
        return StockSnapshot(
            symbol=symbol.upper(),
            name=profile.get("name") or f"{symbol.upper()} Stock",
            sector=profile.get("finnhubIndustry") or "Unknown",
            industry=profile.get("finnhubIndustry") or "Unknown",
            price=quote.current_price,
            change=quote.change or 0.0,
            change_percent=quote.change_percent or 0.0,
            volume=0,
            # profile2 reports market cap in millions
            market_cap=float(market_cap) * 1_000_000 if market_cap else None,
            exchange=profile.get("exchange") or None,
            currency=profile.get("currency") or None,
        )

    async def general_news(self, *, limit: int, category: str = "general") -> List[NewsArticle]:
        def _fetch() -> List[Dict[str, Any]]:
            return self.get_finnhub_client().general_news(category, min_id=0) or []

        try:
            raw = await asyncio.wait_for(asyncio.to_thread(_fetch), timeout=NEWS_TIMEOUT_SEC)
        except asyncio.TimeoutError as e:
            raise UpstreamError(PROVIDER, f"timed out after {NEWS_TIMEOUT_SEC:.0f}s") from e
        except (FinnhubAPIException, FinnhubRequestException) as e:
            raise UpstreamError(PROVIDER, str(e)) from e

        items = [_normalize_news(d) for d in raw if isinstance(d, dict) and d.get("url")]
        return [it for it in items if is_usable(it)][: max(0, limit)]
