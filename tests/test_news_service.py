import asyncio
import unittest
from datetime import datetime, timezone

import httpx

from config.settings import Settings
from services.news.news_service import (
    european_news_fallback,
    get_european_news,
    get_market_news,
    market_news_fallback,
)
from services.news.regions import detect_country, is_european

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class _Recorder:
    def __init__(self, handler=None):
        self.requests = []
        self.handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is None:
            raise AssertionError(f"unexpected network call to {request.url}")
        return self.handler(request)


def _run(coro_factory, recorder):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            return await coro_factory(client)

    return asyncio.run(_go())


def _gnews_article(title, published="2024-05-01T10:00:00Z"):
    return {
        "title": title,
        "description": f"{title} - details",
        "url": f"https://news.example.com/{abs(hash(title))}",
        "image": None,
        "publishedAt": published,
        "source": {"name": "Example Wire"},
    }


class MarketNewsTests(unittest.TestCase):
    def test_without_keys_returns_scored_sample_without_network(self) -> None:
        recorder = _Recorder()
        payload = _run(lambda c: get_market_news(Settings(), c, now=NOW), recorder)

        self.assertEqual(recorder.requests, [])
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertIn("API keys not configured", payload["metadata"]["error"])
        self.assertEqual(len(payload["articles"]), 10)
        self.assertTrue(payload["topics"])
        for article in payload["articles"]:
            self.assertGreaterEqual(article["sentiment"], 5)
            self.assertLessEqual(article["sentiment"], 95)
        self.assertEqual(
            set(payload["metrics"]),
            {"averageSentiment", "bullishPercentage", "bearishPercentage", "neutralPercentage"},
        )

    def test_timed_out_provider_falls_through_to_next(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "newsapi.org":
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(
                200,
                json={"articles": [_gnews_article("Stocks rally as earnings beat"), _gnews_article("Oil slides", "2024-05-01T09:00:00Z")]},
            )

        recorder = _Recorder(handler)
        settings = Settings(news_api_key="n-key", gnews_api_key="g-key")
        payload = _run(lambda c: get_market_news(settings, c, limit=5, now=NOW), recorder)

        self.assertEqual([r.url.host for r in recorder.requests], ["newsapi.org", "gnews.io"])
        self.assertEqual(payload["metadata"]["dataQuality"], "live")
        self.assertEqual(payload["metadata"]["source"], "GNews")
        self.assertNotIn("error", payload["metadata"])
        self.assertEqual([a["title"] for a in payload["articles"]], ["Stocks rally as earnings beat", "Oil slides"])

    def test_newsapi_error_payload_and_stale_articles(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "newsapi.org":
                return httpx.Response(200, json={"status": "error", "message": "rateLimited"})
            return httpx.Response(200, json={"articles": [_gnews_article("Old story", "2024-04-01T00:00:00Z")]})

        settings = Settings(news_api_key="n-key", gnews_api_key="g-key")
        payload = _run(lambda c: get_market_news(settings, c, now=NOW), _Recorder(handler))

        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertIn("NewsAPI: rateLimited", payload["metadata"]["error"])

    def test_merges_and_dedupes_across_providers(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "newsapi.org":
                return httpx.Response(
                    200,
                    json={
                        "status": "ok",
                        "articles": [
                            {
                                "title": "Fed holds rates",
                                "description": "Policy unchanged",
                                "url": "https://a.example.com/1",
                                "urlToImage": None,
                                "publishedAt": "2024-05-01T08:00:00Z",
                                "source": {"name": "A"},
                            },
                            {
                                "title": "[Removed]",
                                "description": "[Removed]",
                                "url": "https://removed.com",
                                "publishedAt": "2024-05-01T08:00:00Z",
                                "source": {"name": "A"},
                            },
                        ],
                    },
                )
            return httpx.Response(
                200,
                json={"articles": [_gnews_article("Fed holds rates"), _gnews_article("Tech stocks climb")]},
            )

        settings = Settings(news_api_key="n-key", gnews_api_key="g-key")
        payload = _run(lambda c: get_market_news(settings, c, limit=5, now=NOW), _Recorder(handler))

        titles = [a["title"] for a in payload["articles"]]
        self.assertEqual(sorted(titles), ["Fed holds rates", "Tech stocks climb"])
        self.assertEqual(payload["metadata"]["source"], "NewsAPI+GNews")
        self.assertEqual(payload["metadata"]["dataQuality"], "live")

    def test_newsapi_results_respect_hour_window(self) -> None:
        def newsapi_row(title, published):
            return {"title": title, "description": f"{title} today", "url": f"https://a.example.com/{title}",
                    "publishedAt": published, "source": {"name": "A"}}

        def handler(request: httpx.Request) -> httpx.Response:
            # `from` is a calendar day, so NewsAPI also returns the early-morning story
            self.assertEqual(request.url.params["from"], "2024-05-01")
            return httpx.Response(200, json={"status": "ok", "articles": [
                newsapi_row("Futures edge higher", "2024-05-01T11:30:00Z"),
                newsapi_row("Asia closes mixed", "2024-05-01T02:00:00Z"),
            ]})

        settings = Settings(news_api_key="n-key")
        payload = _run(lambda c: get_market_news(settings, c, hours=1, now=NOW), _Recorder(handler))
        self.assertEqual([a["title"] for a in payload["articles"]], ["Futures edge higher"])
        self.assertEqual(payload["metadata"]["dataQuality"], "live")

    def test_sample_and_fallback_respect_limit(self) -> None:
        payload = _run(lambda c: get_market_news(Settings(), c, limit=3, now=NOW), _Recorder())
        self.assertEqual(len(payload["articles"]), 3)
        self.assertEqual(payload["metadata"]["count"], 3)
        self.assertEqual(len(market_news_fallback("boom", limit=4)["articles"]), 4)
        self.assertEqual(len(european_news_fallback("boom", limit=2)["articles"]), 2)
        # out-of-range limits are clamped rather than rejected
        self.assertEqual(len(market_news_fallback("boom", limit=0)["articles"]), 1)
        self.assertEqual(len(market_news_fallback("boom", limit=500)["articles"]), 10)

    def test_fallback_payload(self) -> None:
        payload = market_news_fallback("Failed to fetch news: boom")
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(payload["metadata"]["error"], "Failed to fetch news: boom")
        self.assertTrue(payload["articles"])


class EuropeanNewsTests(unittest.TestCase):
    def test_sample_articles_carry_country(self) -> None:
        payload = _run(lambda c: get_european_news(Settings(), c, now=NOW), _Recorder())
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(payload["metadata"]["country"], "all")
        self.assertTrue(all(a.get("country") for a in payload["articles"]))

    def test_gnews_receives_single_country(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"articles": [_gnews_article("DAX climbs as German exports rise")]})

        recorder = _Recorder(handler)
        settings = Settings(gnews_api_key="g-key")
        payload = _run(lambda c: get_european_news(settings, c, country="fr", now=NOW), recorder)

        self.assertEqual(recorder.requests[0].url.params["country"], "fr")
        self.assertEqual(payload["articles"][0]["country"], "Germany")
        self.assertEqual(payload["metadata"]["dataQuality"], "live")

    def test_region_helpers(self) -> None:
        self.assertTrue(is_european({"title": "ECB meeting", "description": ""}))
        self.assertFalse(is_european({"title": "Nasdaq closes higher", "description": "US tech"}))
        self.assertEqual(detect_country("Paris bourse: CAC 40 slips"), "France")
        self.assertEqual(detect_country("Markets mixed"), "Europe")


if __name__ == "__main__":
    unittest.main()
