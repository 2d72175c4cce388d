import asyncio
import unittest

import httpx

from config.settings import Settings
from services.sentiment.lexicon import REDDIT, score_text
from services.social.social_service import get_reddit_posts, get_tweets, reddit_fallback
from services.twitter.client import clamp_max_results


def _run(coro_factory, handler):
    calls = []

    def _record(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(_record)) as client:
            return await coro_factory(client)

    return asyncio.run(_go()), calls


def _listing(*titles):
    return {
        "data": {
            "children": [
                {"data": {"id": f"p{i}", "title": t, "selftext": "", "score": 10, "num_comments": 2,
                          "created_utc": 1714550400, "subreddit": "investing"}}
                for i, t in enumerate(titles)
            ]
        }
    }


class RedditTests(unittest.TestCase):
    def test_requested_subreddit_then_fallbacks(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "/r/wallstreetbets/" in request.url.path:
                return httpx.Response(403)
            return httpx.Response(200, json=_listing("Bullish breakout on strong earnings", "Quiet day"))

        payload, calls = _run(
            lambda c: get_reddit_posts(Settings(), c, subreddit="wallstreetbets", limit=10), handler
        )
        self.assertEqual([r.url.path for r in calls], ["/r/wallstreetbets/hot.json", "/r/investing/hot.json"])
        self.assertEqual(calls[0].url.params["t"], "day")
        self.assertEqual(payload["metadata"]["dataQuality"], "live")
        self.assertEqual(payload["metadata"]["subreddit"], "r/investing")
        self.assertEqual(payload["posts"][0]["sentiment"], score_text("Bullish breakout on strong earnings ", REDDIT))
        self.assertEqual(payload["posts"][1]["sentiment"], 50)

    def test_listing_limit_is_clamped(self) -> None:
        ok = lambda r: httpx.Response(200, json=_listing("Quiet day"))
        for requested, sent in ((0, "1"), (-5, "1"), (500, "100"), (25, "25")):
            _, calls = _run(lambda c: get_reddit_posts(Settings(), c, limit=requested), ok)
            self.assertEqual(calls[0].url.params["limit"], sent, requested)

    def test_every_listing_down_returns_scored_samples(self) -> None:
        payload, calls = _run(lambda c: get_reddit_posts(Settings(), c), lambda r: httpx.Response(500))
        self.assertEqual(len(calls), 3)
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(len(payload["posts"]), 5)
        first = payload["posts"][0]
        self.assertEqual(first["sentiment"], score_text(f"{first['title']} {first['selftext']}", REDDIT))

    def test_fallback(self) -> None:
        payload = reddit_fallback("Failed: boom")
        self.assertEqual(payload["metadata"]["error"], "Failed: boom")


class TwitterTests(unittest.TestCase):
    def test_without_token_is_offline_mock(self) -> None:
        payload, calls = _run(lambda c: get_tweets(Settings(), c), lambda r: httpx.Response(500))
        self.assertEqual(calls, [])
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(payload["metrics"]["totalTweets"], 5)

    def test_live_search_clamps_max_results(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            self.assertEqual(request.headers["Authorization"], "Bearer t-token")
            return httpx.Response(
                200,
                json={"data": [{"id": "1", "text": "$SPY rally, bullish momentum", "created_at": "2024-05-01T10:00:00Z"}]},
            )

        payload, calls = _run(
            lambda c: get_tweets(Settings(twitter_bearer_token="t-token"), c, max_results=500), handler
        )
        self.assertEqual(calls[0].url.params["max_results"], "100")
        self.assertEqual(payload["metadata"]["dataQuality"], "live")
        self.assertEqual(payload["metrics"]["totalTweets"], 1)
        self.assertGreater(payload["tweets"][0]["sentiment"], 60)

    def test_clamp(self) -> None:
        self.assertEqual(clamp_max_results(3), 10)
        self.assertEqual(clamp_max_results(50), 50)
        self.assertEqual(clamp_max_results(1000), 100)


if __name__ == "__main__":
    unittest.main()
