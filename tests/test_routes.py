import unittest
from unittest.mock import patch

import httpx
from fastapi.testclient import TestClient

from config.settings import Settings
from main import create_app
from routers.dependencies import get_app_settings, get_http_client


class RouteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.calls.append(request)
            return httpx.Response(503)

        self.upstream = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        app = create_app(Settings())
        app.dependency_overrides[get_app_settings] = lambda: Settings()
        app.dependency_overrides[get_http_client] = lambda: self.upstream
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)

    def test_credential_free_endpoints_never_touch_network(self) -> None:
        expectations = {
            "/api/news": "articles",
            "/api/eu-news?country=de": "articles",
            "/api/twitter?max_results=5": "tweets",
            "/api/stocks?symbols=aapl,msft": "stocks",
            "/api/eu-stocks": "stocks",
            "/api/financial": "stocks",
            "/api/macro-correlations?symbols=SPY,QQQ&period=3m": "correlations",
            "/api/sentiment-correlation?period=1m&platform=reddit": "data",
            "/api/fear-greed": "components",
        }
        for path, key in expectations.items():
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, 200)
                body = resp.json()
                self.assertTrue(body[key])
                self.assertEqual(body["metadata"]["dataQuality"], "mock")
                self.assertIn("timestamp", body["metadata"])
        self.assertEqual(self.calls, [])

    def test_stock_symbols_are_normalized(self) -> None:
        body = self.client.get("/api/stocks?symbols=aapl, msft").json()
        self.assertEqual([s["symbol"] for s in body["stocks"]], ["AAPL", "MSFT"])
        self.assertEqual(body["metadata"]["mockDataCount"], 2)

    def test_public_sources_degrade_to_samples(self) -> None:
        for path, key in (("/api/reddit", "posts"), ("/api/shiller-pe?period=1y&forecasts=true", "historical")):
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, 200)
                body = resp.json()
                self.assertTrue(body[key])
                self.assertEqual(body["metadata"]["dataQuality"], "mock")
                self.assertIn("error", body["metadata"])

    def test_malformed_query_values_still_answer_200(self) -> None:
        paths = (
            "/api/news?limit=500",
            "/api/news?limit=abc&hours=-4",
            "/api/eu-news?limit=0",
            "/api/reddit?limit=0",
            "/api/twitter?max_results=lots",
            "/api/stocks?technicals=maybe",
            "/api/eu-stocks?technicals=",
            "/api/shiller-pe?forecasts=yes please",
        )
        for path in paths:
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, 200)
                self.assertEqual(resp.json()["metadata"]["dataQuality"], "mock")

    def test_numeric_params_are_clamped_or_defaulted(self) -> None:
        self.assertEqual(len(self.client.get("/api/news?limit=3").json()["articles"]), 3)
        self.assertEqual(len(self.client.get("/api/news?limit=0").json()["articles"]), 1)
        body = self.client.get("/api/news?limit=abc&hours=-4").json()
        self.assertEqual(len(body["articles"]), 10)
        self.assertEqual(body["metadata"]["hours"], 1)
        self.assertEqual(self.client.get("/api/eu-news?limit=2abc").json()["metadata"]["count"], 2)

    def test_flags_are_on_only_when_true(self) -> None:
        self.assertIsNone(self.client.get("/api/shiller-pe?forecasts=maybe").json()["forecasts"])
        self.assertIsNotNone(self.client.get("/api/shiller-pe?forecasts=true").json()["forecasts"])

    def test_unexpected_error_returns_full_sample_payload(self) -> None:
        with patch("routers.news_routes.get_market_news", side_effect=RuntimeError("parser exploded")):
            resp = self.client.get("/api/news")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["metadata"]["dataQuality"], "mock")
        self.assertIn("parser exploded", body["metadata"]["error"])
        self.assertTrue(body["articles"])
        self.assertTrue(body["topics"])

    def test_shiller_error_boundary(self) -> None:
        with patch("routers.valuation_routes.get_shiller_pe", side_effect=ValueError("bad table")):
            body = self.client.get("/api/shiller-pe?forecasts=true").json()
        self.assertEqual(body["metadata"]["dataQuality"], "mock")
        self.assertIsNotNone(body["forecasts"])


if __name__ == "__main__":
    unittest.main()
