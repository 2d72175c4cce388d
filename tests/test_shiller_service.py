import asyncio
import random
import unittest
from datetime import date

import httpx

from config.settings import Settings
from services.mock_data.valuation import FALLBACK_SP500, synthetic_shiller_history, ten_year_average_earnings
from services.multpl.client import parse_shiller_table
from services.valuation.shiller_service import get_shiller_pe, shiller_fallback
from utils.common_helpers import round_half_up

TODAY = date(2024, 6, 15)

MULTPL_HTML = """
<html><body>
<table id="datatable">
  <tr><th>Date</th><th>Value</th></tr>
  <tr><td>Jun 1, 2024</td><td>&#x2002;34.12 <abbr title="Estimate">†</abbr></td></tr>
  <tr><td>May 1, 2024</td><td>&#x2002;33.40</td></tr>
  <tr><td>Apr 1, 2024</td><td>&#x2002;32.98</td></tr>
  <tr><td>not a date</td><td>n/a</td></tr>
</table>
</body></html>
"""


class _Recorder:
    def __init__(self, handler):
        self.requests = []
        self.handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def _run(coro_factory, recorder):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            return await coro_factory(client)

    return asyncio.run(_go())


class MultplParsingTests(unittest.TestCase):
    def test_parses_rows_oldest_first(self) -> None:
        rows = parse_shiller_table(MULTPL_HTML)
        self.assertEqual(
            rows,
            [
                {"date": "2024-04-01", "shillerPE": 32.98},
                {"date": "2024-05-01", "shillerPE": 33.4},
                {"date": "2024-06-01", "shillerPE": 34.12},
            ],
        )

    def test_missing_table(self) -> None:
        self.assertEqual(parse_shiller_table("<html><p>maintenance</p></html>"), [])
        self.assertEqual(parse_shiller_table(""), [])


class ShillerServiceTests(unittest.TestCase):
    def test_live_history_sets_current_reading(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            self.assertEqual(request.url.host, "www.multpl.com")
            return httpx.Response(200, text=MULTPL_HTML)

        payload = _run(
            lambda c: get_shiller_pe(Settings(), c, period="1y", include_forecasts=True, today=TODAY),
            _Recorder(handler),
        )
        self.assertEqual(payload["current"]["shillerPE"], 34.1)
        self.assertEqual(payload["current"]["sp500Price"], FALLBACK_SP500["price"])
        self.assertEqual(payload["historical"]["count"], 3)
        self.assertEqual(payload["statistics"]["maxValue"], 34.12)
        self.assertIsNotNone(payload["forecasts"])
        meta = payload["metadata"]
        self.assertEqual(meta["dataQuality"], "mixed")
        self.assertEqual(meta["sources"][0], "multpl.com")

    def test_all_history_sources_down_uses_synthetic(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        recorder = _Recorder(handler)
        payload = _run(
            lambda c: get_shiller_pe(Settings(), c, period="1y", rng=random.Random(1), today=TODAY),
            recorder,
        )
        self.assertEqual(len(recorder.requests), 1)
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(payload["historical"]["count"], 12)
        self.assertIsNone(payload["forecasts"])
        expected = FALLBACK_SP500["price"] / ten_year_average_earnings(TODAY)
        self.assertEqual(payload["current"]["shillerPE"], round_half_up(expected, 1))
        self.assertIn("multpl.com: HTTP 503", payload["metadata"]["error"])

    def test_sp500_from_spy(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "www.alphavantage.co":
                return httpx.Response(
                    200,
                    json={"Global Quote": {"05. price": "520.10", "09. change": "1.25", "10. change percent": "0.2409%"}},
                )
            return httpx.Response(200, text=MULTPL_HTML)

        settings = Settings(alpha_vantage_api_key="a-key")
        payload = _run(lambda c: get_shiller_pe(settings, c, today=TODAY), _Recorder(handler))
        self.assertEqual(payload["current"]["sp500Price"], 5201.0)
        self.assertEqual(payload["current"]["sp500Change"], 12.5)
        self.assertEqual(payload["current"]["sp500ChangePercent"], 0.24)
        self.assertEqual(payload["metadata"]["dataQuality"], "live")

    def test_synthetic_history_shape(self) -> None:
        rows = synthetic_shiller_history("5y", random.Random(2), TODAY)
        self.assertEqual(len(rows), 60)
        self.assertEqual(rows[-1]["date"], "2024-06-01")
        self.assertTrue(all(r["shillerPE"] >= 5 for r in rows))

    def test_fallback(self) -> None:
        payload = shiller_fallback("Failed: boom", include_forecasts=True, rng=random.Random(3))
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(payload["metadata"]["error"], "Failed: boom")
        self.assertIn("correctionProbability", payload["forecasts"])


if __name__ == "__main__":
    unittest.main()
