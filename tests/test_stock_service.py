import asyncio
import random
import unittest

import httpx

from config.settings import Settings
from services.stocks.exchanges import company_name, country_for, currency_for
from services.stocks.stock_service import (
    get_eu_stocks,
    get_financial_quotes,
    get_us_stocks,
    stocks_fallback,
)


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


def _fmp_handler(known):
    """FMP stub answering quote/profile for `known` symbols and 500 for anything else."""

    def handler(request: httpx.Request) -> httpx.Response:
        kind, _, symbol = request.url.path.rpartition("/")
        if symbol not in known:
            return httpx.Response(500)
        if kind.endswith("/quote"):
            return httpx.Response(
                200,
                json=[{
                    "symbol": symbol,
                    "price": known[symbol],
                    "change": 1.5,
                    "changesPercentage": 0.8,
                    "volume": 1_000_000,
                    "yearHigh": known[symbol] * 1.2,
                    "yearLow": known[symbol] * 0.8,
                }],
            )
        if kind.endswith("/profile"):
            return httpx.Response(200, json=[{"companyName": f"{symbol} Corp", "sector": "Technology", "lastDiv": 2.0}])
        return httpx.Response(404)

    return handler


class UsStocksTests(unittest.TestCase):
    def test_no_keys_is_mock_without_network(self) -> None:
        recorder = _Recorder()
        payload = _run(
            lambda c: get_us_stocks(Settings(), c, ["AAPL", "MSFT"], rng=random.Random(1)),
            recorder,
        )
        self.assertEqual(recorder.requests, [])
        meta = payload["metadata"]
        self.assertEqual(meta["dataQuality"], "mock")
        self.assertEqual(meta["liveDataCount"], 0)
        self.assertEqual(meta["mockDataCount"], 2)
        self.assertEqual([s["symbol"] for s in payload["stocks"]], ["AAPL", "MSFT"])
        self.assertTrue(all(s["dataQuality"] == "mock" for s in payload["stocks"]))

    def test_quality_is_mixed_iff_some_symbols_fail(self) -> None:
        settings = Settings(fmp_api_key="f-key")
        cases = [
            (["AAPL", "MSFT"], {"AAPL": 190.0, "MSFT": 410.0}, "live"),
            (["AAPL", "BAD"], {"AAPL": 190.0}, "mixed"),
            (["BAD", "WORSE"], {}, "mock"),
        ]
        for symbols, known, expected in cases:
            with self.subTest(symbols=symbols):
                payload = _run(
                    lambda c: get_us_stocks(settings, c, symbols, rng=random.Random(2)),
                    _Recorder(_fmp_handler(known)),
                )
                self.assertEqual(payload["metadata"]["dataQuality"], expected)
                self.assertEqual(payload["metadata"]["liveDataCount"], len(known))

    def test_live_entry_shape(self) -> None:
        settings = Settings(fmp_api_key="f-key")
        payload = _run(
            lambda c: get_us_stocks(settings, c, ["AAPL"]),
            _Recorder(_fmp_handler({"AAPL": 200.0})),
        )
        stock = payload["stocks"][0]
        self.assertEqual(stock["name"], "AAPL Corp")
        self.assertEqual(stock["price"], 200.0)
        self.assertEqual(stock["dividendYield"], 1.0)
        self.assertEqual(stock["source"], "FMP")
        self.assertEqual(stock["dataQuality"], "live")
        self.assertNotIn("error", stock)

    def test_partial_secondary_failures_keep_entry_live(self) -> None:
        quote_only = _fmp_handler({"AAPL": 200.0})

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if "/profile/" in path:
                return httpx.Response(500)
            if "/technical_indicator/" in path:
                if request.url.params["type"] == "rsi":
                    return httpx.Response(500)
                return httpx.Response(200, json=[{"sma": 101.0}, {"sma": 100.0}])
            return quote_only(request)

        settings = Settings(fmp_api_key="f-key")
        payload = _run(
            lambda c: get_us_stocks(settings, c, ["AAPL"], include_technicals=True),
            _Recorder(handler),
        )
        stock = payload["stocks"][0]
        self.assertEqual(stock["dataQuality"], "live")
        self.assertEqual(stock["source"], "FMP")
        self.assertEqual(stock["name"], "AAPL Stock")
        self.assertEqual(stock["price"], 200.0)
        self.assertIsNone(stock["technicals"]["rsi"])
        self.assertEqual(stock["technicals"]["macd"], 1.0)
        self.assertEqual(payload["metadata"]["dataQuality"], "live")

    def test_alpha_vantage_fills_in_when_fmp_fails(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "financialmodelingprep.com":
                return httpx.Response(429)
            if request.url.params["function"] == "GLOBAL_QUOTE":
                return httpx.Response(
                    200,
                    json={"Global Quote": {"01. symbol": "AAPL", "05. price": "180.00", "09. change": "-2.0",
                                           "10. change percent": "-1.1%", "06. volume": "5000"}},
                )
            return httpx.Response(200, json={"Note": "Thank you for using Alpha Vantage"})

        settings = Settings(fmp_api_key="f-key", alpha_vantage_api_key="a-key")
        payload = _run(lambda c: get_us_stocks(settings, c, ["AAPL"]), _Recorder(handler))
        stock = payload["stocks"][0]
        self.assertEqual(stock["source"], "Alpha Vantage")
        self.assertEqual(stock["price"], 180.0)
        self.assertEqual(stock["changePercent"], -1.1)
        self.assertEqual(payload["metadata"]["dataQuality"], "live")

    def test_fallback_payload(self) -> None:
        payload = stocks_fallback(["SPY"], "Failed to fetch stock data: boom", rng=random.Random(3))
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(payload["metadata"]["error"], "Failed to fetch stock data: boom")
        self.assertEqual(payload["stocks"][0]["symbol"], "SPY")


class EuStocksTests(unittest.TestCase):
    def test_sample_entries_carry_listing(self) -> None:
        payload = _run(
            lambda c: get_eu_stocks(Settings(), c, ["SAP.DE", "AZN.L"], rng=random.Random(4)),
            _Recorder(),
        )
        sap, azn = payload["stocks"]
        self.assertEqual((sap["country"], sap["currency"]), ("Germany", "EUR"))
        self.assertEqual((azn["country"], azn["currency"]), ("UK", "GBP"))
        self.assertEqual(sap["name"], "SAP SE")
        self.assertEqual(payload["metadata"]["message"], "All European stock data is simulated")

    def test_listing_helpers(self) -> None:
        self.assertEqual(country_for("ASML.AS"), "Netherlands")
        self.assertEqual(currency_for("NESN.SW"), "CHF")
        self.assertEqual(country_for("XYZ"), "Europe")
        self.assertEqual(company_name("FOO.PA"), "FOO")


class FinancialQuotesTests(unittest.TestCase):
    def test_without_key_is_mock(self) -> None:
        recorder = _Recorder()
        payload = _run(
            lambda c: get_financial_quotes(Settings(), c, ["SPY", "QQQ"], rng=random.Random(5)),
            recorder,
        )
        self.assertEqual(recorder.requests, [])
        self.assertEqual(payload["metadata"]["dataQuality"], "mock")
        self.assertEqual(payload["metadata"]["successfulFetches"], 0)
        self.assertEqual(payload["metadata"]["requestedSymbols"], ["SPY", "QQQ"])
        self.assertEqual(len(payload["stocks"]), 2)


if __name__ == "__main__":
    unittest.main()
