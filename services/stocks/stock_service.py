# services/stocks/stock_service.py
"""
Per-symbol quote resolution for US and European equities.

Each symbol is resolved on its own (FMP, then Alpha Vantage, then Finnhub
for US tickers) and the symbols are joined all-settle, so one bad ticker
never costs the others their live data. The response-level dataQuality is
"mixed" exactly when some but not all symbols came back live.
"""
from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from config.settings import Settings
from services.alpha_vantage.client import AlphaVantageClient
from services.finnhub.finnhub_service import FinnhubService
from services.fmp.client import FmpClient
from services.mock_data.stocks import mock_eu_stock, mock_financial_quote, mock_us_stock
from services.orchestrator import (
    DataQuality,
    FetchResult,
    Provider,
    combine_quality,
    first_successful,
    resolve_each,
    response_metadata,
)
from services.stocks import exchanges
from services.stocks.models import StockSnapshot
from utils.common_helpers import iso_now

logger = logging.getLogger(__name__)

DEFAULT_US_SYMBOLS = ("SPY",)
DEFAULT_FINANCIAL_SYMBOLS = ("SPY", "QQQ", "AAPL", "MSFT", "GOOGL")


def _accept_snapshot(value: Any) -> bool:
    return isinstance(value, StockSnapshot) and value.price > 0


def _stock_entry(result: FetchResult[StockSnapshot], *, european: bool) -> Dict[str, Any]:
    snap = result.value
    entry = snap.to_dict()
    if european:
        entry["country"] = exchanges.country_for(snap.symbol)
        entry["exchange"] = snap.exchange or exchanges.exchange_for(snap.symbol)
        entry["currency"] = snap.currency or exchanges.currency_for(snap.symbol)
    entry["options"] = None
    entry["timestamp"] = iso_now()
    entry["dataQuality"] = result.quality.value
    entry["source"] = result.source or "sample"
    error = result.error_message()
    if error:
        entry["error"] = error
    return entry


def _count_message(live: int, mock: int, subject: str) -> str:
    if live == 0:
        return f"All {subject} is simulated"
    if mock == 0:
        return f"All {subject} is live"
    return f"{live} live, {mock} simulated"


def _stocks_payload(
    symbols: Sequence[str],
    results: Sequence[FetchResult[StockSnapshot]],
    *,
    european: bool,
) -> Dict[str, Any]:
    live = sum(1 for r in results if r.is_live)
    mock = len(results) - live
    quality = combine_quality(results)

    error = None
    if quality is DataQuality.MOCK and results:
        error = results[0].error_message()
    elif quality is DataQuality.MIXED:
        error = f"Live data unavailable for {mock} of {len(results)} symbols"

    return {
        "stocks": [_stock_entry(r, european=european) for r in results],
        "metadata": response_metadata(
            quality,
            error=error,
            symbols=list(symbols),
            liveDataCount=live,
            mockDataCount=mock,
            message=_count_message(live, mock, "European stock data" if european else "data"),
        ),
    }


def _us_providers(
    symbol: str,
    settings: Settings,
    client: httpx.AsyncClient,
    include_technicals: bool,
) -> List[Provider[StockSnapshot]]:
    return [
        Provider(
            "FMP",
            bool(settings.fmp_api_key),
            lambda: FmpClient(settings.fmp_api_key, client).snapshot(symbol, include_technicals),
        ),
        Provider(
            "Alpha Vantage",
            bool(settings.alpha_vantage_api_key),
            lambda: AlphaVantageClient(settings.alpha_vantage_api_key, client).snapshot(symbol, include_technicals),
        ),
        Provider(
            "Finnhub",
            bool(settings.finnhub_api_key),
            lambda: FinnhubService(settings.finnhub_api_key, client).snapshot(symbol),
        ),
    ]


def _eu_providers(
    symbol: str,
    settings: Settings,
    client: httpx.AsyncClient,
    include_technicals: bool,
) -> List[Provider[StockSnapshot]]:
    return [
        Provider(
            "FMP",
            bool(settings.fmp_api_key),
            lambda: FmpClient(settings.fmp_api_key, client).snapshot(symbol, include_technicals),
        ),
        Provider(
            "Alpha Vantage",
            bool(settings.alpha_vantage_api_key),
            lambda: AlphaVantageClient(settings.alpha_vantage_api_key, client).snapshot(
                symbol, include_technicals, fallback_name=exchanges.company_name(symbol)
            ),
        ),
    ]


async def _get_stocks(
    symbols: Sequence[str],
    *,
    providers_for: Callable[[str], List[Provider[StockSnapshot]]],
    mock_for: Callable[[str], StockSnapshot],
    european: bool,
) -> Dict[str, Any]:
    async def _resolve(symbol: str) -> FetchResult[StockSnapshot]:
        return await first_successful(
            providers_for(symbol),
            lambda: mock_for(symbol),
            dataset=f"stocks:{symbol}",
            accept=_accept_snapshot,
        )

    results = await resolve_each(symbols, _resolve, mock_for, dataset="stocks")
    return _stocks_payload(symbols, results, european=european)


async def get_us_stocks(
    settings: Settings,
    client: httpx.AsyncClient,
    symbols: Sequence[str],
    *,
    include_technicals: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()
    return await _get_stocks(
        symbols,
        providers_for=lambda s: _us_providers(s, settings, client, include_technicals),
        mock_for=lambda s: mock_us_stock(s, rng),
        european=False,
    )


async def get_eu_stocks(
    settings: Settings,
    client: httpx.AsyncClient,
    symbols: Sequence[str],
    *,
    include_technicals: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()
    return await _get_stocks(
        symbols,
        providers_for=lambda s: _eu_providers(s, settings, client, include_technicals),
        mock_for=lambda s: mock_eu_stock(s, rng),
        european=True,
    )


def stocks_fallback(
    symbols: Sequence[str],
    error: str,
    *,
    european: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()
    mock_for = mock_eu_stock if european else mock_us_stock
    results = [FetchResult(value=mock_for(s, rng), quality=DataQuality.MOCK) for s in symbols]
    payload = _stocks_payload(symbols, results, european=european)
    payload["metadata"]["error"] = error
    return payload


# -----------------------
# Compact Alpha Vantage quotes
# -----------------------

async def _financial_quote(av: AlphaVantageClient, symbol: str) -> Dict[str, Any]:
    snap = await av.snapshot(symbol)
    return {
        "symbol": symbol,
        "price": snap.price,
        "change": snap.change,
        "changePercent": snap.change_percent,
        "volume": snap.volume,
        "marketCap": snap.market_cap,
        "pe": snap.pe,
        "eps": snap.eps,
        "dividendYield": snap.dividend_yield,
    }


async def get_financial_quotes(
    settings: Settings,
    client: httpx.AsyncClient,
    symbols: Sequence[str],
    *,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()
    av = AlphaVantageClient(settings.alpha_vantage_api_key or "", client)

    async def _resolve(symbol: str) -> FetchResult[Dict[str, Any]]:
        return await first_successful(
            [Provider("Alpha Vantage", bool(settings.alpha_vantage_api_key), lambda: _financial_quote(av, symbol))],
            lambda: mock_financial_quote(symbol, rng),
            dataset=f"financial:{symbol}",
        )

    results = await resolve_each(symbols, _resolve, lambda s: mock_financial_quote(s, rng), dataset="financial")
    quality = combine_quality(results)
    live = sum(1 for r in results if r.is_live)

    stocks = []
    for r in results:
        entry = {**r.value, "timestamp": iso_now(), "dataQuality": r.quality.value}
        stocks.append(entry)

    error = None
    if quality is not DataQuality.LIVE and results:
        error = next((r.error_message() for r in results if r.error_message()), None)
    return {
        "stocks": stocks,
        "metadata": response_metadata(
            quality,
            error=error,
            requestedSymbols=list(symbols),
            successfulFetches=live,
        ),
    }


def financial_fallback(symbols: Sequence[str], error: str, *, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    rng = rng or random.Random()
    stocks = [
        {**mock_financial_quote(s, rng), "timestamp": iso_now(), "dataQuality": DataQuality.MOCK.value}
        for s in symbols
    ]
    return {
        "stocks": stocks,
        "metadata": response_metadata(
            DataQuality.MOCK,
            error=error,
            requestedSymbols=list(symbols),
            successfulFetches=0,
        ),
    }
