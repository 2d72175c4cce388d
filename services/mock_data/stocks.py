from __future__ import annotations

import random
from typing import Dict, NamedTuple

from services.stocks.exchanges import company_name, currency_for, exchange_for
from services.stocks.models import StockSnapshot, Technicals
from utils.common_helpers import round_half_up


class _Profile(NamedTuple):
    name: str
    sector: str
    price: float
    change: float
    volume: int
    pe: float
    beta: float


_US_PROFILES: Dict[str, _Profile] = {
    "AAPL": _Profile("Apple Inc.", "Technology", 185.25, 2.15, 45_000_000, 28.5, 1.2),
    "MSFT": _Profile("Microsoft Corporation", "Technology", 378.9, -1.25, 32_000_000, 32.1, 0.9),
    "GOOGL": _Profile("Alphabet Inc.", "Technology", 142.8, 3.45, 28_000_000, 25.8, 1.1),
    "TSLA": _Profile("Tesla Inc.", "Consumer Cyclical", 248.5, -8.75, 85_000_000, 65.2, 2.1),
    "NVDA": _Profile("NVIDIA Corporation", "Technology", 875.3, 15.2, 42_000_000, 68.5, 1.7),
    "SPY": _Profile("SPDR S&P 500 ETF", "ETF", 485.2, 1.85, 55_000_000, 21.5, 1.0),
    "QQQ": _Profile("Invesco QQQ Trust", "ETF", 395.75, 2.3, 38_000_000, 28.2, 1.2),
    "VTI": _Profile("Vanguard Total Stock Market ETF", "ETF", 245.6, 1.2, 25_000_000, 22.1, 1.0),
}

_EU_SECTORS = ("Technology", "Healthcare", "Consumer Goods", "Financials", "Energy")


def mock_technicals(rng: random.Random) -> Technicals:
    return Technicals(
        rsi=round_half_up(rng.random() * 40 + 30, 2),
        macd=round_half_up(rng.random() * 2 - 1, 2),
        macd_signal=round_half_up(rng.random() * 2 - 1, 2),
        macd_hist=round_half_up(rng.random() - 0.5, 2),
    )


def mock_us_stock(symbol: str, rng: random.Random) -> StockSnapshot:
    """Known tickers get their reference profile; anything else borrows SPY's."""
    base = _US_PROFILES.get(symbol.upper(), _US_PROFILES["SPY"])
    change_percent = base.change / (base.price - base.change) * 100
    return StockSnapshot(
        symbol=symbol.upper(),
        name=base.name,
        sector=base.sector,
        industry="Sample Industry",
        price=base.price,
        change=base.change,
        change_percent=round_half_up(change_percent, 2),
        volume=base.volume,
        market_cap=round_half_up(base.price * 1_000_000_000),
        pe=base.pe,
        eps=round_half_up(base.price / base.pe, 2),
        dividend_yield=round_half_up(rng.random() * 3, 2),
        beta=base.beta,
        week52_high=round_half_up(base.price * 1.25, 2),
        week52_low=round_half_up(base.price * 0.75, 2),
        technicals=mock_technicals(rng),
    )


def mock_eu_stock(symbol: str, rng: random.Random) -> StockSnapshot:
    price = 50 + rng.random() * 200
    change = (rng.random() - 0.5) * 10
    return StockSnapshot(
        symbol=symbol,
        name=company_name(symbol),
        sector=rng.choice(_EU_SECTORS),
        industry="Sample Industry",
        price=round_half_up(price, 2),
        change=round_half_up(change, 2),
        change_percent=round_half_up(change / price * 100, 2),
        volume=rng.randint(100_000, 10_100_000),
        market_cap=float(rng.randint(10_000_000_000, 510_000_000_000)),
        pe=round_half_up(15 + rng.random() * 25, 2),
        eps=round_half_up(2 + rng.random() * 8, 2),
        dividend_yield=round_half_up(rng.random() * 5, 2),
        beta=round_half_up(0.8 + rng.random() * 0.8, 2),
        week52_high=round_half_up(price * (1.1 + rng.random() * 0.3), 2),
        week52_low=round_half_up(price * (0.7 + rng.random() * 0.2), 2),
        technicals=mock_technicals(rng),
        exchange=exchange_for(symbol),
        currency=currency_for(symbol),
    )


def mock_financial_quote(symbol: str, rng: random.Random) -> Dict[str, object]:
    stock = mock_us_stock(symbol, rng)
    return {
        "symbol": symbol,
        "price": stock.price,
        "change": stock.change,
        "changePercent": stock.change_percent,
        "volume": stock.volume,
        "marketCap": stock.market_cap,
        "pe": stock.pe,
        "eps": stock.eps,
        "dividendYield": stock.dividend_yield,
    }
