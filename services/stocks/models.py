from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Technicals:
    rsi: Optional[float] = None
    macd: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_hist: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rsi": self.rsi,
            "macd": self.macd,
            "macdSignal": self.macd_signal,
            "macdHist": self.macd_hist,
        }


@dataclass(frozen=True)
class StockSnapshot:
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    volume: int
    sector: str = "Unknown"
    industry: str = "Unknown"
    market_cap: Optional[float] = None
    pe: Optional[float] = None
    eps: Optional[float] = None
    dividend_yield: Optional[float] = None
    beta: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    technicals: Optional[Technicals] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "sector": self.sector,
            "industry": self.industry,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
            "volume": self.volume,
            "marketCap": self.market_cap,
            "pe": self.pe,
            "eps": self.eps,
            "dividendYield": self.dividend_yield,
            "beta": self.beta,
            "week52High": self.week52_high,
            "week52Low": self.week52_low,
            "technicals": self.technicals.to_dict() if self.technicals else None,
        }
