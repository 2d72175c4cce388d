from __future__ import annotations

import math
import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from utils.common_helpers import round_half_up, round_int

# typical daily-return correlations (stock -> indicator -> r)
TYPICAL_CORRELATIONS: Dict[str, Dict[str, float]] = {
    "AAPL": {"DXY": -0.15, "TNX": -0.25, "VIX": -0.45, "GLD": -0.1, "OIL": 0.05, "BTC-USD": 0.2, "EUR=X": 0.15},
    "MSFT": {"DXY": -0.12, "TNX": -0.22, "VIX": -0.42, "GLD": -0.08, "OIL": 0.03, "BTC-USD": 0.18, "EUR=X": 0.12},
    "GOOGL": {"DXY": -0.18, "TNX": -0.28, "VIX": -0.48, "GLD": -0.12, "OIL": 0.02, "BTC-USD": 0.22, "EUR=X": 0.18},
    "TSLA": {"DXY": -0.25, "TNX": -0.35, "VIX": -0.55, "GLD": -0.15, "OIL": 0.1, "BTC-USD": 0.35, "EUR=X": 0.25},
    "NVDA": {"DXY": -0.2, "TNX": -0.3, "VIX": -0.5, "GLD": -0.13, "OIL": 0.08, "BTC-USD": 0.3, "EUR=X": 0.2},
    "SPY": {"DXY": -0.1, "TNX": -0.2, "VIX": -0.8, "GLD": -0.05, "OIL": 0.15, "BTC-USD": 0.25, "EUR=X": 0.1},
    "QQQ": {"DXY": -0.15, "TNX": -0.25, "VIX": -0.75, "GLD": -0.08, "OIL": 0.12, "BTC-USD": 0.3, "EUR=X": 0.15},
    "VTI": {"DXY": -0.08, "TNX": -0.18, "VIX": -0.78, "GLD": -0.03, "OIL": 0.18, "BTC-USD": 0.22, "EUR=X": 0.08},
}


def typical_correlation(stock: str, indicator: str, rng: random.Random) -> float:
    """Known pair -> table value; unknown pair -> uniform in [-0.3, 0.3)."""
    known = TYPICAL_CORRELATIONS.get(stock.upper(), {}).get(indicator)
    if known is not None:
        return known
    return round_half_up((rng.random() - 0.5) * 0.6, 2)


def _day_range(days: int, today: Optional[date]) -> List[str]:
    today = today or date.today()
    start = today - timedelta(days=days)
    return [(start + timedelta(days=i)).isoformat() for i in range(days)]


def mock_sentiment_history(days: int, rng: random.Random, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Daily combined/reddit/twitter sentiment following slow sine cycles plus noise."""
    out = []
    for i, day in enumerate(_day_range(days, today)):
        out.append({
            "date": day,
            "sentiment": round_int(50 + math.sin(i * 0.1) * 20 + (rng.random() - 0.5) * 15),
            "reddit": round_int(50 + math.sin(i * 0.12) * 25 + (rng.random() - 0.5) * 10),
            "twitter": round_int(50 + math.sin(i * 0.08) * 15 + (rng.random() - 0.5) * 20),
            "volume": round_int(1000 + rng.random() * 500),
        })
    return out


def mock_market_history(days: int, rng: random.Random, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Random-walk index level starting at 4500; `return` is the daily move in points."""
    out = []
    price = 4500.0
    for day in _day_range(days, today):
        daily = (rng.random() - 0.5) * 3
        price += daily
        out.append({
            "date": day,
            "price": round_half_up(price, 2),
            "return": round_half_up(daily, 2),
            "volume": round_int(3_000_000 + rng.random() * 1_000_000),
        })
    return out
