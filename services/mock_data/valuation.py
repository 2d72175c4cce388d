from __future__ import annotations

import math
import random
from datetime import date
from typing import Any, Dict, List, Optional

from utils.common_helpers import round_half_up

PERIOD_MONTHS = {"1y": 12, "5y": 60, "10y": 120, "max": 300}
DEFAULT_PERIOD = "5y"

# used when no S&P 500 level can be fetched
FALLBACK_SP500 = {"price": 4847.5, "change": 12.3, "changePercent": 0.25}


def period_months(period: str) -> int:
    return PERIOD_MONTHS.get(period, PERIOD_MONTHS[DEFAULT_PERIOD])


def _month_start(today: date, back: int) -> date:
    index = today.year * 12 + (today.month - 1) - back
    return date(index // 12, index % 12 + 1, 1)


def synthetic_shiller_history(
    period: str,
    rng: random.Random,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Monthly CAPE shaped like the real series since 2000: a 25-year sine
    around the long-run mean of 16.9, the dot-com peak, the 2008 trough and
    the post-2020 plateau, plus +-1.5 of noise. Values never drop below 5.
    """
    today = today or date.today()
    months = period_months(period)
    out = []
    for back in range(months - 1, -1, -1):
        day = _month_start(today, back)
        progress = (day.year - 2000) / 25

        cape = 16.9 + math.sin(progress * math.pi * 2) * 8
        if day.year == 2000:
            cape += 15
        if day.year == 2008:
            cape -= 8
        if day.year >= 2020:
            cape += 10
        cape += (rng.random() - 0.5) * 3

        out.append({
            "date": day.isoformat(),
            "shillerPE": max(5.0, round_half_up(cape, 1)),
            "sp500": 1000 + progress * 3000 + math.sin(progress * math.pi * 4) * 500,
        })
    return out


def modeled_annual_earnings(today: Optional[date] = None) -> List[float]:
    """Ten years of S&P 500 earnings from a trend-plus-cycle model, oldest first."""
    year_now = (today or date.today()).year
    out = []
    for year in range(year_now - 9, year_now + 1):
        offset = year - 2014
        out.append(120 + offset * 4.2 + math.sin(offset * 0.5) * 10)
    return out


def ten_year_average_earnings(today: Optional[date] = None) -> float:
    earnings = modeled_annual_earnings(today)
    return sum(earnings) / len(earnings)
