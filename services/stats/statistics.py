# services/stats/statistics.py
"""
Small statistics toolkit: Pearson correlation, returns, percentile rank and
valuation bucketing. Pure functions over pandas Series, no I/O.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import pandas as pd

from utils.common_helpers import round_half_up, round_int


def _series(values: Iterable[float]) -> pd.Series:
    return pd.Series(list(values), dtype=float)


def mean(values: Sequence[float]) -> float:
    s = _series(values)
    return float(s.mean()) if len(s) else 0.0


def median(values: Sequence[float]) -> float:
    """Upper-middle element of the sorted sample (no averaging for even sizes)."""
    s = _series(values)
    if s.empty:
        return 0.0
    return float(s.sort_values().iloc[len(s) // 2])


def stddev(values: Sequence[float]) -> float:
    """Population standard deviation."""
    s = _series(values)
    return float(s.std(ddof=0)) if len(s) else 0.0


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson's r over the common prefix of x and y; 0.0 when undefined."""
    n = min(len(x), len(y))
    if n < 2:
        return 0.0
    r = _series(x).iloc[:n].corr(_series(y).iloc[:n])
    if r is None or math.isnan(r):
        return 0.0
    return max(-1.0, min(1.0, float(r)))


def returns(prices: Sequence[float]) -> List[float]:
    """Step returns (p[i] - p[i-1]) / p[i-1]; a zero previous price gives 0.0."""
    s = _series(prices)
    if len(s) < 2:
        return []
    step = (s.diff() / s.shift(1)).iloc[1:]
    step = step.replace([math.inf, -math.inf], math.nan).fillna(0.0)
    return step.tolist()


def correlation_strength(r: float) -> str:
    a = abs(r)
    if a >= 0.7:
        return "Very Strong"
    if a >= 0.5:
        return "Strong"
    if a >= 0.3:
        return "Moderate"
    if a >= 0.1:
        return "Weak"
    return "Very Weak"


def correlation_summary(r: float) -> Dict[str, Any]:
    return {
        "coefficient": round_half_up(r, 2),
        "strength": correlation_strength(r),
        "direction": "Positive" if r > 0 else "Negative",
        "significance": "Significant" if abs(r) > 0.3 else "Weak",
    }


def percentile_rank(value: float, sample: Sequence[float]) -> float:
    s = _series(sample)
    if s.empty:
        return 0.0
    return int((s <= value).sum()) / len(s) * 100


def valuation_label(value: float, mu: float, sigma: float) -> str:
    if value > mu + 2 * sigma:
        return "Extremely Overvalued"
    if value > mu + sigma:
        return "Significantly Overvalued"
    if value > mu + 0.5 * sigma:
        return "Moderately Overvalued"
    if value < mu - 2 * sigma:
        return "Significantly Undervalued"
    if value < mu - sigma:
        return "Undervalued"
    return "Fair Value"


@dataclass(frozen=True)
class ValuationStatistics:
    historical_average: float
    historical_median: float
    current_percentile: int
    standard_deviation: float
    min_value: float
    max_value: float
    valuation: str
    deviation_from_mean: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "historicalAverage": self.historical_average,
            "historicalMedian": self.historical_median,
            "currentPercentile": self.current_percentile,
            "standardDeviation": self.standard_deviation,
            "minValue": self.min_value,
            "maxValue": self.max_value,
            "valuation": self.valuation,
            "deviationFromMean": self.deviation_from_mean,
        }


def valuation_statistics(history: Sequence[float], current: float) -> ValuationStatistics:
    if not history:
        raise ValueError("valuation statistics need at least one historical value")
    mu = mean(history)
    sigma = stddev(history)
    deviation = ((current - mu) / mu * 100) if mu else 0.0
    return ValuationStatistics(
        historical_average=round_half_up(mu, 1),
        historical_median=round_half_up(median(history), 1),
        current_percentile=round_int(percentile_rank(current, history)),
        standard_deviation=round_half_up(sigma, 1),
        min_value=float(min(history)),
        max_value=float(max(history)),
        valuation=valuation_label(current, mu, sigma),
        deviation_from_mean=round_half_up(deviation, 1),
    )


def dated_series(rows: Iterable[Mapping[str, Any]]) -> pd.Series:
    """[{date, value}] -> float Series indexed by date; the last row wins on duplicate dates."""
    frame = pd.DataFrame(list(rows), columns=["date", "value"])
    s = pd.Series(pd.to_numeric(frame["value"], errors="coerce").to_numpy(), index=frame["date"], dtype=float)
    return s[~s.index.duplicated(keep="last")].dropna()


def align_by_date(
    left: Iterable[Mapping[str, Any]],
    right: Iterable[Mapping[str, Any]],
) -> pd.DataFrame:
    """Inner join of two dated series on exact date, in `left` order; columns `left` and `right`."""
    return dated_series(left).to_frame("left").join(dated_series(right).to_frame("right"), how="inner")
