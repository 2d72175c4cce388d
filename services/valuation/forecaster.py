# services/valuation/forecaster.py
"""
Return and correction-probability forecasts from a single CAPE reading.

A fixed linear model around a CAPE of 25: every point below 25 adds 0.3pp to
the 7% base annual return, every point above subtracts it. Longer horizons
damp the valuation impact (x0.7 five-year, x0.5 ten-year) and narrow the band.
"""
from __future__ import annotations

from typing import Any, Dict

from utils.common_helpers import clamp, round_half_up, round_int

BASE_RETURN_PCT = 7.0
NEUTRAL_RATIO = 25.0
IMPACT_PER_POINT = 0.3

# horizon -> (impact multiplier, low offset, high offset)
_HORIZONS = {
    "oneYear": (1.0, -20.0, 15.0),
    "fiveYear": (0.7, -5.0, 5.0),
    "tenYear": (0.5, -3.0, 3.0),
}

# drawdown -> (ratio threshold, slope, floor, ceiling)
_CORRECTIONS = {
    "tenPercent": (15.0, 3.0, 10, 90),
    "twentyPercent": (20.0, 2.5, 5, 70),
    "thirtyPercent": (25.0, 2.0, 2, 50),
}


def valuation_impact(current_ratio: float) -> float:
    return (NEUTRAL_RATIO - current_ratio) * IMPACT_PER_POINT


def expected_returns(current_ratio: float) -> Dict[str, Dict[str, float]]:
    impact = valuation_impact(current_ratio)
    out: Dict[str, Dict[str, float]] = {}
    for horizon, (mult, low, high) in _HORIZONS.items():
        base = BASE_RETURN_PCT + impact * mult
        out[horizon] = {
            "low": round_half_up(base + low, 1),
            "base": round_half_up(base, 1),
            "high": round_half_up(base + high, 1),
        }
    return out


def correction_probability(current_ratio: float) -> Dict[str, int]:
    return {
        name: int(clamp(round_int((current_ratio - threshold) * slope), floor, ceiling))
        for name, (threshold, slope, floor, ceiling) in _CORRECTIONS.items()
    }


def forecast_returns(current_ratio: float) -> Dict[str, Any]:
    return {
        "expectedReturns": expected_returns(current_ratio),
        "correctionProbability": correction_probability(current_ratio),
    }
