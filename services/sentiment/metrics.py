from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from services.sentiment.lexicon import NEUTRAL_SCORE
from utils.common_helpers import round_int

BULLISH_ABOVE = 60
BEARISH_BELOW = 40


@dataclass(frozen=True)
class SentimentMetrics:
    average_sentiment: int
    bullish_percentage: int
    bearish_percentage: int
    neutral_percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "averageSentiment": self.average_sentiment,
            "bullishPercentage": self.bullish_percentage,
            "bearishPercentage": self.bearish_percentage,
            "neutralPercentage": self.neutral_percentage,
        }


def classify(score: float) -> str:
    if score > BULLISH_ABOVE:
        return "bullish"
    if score < BEARISH_BELOW:
        return "bearish"
    return "neutral"


def sentiment_metrics(scores: Iterable[float]) -> SentimentMetrics:
    values: List[float] = list(scores)
    n = len(values)
    if n == 0:
        return SentimentMetrics(NEUTRAL_SCORE, 0, 0, 0)

    labels = [classify(s) for s in values]
    bullish = labels.count("bullish")
    bearish = labels.count("bearish")
    return SentimentMetrics(
        average_sentiment=round_int(sum(values) / n),
        bullish_percentage=round_int(bullish / n * 100),
        bearish_percentage=round_int(bearish / n * 100),
        neutral_percentage=round_int((n - bullish - bearish) / n * 100),
    )
