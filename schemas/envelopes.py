from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResponseMetadata(BaseModel):
    """
    Endpoint-specific keys (counts, query echo, sources) ride along as extras,
    as does `error`, which is present only when something was substituted.
    """

    model_config = ConfigDict(extra="allow")

    timestamp: str
    dataQuality: Literal["live", "mixed", "mock"]


class Envelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    metadata: ResponseMetadata


class SentimentMetrics(BaseModel):
    model_config = ConfigDict(extra="allow")

    averageSentiment: int
    bullishPercentage: int
    bearishPercentage: int
    neutralPercentage: int


class Topic(BaseModel):
    topic: str
    count: int
    averageSentiment: int


class NewsResponse(Envelope):
    articles: List[Dict[str, Any]] = Field(default_factory=list)
    metrics: SentimentMetrics
    topics: List[Topic] = Field(default_factory=list)


class RedditResponse(Envelope):
    posts: List[Dict[str, Any]] = Field(default_factory=list)
    metrics: SentimentMetrics


class TwitterResponse(Envelope):
    tweets: List[Dict[str, Any]] = Field(default_factory=list)
    metrics: SentimentMetrics


class StocksResponse(Envelope):
    stocks: List[Dict[str, Any]] = Field(default_factory=list)


class MacroCorrelation(BaseModel):
    model_config = ConfigDict(extra="allow")

    stock: str
    macro: str
    correlation: float
    macroName: str


class MacroCorrelationsResponse(Envelope):
    correlations: List[MacroCorrelation] = Field(default_factory=list)
    insights: Dict[str, str] = Field(default_factory=dict)


class CorrelationSummary(BaseModel):
    coefficient: float
    strength: str
    direction: Literal["Positive", "Negative"]
    significance: Literal["Significant", "Weak"]


class SentimentCorrelationResponse(Envelope):
    correlation: CorrelationSummary
    data: Dict[str, List[Dict[str, Any]]]
    insights: Dict[str, str] = Field(default_factory=dict)


class ShillerResponse(Envelope):
    current: Dict[str, Any]
    statistics: Optional[Dict[str, Any]] = None
    historical: Dict[str, Any]
    forecasts: Optional[Dict[str, Any]] = None


class FearGreedComponent(BaseModel):
    name: str
    value: int
    weight: int


class FearGreedResponse(Envelope):
    index: int
    label: str
    components: List[FearGreedComponent] = Field(default_factory=list)
