# services/sentiment/topics.py
"""
Keyword-bucket topic extraction over scored articles.

An article counts toward every topic with at least one keyword contained in
its lower-cased "title description" text.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from utils.common_helpers import round_int

MAX_TOPICS = 8

MARKET_TOPICS: Dict[str, Sequence[str]] = {
    "Interest Rates": ("interest rate", "fed", "federal reserve", "powell", "central bank", "fomc", "monetary policy"),
    "Tech Stocks": (
        "tech", "technology", "nasdaq", "ai", "artificial intelligence", "semiconductor",
        "apple", "microsoft", "google", "meta", "tesla", "nvidia",
    ),
    "Inflation": ("inflation", "cpi", "consumer price", "prices", "cost", "pce"),
    "Earnings": ("earnings", "revenue", "profit", "quarterly", "eps", "income", "results"),
    "Market Volatility": ("volatility", "vix", "uncertainty", "risk", "fear", "correction"),
    "Energy": ("oil", "gas", "energy", "crude", "renewable", "opec", "exxon", "chevron"),
    "Crypto": ("crypto", "bitcoin", "ethereum", "blockchain", "token", "coin", "digital currency"),
    "Housing": ("housing", "real estate", "mortgage", "home", "property", "reit"),
    "Jobs": ("jobs", "employment", "unemployment", "labor", "payroll", "hiring", "workforce"),
    "Recession": ("recession", "economic downturn", "contraction", "slowdown", "gdp"),
    "Banking": ("bank", "banking", "financial", "jpmorgan", "wells fargo", "credit", "loan"),
    "Trade": ("trade", "tariff", "export", "import", "china", "supply chain"),
}

EUROPEAN_TOPICS: Dict[str, Sequence[str]] = {
    "ECB Policy": ("ecb", "european central bank", "lagarde", "draghi", "monetary policy", "interest rate"),
    "EU Regulations": ("eu regulation", "european union", "compliance", "gdpr", "mifid", "basel"),
    "German Economy": ("germany", "german", "dax", "bundesbank", "manufacturing", "exports"),
    "French Economy": ("france", "french", "cac", "macron", "banque de france"),
    "Energy Crisis": ("energy", "gas", "oil", "renewable", "nuclear", "pipeline", "russia"),
    "Banking Sector": ("bank", "banking", "credit", "loan", "financial services", "fintech"),
    "Brexit Impact": ("brexit", "uk", "britain", "trade deal", "northern ireland"),
    "Italian Economy": ("italy", "italian", "rome", "debt", "bonds", "spread"),
    "Spanish Economy": ("spain", "spanish", "madrid", "unemployment", "tourism"),
    "Dutch Economy": ("netherlands", "dutch", "amsterdam", "aex", "trade"),
    "Eurozone": ("eurozone", "euro", "currency", "inflation", "gdp", "unemployment"),
    "Green Transition": ("green", "climate", "carbon", "sustainable", "esg", "renewable energy"),
}


def article_text(article: Mapping[str, Any]) -> str:
    return f"{article.get('title') or ''} {article.get('description') or ''}"


def extract_topics(
    articles: Sequence[Mapping[str, Any]],
    topic_keywords: Mapping[str, Sequence[str]] = MARKET_TOPICS,
    *,
    limit: int = MAX_TOPICS,
) -> List[Dict[str, Any]]:
    """Topics ranked by article count (ties keep first-seen order), top `limit`."""
    buckets: Dict[str, List[float]] = {}

    for article in articles:
        text = article_text(article).lower()
        for topic, keywords in topic_keywords.items():
            if any(k in text for k in keywords):
                buckets.setdefault(topic, []).append(float(article.get("sentiment", 50)))

    ranked = [
        {
            "topic": topic,
            "count": len(scores),
            "averageSentiment": round_int(sum(scores) / len(scores)),
        }
        for topic, scores in buckets.items()
    ]
    ranked.sort(key=lambda t: t["count"], reverse=True)
    return ranked[:limit]
