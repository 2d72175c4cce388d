"""European news scoping: country codes, query augmentation and relevance filters."""
from __future__ import annotations

from typing import Dict, Sequence, Tuple

from services.news.articles import NewsArticle
from services.sentiment.topics import article_text

COUNTRY_CODES: Dict[str, Tuple[str, ...]] = {
    "all": ("de", "fr", "it", "es", "nl", "gb"),
    "de": ("de",),
    "fr": ("fr",),
    "it": ("it",),
    "es": ("es",),
    "nl": ("nl",),
    "gb": ("gb",),
}

EUROPEAN_KEYWORDS: Sequence[str] = (
    "ecb", "european", "eurozone", "euro", "dax", "cac", "ftse", "stoxx",
    "germany", "france", "italy", "spain", "netherlands", "eu", "brexit",
    "draghi", "lagarde",
)

# first match wins
_COUNTRY_RULES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("Germany", ("germany", "german", "dax")),
    ("France", ("france", "french", "cac")),
    ("Italy", ("italy", "italian")),
    ("Spain", ("spain", "spanish")),
    ("Netherlands", ("netherlands", "dutch")),
    ("UK", ("uk", "britain", "ftse")),
)


def country_codes(country: str) -> Tuple[str, ...]:
    """Unknown selectors widen to every supported country."""
    return COUNTRY_CODES.get((country or "").lower(), COUNTRY_CODES["all"])


def newsapi_query(query: str) -> str:
    return (
        f"({query}) AND (ECB OR \"European Central Bank\" OR \"European Union\" OR eurozone "
        f"OR STOXX OR DAX OR CAC OR FTSE OR \"European stocks\")"
    )


def gnews_query(query: str) -> str:
    return f"{query} ECB European stocks eurozone"


def is_european(article: NewsArticle) -> bool:
    text = article_text(article).lower()
    return any(k in text for k in EUROPEAN_KEYWORDS)


def detect_country(text: str) -> str:
    lowered = (text or "").lower()
    for country, keywords in _COUNTRY_RULES:
        if any(k in lowered for k in keywords):
            return country
    return "Europe"
