from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from services.news.articles import NewsArticle

PLACEHOLDER_IMAGE = "https://placeholder.svg?height=200&width=300"

# (title, description, source, slug)
_US_ARTICLES = (
    (
        "Fed signals potential rate cuts as inflation cools to 2.1%",
        "Federal Reserve officials indicated they may consider interest rate cuts in the coming months as inflation shows signs of moderating to target levels.",
        "Financial Times",
        "fed-signals-rate-cuts",
    ),
    (
        "Tech stocks rally on strong AI earnings and revenue growth",
        "Technology shares surged today following better-than-expected earnings reports from major AI companies and continued enthusiasm about artificial intelligence developments.",
        "Wall Street Journal",
        "tech-stocks-rally",
    ),
    (
        "Market volatility increases as economic data shows mixed signals",
        "Investors face uncertainty as recent economic indicators present a conflicting picture of the economy's health, with strong employment but weak manufacturing.",
        "Bloomberg",
        "market-volatility",
    ),
    (
        "Housing market shows signs of recovery as mortgage rates stabilize",
        "Home sales increased for the second consecutive month as mortgage rates stabilized around 6.5%, improving affordability for buyers.",
        "Reuters",
        "housing-market-recovery",
    ),
    (
        "Oil prices surge on OPEC production cuts and geopolitical tensions",
        "Crude oil futures jumped 4% today as OPEC announced additional production cuts and geopolitical tensions in the Middle East escalated.",
        "CNBC",
        "oil-prices-surge",
    ),
    (
        "Retail sales beat expectations, boosting consumer sector outlook",
        "Consumer spending showed remarkable resilience last month, with retail sales figures coming in 2.1% above analyst forecasts, signaling economic strength.",
        "MarketWatch",
        "retail-sales-beat",
    ),
    (
        "Inflation data comes in below expectations, markets celebrate",
        "The latest Consumer Price Index showed inflation cooling faster than expected, potentially giving the Federal Reserve more flexibility in monetary policy.",
        "The Economist",
        "inflation-data-cool",
    ),
    (
        "Major banks report strong Q4 profits, beating analyst estimates",
        "Leading financial institutions posted stronger-than-expected quarterly results, driven by robust investment banking revenue and improved credit quality.",
        "Financial News",
        "banks-strong-profits",
    ),
    (
        "Cryptocurrency market rebounds as regulatory clarity improves",
        "Digital assets saw significant gains after regulators provided clearer guidance on the industry's oversight framework, boosting investor confidence.",
        "CoinDesk",
        "crypto-market-rebounds",
    ),
    (
        "Manufacturing activity expands for first time in six months",
        "The latest manufacturing index showed unexpected expansion in the sector, raising optimism about industrial production and economic recovery.",
        "Industry Week",
        "manufacturing-expands",
    ),
)

# (title, description, source, slug, country)
_EU_ARTICLES = (
    (
        "ECB signals dovish stance as eurozone inflation moderates to 2.3%",
        "European Central Bank officials hint at potential rate cuts as inflation approaches target levels across the eurozone.",
        "Financial Times Europe",
        "ecb-dovish-stance",
        "Europe",
    ),
    (
        "German DAX rallies on strong manufacturing data and export growth",
        "German stocks surged following better-than-expected manufacturing PMI and robust export figures, signaling economic resilience.",
        "Reuters Germany",
        "german-dax-rally",
        "Germany",
    ),
    (
        "French CAC 40 declines on energy sector concerns and regulatory pressure",
        "French markets fell as energy companies face new EU regulations and concerns over winter energy supplies persist.",
        "Les Echos",
        "french-cac-decline",
        "France",
    ),
    (
        "Italian banks surge on improved credit quality and ECB policy outlook",
        "Italian banking stocks rallied as non-performing loans decreased and expectations of ECB policy easing boosted sector sentiment.",
        "Il Sole 24 Ore",
        "italian-banks-surge",
        "Italy",
    ),
    (
        "Spanish renewable energy stocks climb on EU Green Deal funding",
        "Spanish clean energy companies gained as the EU announced additional funding for renewable energy projects under the Green Deal.",
        "El Economista",
        "spanish-renewable-climb",
        "Spain",
    ),
    (
        "Dutch tech stocks benefit from EU digital sovereignty initiatives",
        "Netherlands-based technology companies rose on news of increased EU investment in digital infrastructure and semiconductor manufacturing.",
        "Het Financieele Dagblad",
        "dutch-tech-benefit",
        "Netherlands",
    ),
    (
        "STOXX Europe 600 reaches new highs on corporate earnings optimism",
        "European stocks hit record levels as Q4 earnings season begins with several companies beating analyst expectations.",
        "Bloomberg Europe",
        "stoxx-new-highs",
        "Europe",
    ),
    (
        "Brexit trade tensions weigh on UK-EU cross-border investments",
        "Ongoing Brexit-related trade disputes continue to impact investment flows between the UK and European Union markets.",
        "Financial News London",
        "brexit-trade-tensions",
        "UK",
    ),
)


def _published(now: datetime, index: int) -> str:
    # two hours apart, newest first
    ts = now - timedelta(hours=2 * (index + 1))
    return ts.isoformat().replace("+00:00", "Z")


def mock_market_news(now: Optional[datetime] = None) -> List[NewsArticle]:
    now = now or datetime.now(timezone.utc)
    return [
        {
            "title": title,
            "description": description,
            "source": source,
            "url": f"https://example.com/{slug}",
            "publishedAt": _published(now, i),
            "urlToImage": PLACEHOLDER_IMAGE,
        }
        for i, (title, description, source, slug) in enumerate(_US_ARTICLES)
    ]


def mock_european_news(now: Optional[datetime] = None) -> List[NewsArticle]:
    now = now or datetime.now(timezone.utc)
    return [
        {
            "title": title,
            "description": description,
            "source": source,
            "url": f"https://example.com/{slug}",
            "publishedAt": _published(now, i),
            "urlToImage": PLACEHOLDER_IMAGE,
            "country": country,
        }
        for i, (title, description, source, slug, country) in enumerate(_EU_ARTICLES)
    ]
