from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, TypedDict

from dateutil import parser


class NewsArticle(TypedDict, total=False):
    title: str
    description: str
    source: str
    url: str
    publishedAt: str  # ISO8601 UTC
    urlToImage: Optional[str]
    country: str
    sentiment: int


def _normalize_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return " ".join(value.strip().split())


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        parsed = parser.parse(str(value))
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: Any) -> str:
    parsed = parse_datetime(value)
    if parsed is None:
        return ""
    return parsed.isoformat().replace("+00:00", "Z")


def make_article(
    *,
    title: Any,
    description: Any,
    source: Any,
    url: Any,
    published_at: Any,
    image: Any = None,
) -> NewsArticle:
    return {
        "title": _normalize_text(title),
        "description": _normalize_text(description),
        "source": _normalize_text(source) or "Unknown",
        "url": _normalize_text(url),
        "publishedAt": to_iso(published_at),
        "urlToImage": image or None,
    }


def is_usable(article: NewsArticle) -> bool:
    title = article.get("title") or ""
    return bool(title and article.get("description")) and "[Removed]" not in title


def published_after(article: NewsArticle, since: datetime) -> bool:
    published = parse_datetime(article.get("publishedAt"))
    return published is not None and published >= since


def dedupe_by_title(items: Iterable[NewsArticle]) -> List[NewsArticle]:
    """Keep the first article for each exact title."""
    seen: set[str] = set()
    out: List[NewsArticle] = []
    for item in items:
        title = item.get("title") or ""
        if title in seen:
            continue
        seen.add(title)
        out.append(item)
    return out


def newest_first(items: Iterable[NewsArticle]) -> List[NewsArticle]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        items,
        key=lambda a: parse_datetime(a.get("publishedAt")) or epoch,
        reverse=True,
    )


def finalize_articles(items: Iterable[NewsArticle], limit: int) -> List[NewsArticle]:
    return newest_first(dedupe_by_title(items))[: max(0, limit)]
