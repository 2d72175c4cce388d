"""
Process configuration, built once and injected.

Provider credentials are optional: a missing key means the matching provider
is skipped and the orchestrator falls back to synthetic data.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = ("http://localhost:3000",)


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    news_api_key: Optional[str] = None
    gnews_api_key: Optional[str] = None
    finnhub_api_key: Optional[str] = None
    fmp_api_key: Optional[str] = None
    alpha_vantage_api_key: Optional[str] = None
    fred_api_key: Optional[str] = None
    twitter_bearer_token: Optional[str] = None

    user_agent: str = "BehavioralFinanceDashboard/1.0"
    cors_origins: Tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    rate_limit_default: str = "120/minute"
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    http_max_connections: int = 20

    @classmethod
    def from_env(cls) -> "Settings":
        origins = _env("CORS_ORIGINS")
        return cls(
            news_api_key=_env("NEWS_API_KEY"),
            gnews_api_key=_env("GNEWS_API_KEY"),
            finnhub_api_key=_env("FINNHUB_API_KEY"),
            fmp_api_key=_env("FMP_API_KEY"),
            alpha_vantage_api_key=_env("ALPHA_VANTAGE_API_KEY"),
            fred_api_key=_env("FRED_API_KEY"),
            twitter_bearer_token=_env("TWITTER_BEARER_TOKEN"),
            user_agent=_env("HTTP_USER_AGENT") or cls.user_agent,
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) if origins else DEFAULT_CORS_ORIGINS,
            rate_limit_default=_env("RATE_LIMIT_DEFAULT") or cls.rate_limit_default,
            rate_limit_enabled=(_env("RATE_LIMIT_ENABLED") or "1").lower() not in ("0", "false", "no"),
            rate_limit_storage_uri=_env("REDIS_URL") or cls.rate_limit_storage_uri,
            http_max_connections=int(_env("HTTP_MAX_CONNECTIONS") or cls.http_max_connections),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return Settings.from_env()
