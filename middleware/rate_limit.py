# middleware/rate_limit.py
"""
Rate limiting configuration using slowapi.

Every endpoint is public and read-only, so limits are bucketed per client
address and applied globally through SlowAPIMiddleware:

    app.state.limiter = build_limiter(settings)
    app.add_middleware(SlowAPIMiddleware)
"""
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from config.settings import Settings

logger = logging.getLogger(__name__)


def build_limiter(settings: Settings) -> Limiter:
    if not settings.rate_limit_enabled:
        logger.info("Rate limiting disabled via RATE_LIMIT_ENABLED")
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit_default],
        storage_uri=settings.rate_limit_storage_uri,
        strategy="fixed-window",
        enabled=settings.rate_limit_enabled,
    )
