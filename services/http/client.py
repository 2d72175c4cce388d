#services/http/client.py
"""
Shared httpx plumbing for every upstream provider.

Every call carries its own timeout. Transport errors, non-2xx statuses,
timeouts and undecodable bodies all surface as UpstreamError so callers
have exactly one failure type to fall back on.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from utils.common_helpers import safe_json

logger = logging.getLogger(__name__)

NEWS_TIMEOUT_SEC = 15.0
QUOTE_TIMEOUT_SEC = 10.0
SECONDARY_TIMEOUT_SEC = 8.0


class UpstreamError(RuntimeError):
    """Raised when an upstream provider fails, times out or reports an error."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


def build_http_client(max_connections: int = 20) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(QUOTE_TIMEOUT_SEC, connect=3.0),
        limits=httpx.Limits(max_connections=max_connections, max_keepalive_connections=10),
        http2=True,
        follow_redirects=True,
    )


async def _get(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = QUOTE_TIMEOUT_SEC,
) -> httpx.Response:
    try:
        r = await client.get(url, params=params, headers=headers, timeout=httpx.Timeout(timeout))
    except httpx.TimeoutException as e:
        raise UpstreamError(provider, f"timed out after {timeout:.0f}s") from e
    except httpx.HTTPError as e:
        raise UpstreamError(provider, f"transport error {type(e).__name__}") from e

    try:
        r.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise UpstreamError(provider, f"HTTP {e.response.status_code}") from e
    return r


async def get_json(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = QUOTE_TIMEOUT_SEC,
) -> Any:
    # url only: params carry the api key
    logger.debug("GET %s (%s)", url, provider)
    r = await _get(client, provider, url, params=params, headers=headers, timeout=timeout)
    data = safe_json(r)
    if data is None:
        raise UpstreamError(provider, "malformed JSON response")
    return data


async def get_text(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = QUOTE_TIMEOUT_SEC,
) -> str:
    logger.debug("GET %s (%s)", url, provider)
    r = await _get(client, provider, url, headers=headers, timeout=timeout)
    return r.text
