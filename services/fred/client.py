from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from services.http.client import QUOTE_TIMEOUT_SEC, UpstreamError, get_json
from utils.common_helpers import safe_float

PROVIDER = "FRED"


class FredClient:
    """St. Louis Fed series observations. Missing observations come back as "."."""

    BASE_URL = "https://api.stlouisfed.org/fred"

    def __init__(self, api_key: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.client = client

    async def observations(
        self,
        series_id: str,
        *,
        start: Optional[date] = None,
        limit: int = 1000,
    ) -> List[Dict[str, Any]]:
        """[{date, value}] oldest first, blanks dropped."""
        params: Dict[str, Any] = {
            "series_id": series_id,
            "api_key": self.api_key,
            "file_type": "json",
            "limit": limit,
        }
        if start is not None:
            params["observation_start"] = start.isoformat()

        data = await get_json(
            self.client,
            PROVIDER,
            f"{self.BASE_URL}/series/observations",
            params=params,
            timeout=QUOTE_TIMEOUT_SEC,
        )
        if not isinstance(data, dict):
            raise UpstreamError(PROVIDER, "unexpected payload")
        if data.get("error_message"):
            raise UpstreamError(PROVIDER, data["error_message"])

        series = []
        for row in data.get("observations") or []:
            value = safe_float(row.get("value"))
            if row.get("date") and value is not None:
                series.append({"date": row["date"], "value": value})
        if not series:
            raise UpstreamError(PROVIDER, f"no observations for {series_id}")
        series.sort(key=lambda r: r["date"])
        return series
