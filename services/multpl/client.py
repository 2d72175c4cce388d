#services/multpl/client.py
"""
Scraper for multpl.com's monthly Shiller P/E table.

The page is a single `table#datatable` with rows of (date, value); the value
cell carries leading whitespace entities and sometimes an "estimate" marker.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List

import httpx
from bs4 import BeautifulSoup

from services.http.client import QUOTE_TIMEOUT_SEC, UpstreamError, get_text
from services.news.articles import parse_datetime

PROVIDER = "multpl.com"
SHILLER_TABLE_URL = "https://www.multpl.com/shiller-pe/table/by-month"

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def parse_shiller_table(html: str) -> List[Dict[str, Any]]:
    """[{date: YYYY-MM-DD, shillerPE}] oldest first; unparseable rows skipped."""
    soup = BeautifulSoup(html or "", "html.parser")
    table = soup.find("table", id="datatable") or soup.find("table")
    if table is None:
        return []

    rows: List[Dict[str, Any]] = []
    for tr in table.find_all("tr"):
        cells = tr.find_all("td")
        if len(cells) < 2:
            continue
        when = parse_datetime(cells[0].get_text(" ", strip=True))
        match = _NUMBER.search(cells[1].get_text(" ", strip=True))
        if when is None or match is None:
            continue
        rows.append({"date": when.date().isoformat(), "shillerPE": float(match.group(0))})

    rows.sort(key=lambda r: r["date"])
    return rows


async def fetch_shiller_table(client: httpx.AsyncClient, user_agent: str) -> List[Dict[str, Any]]:
    html = await get_text(
        client,
        PROVIDER,
        SHILLER_TABLE_URL,
        headers={"User-Agent": user_agent},
        timeout=QUOTE_TIMEOUT_SEC,
    )
    rows = parse_shiller_table(html)
    if not rows:
        raise UpstreamError(PROVIDER, "Shiller P/E table not found in page")
    return rows
