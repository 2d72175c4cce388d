# stock_routes.py
import logging
import random
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from config.settings import Settings
from routers.dependencies import get_app_settings, get_http_client, get_rng
from schemas.envelopes import StocksResponse
from services.stocks.exchanges import DEFAULT_EU_SYMBOLS
from services.stocks.stock_service import (
    DEFAULT_FINANCIAL_SYMBOLS,
    DEFAULT_US_SYMBOLS,
    financial_fallback,
    get_eu_stocks,
    get_financial_quotes,
    get_us_stocks,
    stocks_fallback,
)
from utils.common_helpers import parse_flag, parse_symbols

logger = logging.getLogger(__name__)

router = APIRouter()


def _symbols(raw: Optional[str], default) -> list[str]:
    return [s.upper() for s in parse_symbols(raw, list(default))]


@router.get("/stocks", response_model=StocksResponse)
async def us_stocks(
    symbols: Optional[str] = None,
    technicals: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    rng: random.Random = Depends(get_rng),
):
    wanted = _symbols(symbols, DEFAULT_US_SYMBOLS)
    try:
        return await get_us_stocks(
            settings, client, wanted, include_technicals=parse_flag(technicals), rng=rng
        )
    except Exception as e:
        logger.exception("stocks: unexpected failure")
        return stocks_fallback(wanted, f"Failed to fetch stock data: {e}", rng=rng)


@router.get("/eu-stocks", response_model=StocksResponse)
async def eu_stocks(
    symbols: Optional[str] = None,
    technicals: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    rng: random.Random = Depends(get_rng),
):
    wanted = _symbols(symbols, DEFAULT_EU_SYMBOLS)
    try:
        return await get_eu_stocks(
            settings, client, wanted, include_technicals=parse_flag(technicals), rng=rng
        )
    except Exception as e:
        logger.exception("eu-stocks: unexpected failure")
        return stocks_fallback(wanted, f"Failed to fetch European stock data: {e}", european=True, rng=rng)


@router.get("/financial", response_model=StocksResponse)
async def financial_quotes(
    symbols: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    rng: random.Random = Depends(get_rng),
):
    wanted = _symbols(symbols, DEFAULT_FINANCIAL_SYMBOLS)
    try:
        return await get_financial_quotes(settings, client, wanted, rng=rng)
    except Exception as e:
        logger.exception("financial: unexpected failure")
        return financial_fallback(wanted, f"Failed to fetch financial data: {e}", rng=rng)
