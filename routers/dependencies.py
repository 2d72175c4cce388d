# routers/dependencies.py
import random

import httpx
from fastapi import Request

from config.settings import Settings, get_settings


def get_app_settings() -> Settings:
    return get_settings()


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared pooled client created in the app lifespan."""
    return request.app.state.http_client


def get_rng() -> random.Random:
    return random.Random()
