# main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from config.logging_config import configure_logging
from config.settings import Settings, get_settings
from middleware.rate_limit import build_limiter
from middleware.request_logging import RequestLoggingMiddleware
from routers.macro_routes import router as macro_router
from routers.news_routes import router as news_router
from routers.social_routes import router as social_router
from routers.stock_routes import router as stock_router
from routers.valuation_routes import router as valuation_router
from services.http.client import build_http_client


def create_app(settings: Settings | None = None) -> FastAPI:
    configure_logging()
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.http_client = build_http_client(settings.http_max_connections)
        try:
            yield
        finally:
            await app.state.http_client.aclose()

    app = FastAPI(title="Market Sentiment API", lifespan=lifespan)

    app.state.limiter = build_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(news_router, prefix="/api")
    app.include_router(social_router, prefix="/api")
    app.include_router(stock_router, prefix="/api")
    app.include_router(macro_router, prefix="/api")
    app.include_router(valuation_router, prefix="/api")
    return app


app = create_app()
