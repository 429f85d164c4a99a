"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.dependencies import get_config
from server.middleware import REQUEST_ID_HEADER, RequestIDMiddleware
from server.routes import filters, health, search, session, suggestions
from utils.logger import get_logger

logger = get_logger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check configuration on startup; nothing to release on shutdown."""
    config = get_config()
    logger.info(
        "Search server starting up",
        extra={
            "extra_fields": {
                "search_api_base_url": config.SEARCH_API_BASE_URL,
                "timeout_s": config.SEARCH_TIMEOUT_S,
                "phrase_table": config.DEGRADATION_PHRASES_PATH,
            }
        },
    )
    if not config.API_KEYS:
        logger.warning("API_KEYS is empty; every /v1 request will be rejected")
    if not config.validate():
        logger.warning("Configuration invalid; /health will report degraded")

    yield

    logger.info("Search server shutting down")


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="BlendSearch API",
        description="Blended AI answer + web search with graceful degradation",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    for module in (health, search, filters, suggestions, session):
        app.include_router(module.router)

    return app
