from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promolink.core.config import Settings, get_settings
from promolink.core.context import create_app_context
from promolink.core.exceptions import register_exception_handlers
from promolink.core.logging import setup_logging
from promolink.core.middleware import RequestContextMiddleware
from promolink.routers import affiliate_links, auth, health, records, shopee_offers, url_dissection

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        context = create_app_context(settings)
        app.state.context = context
        logger.info("PromoLink API started env=%s", settings.app_env)
        try:
            yield
        finally:
            context.close()

    app = FastAPI(
        title="PromoLink API",
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        lifespan=lifespan,
    )

    if settings.cors_enabled and settings.cors_allow_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(affiliate_links.router, prefix="/api/v1")
    app.include_router(url_dissection.router, prefix="/api/v1")
    app.include_router(shopee_offers.router, prefix="/api/v1")
    app.include_router(records.router, prefix="/api/v1")

    return app


app = create_app()
