from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request

from promolink.core.cache import CacheManager
from promolink.core.config import Settings
from promolink.core.retry import RetryPolicy
from promolink.db.database import Database
from promolink.db.repositories.link_generation import LinkGenerationRepository
from promolink.db.repositories.logs import LogRepository
from promolink.db.repositories.promo_links import PromoLinkRepository
from promolink.services.affiliate_link_service import AffiliateLinkService
from promolink.services.product_offer_service import ProductOfferService
from promolink.services.redirect_resolver import RedirectResolver
from promolink.services.shopee_client import ShopeeClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request handler needs, built once at startup.

    Created by the application lifespan and stored on ``app.state.context``;
    ``close`` releases the database pool at shutdown.
    """

    settings: Settings
    database: Database
    cache: CacheManager
    retry_policy: RetryPolicy
    shopee_client: ShopeeClient
    resolver: RedirectResolver
    product_offers: ProductOfferService
    link_generations: LinkGenerationRepository
    logs: LogRepository
    promo_links: PromoLinkRepository
    affiliate_links: AffiliateLinkService

    def close(self) -> None:
        self.database.dispose()
        self.cache.clear_all()
        logger.info("Application context closed")


def create_app_context(settings: Settings, *, database: Database | None = None) -> AppContext:
    database = database or Database(settings)
    cache = CacheManager(settings)
    retry_policy = RetryPolicy.from_settings(settings)
    shopee_client = ShopeeClient(settings)
    resolver = RedirectResolver(retry_policy=retry_policy)
    product_offers = ProductOfferService(shopee_client, cache)
    link_generations = LinkGenerationRepository(database)
    return AppContext(
        settings=settings,
        database=database,
        cache=cache,
        retry_policy=retry_policy,
        shopee_client=shopee_client,
        resolver=resolver,
        product_offers=product_offers,
        link_generations=link_generations,
        logs=LogRepository(database, app_id=settings.log_app_id, cache=cache),
        promo_links=PromoLinkRepository(database),
        affiliate_links=AffiliateLinkService(
            settings,
            shopee_client,
            resolver,
            product_offers=product_offers,
            link_generations=link_generations,
        ),
    )


def get_app_context(request: Request) -> AppContext:
    return request.app.state.context


def get_request_settings(context: AppContext = Depends(get_app_context)) -> Settings:
    return context.settings
