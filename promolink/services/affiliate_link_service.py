from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import ValidationError

from promolink.constants.graphql_queries import GENERATE_SHORT_LINK_MUTATION
from promolink.core.config import Settings
from promolink.core.exceptions import ServiceError, safe_message
from promolink.db.repositories.link_generation import LinkGenerationCreate, LinkGenerationRepository
from promolink.schemas.affiliate_links import AffiliateLinkRequest, AffiliateLinkResponse, DatabaseRecord
from promolink.schemas.shopee_offers import ProductOfferV2Node
from promolink.services.product_offer_service import ProductOfferService
from promolink.services.redirect_resolver import RedirectResolver
from promolink.services.shopee_client import ShopeeClient
from promolink.services.shopee_urls import (
    ProductRef,
    hostname_of,
    is_allowed_shopee_host,
    is_short_shopee_url,
    parse_shopee_product_url,
)

logger = logging.getLogger(__name__)

OPERATION = "generateShortLink"

EMPTY_INPUT_MESSAGE = "Please enter a valid URL"
MISSING_SHORT_LINK_MESSAGE = "Could not generate the affiliate link"
SUCCESS_MESSAGE = "Affiliate link generated successfully"

_CUSTOM_VALIDATION_CODES = {"empty_url", "url_too_long", "invalid_url_format", "domain_not_allowed"}


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _first_validation_failure(exc: ValidationError) -> tuple[str, str]:
    first = exc.errors()[0]
    code = first["type"] if first["type"] in _CUSTOM_VALIDATION_CODES else "validation_error"
    message = first["msg"]
    if message.startswith("Value error, "):
        message = message[len("Value error, ") :]
    return message, code


class AffiliateLinkService:
    """Turns a Shopee product URL into a tracked short link.

    ``generate`` never raises for expected failures: invalid input and upstream
    problems come back as ``success=False`` with a message that is safe to show.
    Product lookup and persistence only run after a short link exists, and
    their failures are logged without affecting the result.
    """

    def __init__(
        self,
        settings: Settings,
        client: ShopeeClient,
        resolver: RedirectResolver,
        *,
        product_offers: ProductOfferService | None = None,
        link_generations: LinkGenerationRepository | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._resolver = resolver
        self._product_offers = product_offers
        self._link_generations = link_generations

    async def generate(self, origin_url: Any, sub_ids: list[str] | None = None) -> AffiliateLinkResponse:
        if not isinstance(origin_url, str) or not origin_url.strip():
            return AffiliateLinkResponse.failure(EMPTY_INPUT_MESSAGE, "empty_url")

        try:
            request = AffiliateLinkRequest(originUrl=origin_url, subIds=sub_ids)
        except ValidationError as exc:
            message, code = _first_validation_failure(exc)
            logger.info("Rejected affiliate link input: %s", code)
            return AffiliateLinkResponse.failure(message, code)

        target_url = await self.pre_resolve(request.originUrl)
        variables = {
            "originUrl": target_url,
            "subIds": request.subIds if request.subIds is not None else self._settings.sub_ids_list,
        }

        try:
            data = await self._client.execute(GENERATE_SHORT_LINK_MUTATION, variables, operation=OPERATION)
        except ServiceError as exc:
            logger.warning("Affiliate link generation failed kind=%s code=%s", exc.kind.value, exc.code)
            return AffiliateLinkResponse.failure(safe_message(exc), exc.code)

        result = data.get(OPERATION)
        short_link = result.get("shortLink") if isinstance(result, dict) else None
        if not isinstance(short_link, str) or not short_link:
            logger.warning("Shopee %s response carried no shortLink", OPERATION)
            return AffiliateLinkResponse.failure(MISSING_SHORT_LINK_MESSAGE, "empty_response_error")

        response = AffiliateLinkResponse(
            success=True,
            shortLink=short_link,
            message=SUCCESS_MESSAGE,
            resolvedUrl=target_url if target_url != request.originUrl else None,
        )

        ref = parse_shopee_product_url(target_url)
        product = await self._lookup_product(ref) if ref is not None else None
        response.productInfo = product
        response.databaseRecord = await self._persist(target_url, short_link, ref, product)
        return response

    async def pre_resolve(self, url: str) -> str:
        """Follow a short share link to its product page, keeping ``url`` when that fails."""
        if not is_short_shopee_url(url):
            return url

        result = await self._resolver.resolve(url)
        if not result.success or not result.isShortened:
            logger.warning("Could not pre-resolve short link, using it as given: %s", result.error or "no redirect")
            return url
        if not is_allowed_shopee_host(hostname_of(result.finalUrl)):
            logger.warning("Short link resolved outside Shopee domains, using it as given")
            return url
        return result.finalUrl

    async def _lookup_product(self, ref: ProductRef) -> ProductOfferV2Node | None:
        if self._product_offers is None:
            return None
        try:
            return await self._product_offers.find_by_item_id(ref.item_id)
        except ServiceError as exc:
            logger.warning("Product lookup for item %s failed: %s", ref.item_id, exc.code)
            return None
        except Exception:
            logger.exception("Product lookup for item %s failed unexpectedly", ref.item_id)
            return None

    async def _persist(
        self,
        destination: str,
        short_link: str,
        ref: ProductRef | None,
        product: ProductOfferV2Node | None,
    ) -> DatabaseRecord | None:
        if self._link_generations is None:
            return None
        try:
            return await self._store_record(destination, short_link, ref, product)
        except Exception:
            logger.exception("Link generation record for %s failed unexpectedly", short_link)
            return None

    async def _store_record(
        self,
        destination: str,
        short_link: str,
        ref: ProductRef | None,
        product: ProductOfferV2Node | None,
    ) -> DatabaseRecord | None:
        record = LinkGenerationCreate(
            uuid=str(uuid.uuid4()),
            app_id=self._settings.link_app_id,
            client_id=self._settings.link_client_id,
            link_destination=destination,
            affiliate_link=short_link,
            item_id=ref.item_id if ref else 0,
            shop_id=ref.shop_id if ref else 0,
            product_name=ref.product_name if ref else "",
        )
        if product is not None:
            record = record.model_copy(
                update={
                    "item_id": product.itemId or record.item_id,
                    "shop_id": product.shopId or record.shop_id,
                    "product_name": product.productName or record.product_name,
                    "shop_name": product.shopName or "",
                    "price_min": _to_float(product.priceMin),
                    "price_max": _to_float(product.priceMax),
                    "commission_rate": _to_float(product.commissionRate),
                    "commission": _to_float(product.commission),
                    "sales": product.sales or 0,
                    "rating_star": _to_float(product.ratingStar),
                    "image_url": product.imageUrl or "",
                    "product_link": product.productLink or "",
                    "offer_link": product.offerLink or "",
                    "discount_percent": float(product.priceDiscountRate or 0),
                    "category_id": product.productCatIds[0] if product.productCatIds else 0,
                }
            )

        result = await self._link_generations.create(record)
        if not result.succeeded:
            logger.warning("Link generation record not stored: %s", result.message)
            return None
        return DatabaseRecord(recordId=result.recordId, message=result.message)
