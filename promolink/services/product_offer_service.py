from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from promolink.constants.graphql_queries import PRODUCT_OFFER_V2_QUERY, SELECTION_SET_VERSION
from promolink.core.cache import CacheManager
from promolink.core.exceptions import ErrorKind, ServiceError
from promolink.schemas.shopee_offers import ProductOfferSearchData, ProductOffersSearchRequest, ProductOfferV2Node
from promolink.services.shopee_client import ShopeeClient

logger = logging.getLogger(__name__)

OPERATION = "productOfferV2"


def _validate_connection_payload(payload: Any, *, operation: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ServiceError(ErrorKind.EMPTY_RESPONSE, f"Shopee {operation} returned invalid payload")
    if not isinstance(payload.get("nodes"), list):
        raise ServiceError(ErrorKind.EMPTY_RESPONSE, f"Shopee {operation} response missing nodes list")
    if not isinstance(payload.get("pageInfo"), dict):
        raise ServiceError(ErrorKind.EMPTY_RESPONSE, f"Shopee {operation} response missing pageInfo object")
    return payload


class ProductOfferService:
    def __init__(self, client: ShopeeClient, cache: CacheManager) -> None:
        self._client = client
        self._cache = cache

    async def search(self, payload: ProductOffersSearchRequest) -> tuple[ProductOfferSearchData, bool]:
        variables = payload.to_variables()
        cache_key = self._cache.build_key(OPERATION, variables, SELECTION_SET_VERSION)

        cached = self._cache.get("product_offers", cache_key)
        if cached is not None:
            return ProductOfferSearchData.model_validate(cached), True

        data = await self._client.execute(PRODUCT_OFFER_V2_QUERY, variables, operation=OPERATION)
        connection = _validate_connection_payload(data.get(OPERATION), operation=OPERATION)
        try:
            result = ProductOfferSearchData.model_validate(connection)
        except ValidationError as exc:
            logger.warning("Shopee %s returned %s malformed fields", OPERATION, exc.error_count())
            raise ServiceError(
                ErrorKind.EMPTY_RESPONSE,
                f"Shopee {OPERATION} returned malformed nodes",
                details={"operation": OPERATION},
            ) from exc
        self._cache.set("product_offers", cache_key, connection)
        return result, False

    async def find_by_item_id(self, item_id: int) -> ProductOfferV2Node | None:
        data, _ = await self.search(ProductOffersSearchRequest(itemId=item_id, page=1, limit=1))
        if not data.nodes:
            return None
        node = data.nodes[0]
        if node.itemId is not None and node.itemId != item_id:
            logger.warning("productOfferV2 returned item %s for requested item %s", node.itemId, item_id)
            return None
        return node
