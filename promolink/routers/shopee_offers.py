from __future__ import annotations

from fastapi import APIRouter, Depends

from promolink.core.context import AppContext, get_app_context
from promolink.core.security import get_current_user
from promolink.schemas.common import SuccessEnvelope, operation_meta, success_response
from promolink.schemas.shopee_offers import ProductOfferSearchData, ProductOffersSearchRequest

router = APIRouter(prefix="/shopee/offers", tags=["shopee-offers"])


@router.post("/products/search", response_model=SuccessEnvelope[ProductOfferSearchData])
async def product_offers_search(
    payload: ProductOffersSearchRequest,
    context: AppContext = Depends(get_app_context),
    _: dict = Depends(get_current_user),
) -> dict:
    data, cached = await context.product_offers.search(payload)
    return success_response(data, meta=operation_meta("productOfferV2", cached=cached))
