from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from promolink.db.procedure_result import ResultModel, normalize_mutation_result, normalize_query_result
from promolink.db.repositories.base import ProcedureRepository

CREATE_PROCEDURE = "sp_link_generation_create_v2"
FIND_ALL_PROCEDURE = "sp_link_generation_find_all_v2"


class LinkGenerationCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    uuid: str = Field(..., min_length=1, max_length=36)
    app_id: int = 1
    client_id: int = 1
    link_destination: str = Field(..., min_length=1, max_length=2048)
    affiliate_link: str = Field(..., min_length=1, max_length=2048)
    flag_click: int = 0
    item_id: int = 0
    product_name: str = ""
    shop_name: str = ""
    shop_id: int = 0
    price_min: float = 0
    price_max: float = 0
    commission_rate: float = 0
    commission: float = 0
    sales: int = 0
    rating_star: float = 0
    image_url: str = ""
    product_link: str = ""
    offer_link: str = ""
    currency: str = "BRL"
    discount_percent: float = 0
    original_price: float = 0
    category: str = ""
    category_id: int = 0
    brand_name: str = ""
    is_official: int = 0
    free_shipping: int = 0
    location: str = ""

    def procedure_params(self) -> tuple[Any, ...]:
        return (
            self.uuid,
            self.app_id,
            self.client_id,
            self.link_destination,
            self.affiliate_link,
            self.flag_click,
            self.item_id,
            self.product_name,
            self.shop_name,
            self.shop_id,
            self.price_min,
            self.price_max,
            self.commission_rate,
            self.commission,
            self.sales,
            self.rating_star,
            self.image_url,
            self.product_link,
            self.offer_link,
            self.currency,
            self.discount_percent,
            self.original_price,
            self.category,
            self.category_id,
            self.brand_name,
            self.is_official,
            self.free_shipping,
            self.location,
        )


class LinkGenerationFindAll(BaseModel):
    app_id: int = 1
    client_id: int | None = None
    limit: int = Field(default=10, ge=1, le=500)


class LinkGenerationRepository(ProcedureRepository):
    async def create(self, payload: LinkGenerationCreate | Mapping[str, Any]) -> ResultModel:
        dto = self._validate(LinkGenerationCreate, payload)
        if isinstance(dto, ResultModel):
            return dto
        return await self._execute(
            CREATE_PROCEDURE,
            dto.procedure_params(),
            lambda result_sets: normalize_mutation_result(result_sets, "Link generation creation failed"),
        )

    async def find_all(self, payload: LinkGenerationFindAll | Mapping[str, Any] | None = None) -> ResultModel:
        dto = self._validate(LinkGenerationFindAll, payload)
        if isinstance(dto, ResultModel):
            return dto
        return await self._execute(
            FIND_ALL_PROCEDURE,
            (dto.app_id, dto.client_id, dto.limit),
            lambda result_sets: normalize_query_result(result_sets, "Link generations not found"),
        )
