from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field

from promolink.db.procedure_result import ResultModel, normalize_query_result
from promolink.db.repositories.base import ProcedureRepository

FIND_ALL_PROCEDURE = "sp_promo_link_find_all_v2"


class PromoLinkFindAll(BaseModel):
    app_id: int = 1
    client_id: int | None = None
    link_id: int = Field(default=0, ge=0)
    limit: int = Field(default=10, ge=1, le=500)


class PromoLinkRepository(ProcedureRepository):
    async def find_all(self, payload: PromoLinkFindAll | Mapping[str, Any] | None = None) -> ResultModel:
        dto = self._validate(PromoLinkFindAll, payload)
        if isinstance(dto, ResultModel):
            return dto
        return await self._execute(
            FIND_ALL_PROCEDURE,
            (dto.app_id, dto.client_id, dto.link_id, dto.limit),
            lambda result_sets: normalize_query_result(result_sets, "Promo links not found"),
        )
