from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from promolink.core.cache import CacheManager
from promolink.db.database import Database
from promolink.db.procedure_result import ResultModel, normalize_mutation_result, normalize_query_result
from promolink.db.repositories.base import ProcedureRepository

logger = logging.getLogger(__name__)

LOGIN_CREATE_PROCEDURE = "sp_log_login_create_v1"
LOGIN_FIND_ALL_PROCEDURE = "sp_log_login_find_all_v2"
OPERATION_CREATE_PROCEDURE = "sp_log_operation_create_v1"
OPERATION_FIND_ALL_PROCEDURE = "sp_log_operation_find_all_v2"

LOGS_CACHE = "logs"


class LogCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    organization_id: str = Field(..., min_length=1, max_length=200)
    user_id: str = Field(..., min_length=1, max_length=200)
    module_id: int
    record_id: int
    log: str = Field(..., min_length=1, max_length=500)
    note: str = Field(..., min_length=1, max_length=999)


class LogFindAll(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    organization_id: str = Field(default="", max_length=191)
    user_id: str = Field(default="", max_length=191)
    search_user: str = Field(default="", max_length=191)
    limit: int = Field(default=50, ge=1, le=500)


class LogRepository(ProcedureRepository):
    """Login and operation audit logs.

    Listings are cached for the lifetime of the ``logs`` store; every write
    clears it so a new row shows up on the next read.
    """

    def __init__(self, database: Database, *, app_id: int, cache: CacheManager | None = None) -> None:
        super().__init__(database)
        self._app_id = app_id
        self._cache = cache

    async def create_login(self, payload: LogCreate | Mapping[str, Any]) -> ResultModel:
        return await self._create(LOGIN_CREATE_PROCEDURE, payload, "Login log creation failed")

    async def create_operation(self, payload: LogCreate | Mapping[str, Any]) -> ResultModel:
        return await self._create(OPERATION_CREATE_PROCEDURE, payload, "Operation log creation failed")

    async def find_all_logins(self, payload: LogFindAll | Mapping[str, Any] | None = None) -> tuple[ResultModel, bool]:
        return await self._find_all(LOGIN_FIND_ALL_PROCEDURE, payload, "Login logs not found")

    async def find_all_operations(
        self, payload: LogFindAll | Mapping[str, Any] | None = None
    ) -> tuple[ResultModel, bool]:
        return await self._find_all(OPERATION_FIND_ALL_PROCEDURE, payload, "Operation logs not found")

    async def _create(self, procedure: str, payload: LogCreate | Mapping[str, Any], failure_message: str) -> ResultModel:
        dto = self._validate(LogCreate, payload)
        if isinstance(dto, ResultModel):
            return dto
        result = await self._execute(
            procedure,
            (self._app_id, dto.organization_id, dto.user_id, dto.module_id, dto.record_id, dto.log, dto.note),
            lambda result_sets: normalize_mutation_result(result_sets, failure_message),
        )
        if result.succeeded and self._cache is not None:
            self._cache.invalidate(LOGS_CACHE)
        return result

    async def _find_all(
        self, procedure: str, payload: LogFindAll | Mapping[str, Any] | None, not_found_message: str
    ) -> tuple[ResultModel, bool]:
        dto = self._validate(LogFindAll, payload)
        if isinstance(dto, ResultModel):
            return dto, False

        cache_key = None
        if self._cache is not None:
            cache_key = self._cache.build_key(procedure, dto.model_dump())
            cached = self._cache.get(LOGS_CACHE, cache_key)
            if cached is not None:
                logger.info("Cache hit for %s", procedure)
                return ResultModel.model_validate(cached), True

        result = await self._execute(
            procedure,
            (self._app_id, dto.organization_id, dto.user_id, dto.search_user, dto.limit),
            lambda result_sets: normalize_query_result(result_sets, not_found_message),
        )
        if cache_key is not None and result.succeeded:
            self._cache.set(LOGS_CACHE, cache_key, result.model_dump())
        return result, False
