from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence, TypeVar

from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from promolink.core.exceptions import ServiceError, safe_message
from promolink.db.database import Database, ResultSets
from promolink.db.procedure_result import RESPONSE_CODES, ResultModel

logger = logging.getLogger(__name__)

DtoT = TypeVar("DtoT", bound=BaseModel)


def validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid data provided"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


class ProcedureRepository:
    """Base for repositories that talk to MySQL only through stored procedures.

    Public methods return a ``ResultModel`` in every case: invalid input yields
    ``VALIDATION_ERROR`` and driver failures ``NOT_FOUND`` with a safe message.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    def _validate(self, dto_type: type[DtoT], payload: DtoT | Mapping[str, Any] | None) -> DtoT | ResultModel:
        if isinstance(payload, dto_type):
            return payload
        try:
            return dto_type.model_validate(payload or {})
        except ValidationError as exc:
            message = validation_message(exc)
            logger.info("Rejected %s payload: %s", dto_type.__name__, message)
            return ResultModel.failure(RESPONSE_CODES["VALIDATION_ERROR"], message)

    async def _execute(
        self,
        procedure: str,
        params: Sequence[Any],
        normalize: Callable[[ResultSets], ResultModel],
    ) -> ResultModel:
        try:
            result_sets = await run_in_threadpool(self._database.call_procedure, procedure, params)
        except ServiceError as exc:
            return ResultModel.failure(RESPONSE_CODES["NOT_FOUND"], safe_message(exc))
        return normalize(result_sets)
