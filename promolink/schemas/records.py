from __future__ import annotations

from typing import Any

from promolink.core.exceptions import ApiException
from promolink.db.procedure_result import RESPONSE_CODES, ResultModel
from promolink.schemas.common import ListData, operation_meta, success_response

_FAILURE_STATUS = {
    RESPONSE_CODES["VALIDATION_ERROR"]: (400, "validation_error"),
    RESPONSE_CODES["NOT_FOUND"]: (503, "database_unavailable"),
    RESPONSE_CODES["PROCESSING_FAILED"]: (422, "processing_failed"),
}


def list_response(result: ResultModel, *, operation: str, cached: bool = False) -> dict[str, Any]:
    if not result.succeeded:
        status_code, code = _FAILURE_STATUS.get(result.statusCode, (500, "internal_server_error"))
        raise ApiException(
            status_code=status_code,
            code=code,
            message=result.message,
            details={"statusCode": result.statusCode, "errorId": result.errorId},
        )
    data = ListData[dict[str, Any]](items=result.data, quantity=result.quantity or 0, message=result.message)
    return success_response(data, meta=operation_meta(operation, cached=cached, statusCode=result.statusCode))
