from __future__ import annotations

from typing import Any, Sequence

from pydantic import BaseModel, Field

RESPONSE_CODES = {
    "SUCCESS": 100200,
    "VALIDATION_ERROR": 100400,
    "NOT_FOUND": 100404,
    "PROCESSING_FAILED": 100422,
}

PROCESSING_SUCCESS_MESSAGE = "Information processed successfully"
PROCESSING_FAILURE_MESSAGE = "Could not process the information"

FEEDBACK_ERROR_KEY = "sp_error_id"
FEEDBACK_MESSAGE_KEY = "sp_message"
FEEDBACK_RETURN_ID_KEY = "sp_return_id"

Row = dict[str, Any]


class ResultModel(BaseModel):
    statusCode: int
    message: str
    recordId: str = ""
    data: list[Row] = Field(default_factory=list)
    quantity: int | None = None
    errorId: int | None = None
    info1: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.statusCode == RESPONSE_CODES["SUCCESS"]

    @classmethod
    def failure(cls, status_code: int, message: str) -> "ResultModel":
        return cls(statusCode=status_code, message=message, recordId="", data=[], quantity=0)


def result_query_data(
    record_id: str,
    error_id: int,
    feedback: str,
    rows: list[Row],
    quantity: int = 0,
    info1: str | None = None,
) -> ResultModel:
    """Build the envelope from already-extracted feedback values.

    A zero ``error_id`` is a success whatever the row count; anything else is a
    processing failure, even when rows came back.
    """
    has_feedback = bool(feedback and feedback.strip())
    if error_id == 0:
        return ResultModel(
            statusCode=RESPONSE_CODES["SUCCESS"],
            message=feedback if has_feedback else PROCESSING_SUCCESS_MESSAGE,
            recordId=record_id,
            data=rows,
            quantity=quantity,
            errorId=error_id,
            info1=info1,
        )
    return ResultModel(
        statusCode=RESPONSE_CODES["PROCESSING_FAILED"],
        message=feedback if has_feedback else PROCESSING_FAILURE_MESSAGE,
        recordId=record_id,
        data=rows,
        quantity=quantity,
        errorId=error_id,
    )


def is_feedback_row(row: Any) -> bool:
    return isinstance(row, dict) and FEEDBACK_ERROR_KEY in row


def _feedback_values(feedback_rows: Sequence[Row]) -> tuple[int, str, str]:
    first = feedback_rows[0] if feedback_rows else {}
    error_id = int(first.get(FEEDBACK_ERROR_KEY) or 0)
    message = str(first.get(FEEDBACK_MESSAGE_KEY) or "")
    return_id = first.get(FEEDBACK_RETURN_ID_KEY)
    return error_id, message, "" if return_id is None else str(return_id)


def split_result_sets(result_sets: Sequence[Sequence[Row]]) -> tuple[list[Row], list[Row]]:
    """Separate data rows from feedback rows.

    Procedures return ``[dataRows, feedbackRows]``, but skip their SELECT when
    nothing matches, leaving only ``[feedbackRows]``. The first set is taken
    as feedback when its first row carries ``sp_error_id``.
    """
    first = list(result_sets[0]) if len(result_sets) > 0 else []
    second = list(result_sets[1]) if len(result_sets) > 1 else []
    if first and is_feedback_row(first[0]):
        return [], first
    return first, second


def normalize_query_result(
    result_sets: Sequence[Sequence[Row]],
    not_found_message: str,
    *,
    id_field: str | None = None,
) -> ResultModel:
    rows, feedback_rows = split_result_sets(result_sets)
    error_id, feedback, _ = _feedback_values(feedback_rows)
    quantity = len(rows)

    if id_field is not None:
        record_id = str(rows[0].get(id_field) or "") if rows else ""
    else:
        record_id = str(quantity) if quantity > 0 else ""

    if quantity == 0 and error_id == 0:
        feedback = not_found_message
    return result_query_data(record_id, error_id, feedback, rows, quantity)


def normalize_mutation_result(result_sets: Sequence[Sequence[Row]], not_found_message: str) -> ResultModel:
    feedback_rows = list(result_sets[0]) if len(result_sets) > 0 else []
    error_id, feedback, record_id = _feedback_values(feedback_rows)
    quantity = len(feedback_rows)
    if quantity == 0 and error_id == 0:
        feedback = not_found_message
    return result_query_data(record_id, error_id, feedback, feedback_rows, quantity)
