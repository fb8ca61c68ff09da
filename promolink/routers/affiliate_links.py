from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse

from promolink.core.context import AppContext, get_app_context
from promolink.core.security import get_current_user
from promolink.schemas.affiliate_links import AffiliateLinkCreateBody, AffiliateLinkData, AffiliateLinkResponse
from promolink.schemas.common import SuccessEnvelope, error_response, operation_meta, success_response
from promolink.services.audit_service import record_affiliate_link_operation

router = APIRouter(prefix="/shopee", tags=["shopee-affiliate-links"])

_VALIDATION_CODES = {"empty_url", "url_too_long", "invalid_url_format", "domain_not_allowed", "validation_error"}


def _failure_status(outcome: AffiliateLinkResponse) -> int:
    if outcome.errorCode in _VALIDATION_CODES:
        return 400
    if outcome.errorCode == "rate_limited":
        return 429
    if outcome.errorCode == "timeout_error":
        return 504
    return 502


@router.post("/affiliate-links", response_model=SuccessEnvelope[AffiliateLinkData])
async def create_affiliate_link(
    payload: AffiliateLinkCreateBody,
    background_tasks: BackgroundTasks,
    context: AppContext = Depends(get_app_context),
    current_user: dict = Depends(get_current_user),
):
    outcome = await context.affiliate_links.generate(payload.originUrl, payload.subIds)
    background_tasks.add_task(
        record_affiliate_link_operation,
        context.logs,
        context.settings,
        username=str(current_user.get("username", "")),
        origin_url=payload.originUrl,
        outcome=outcome,
    )

    if not outcome.success:
        return JSONResponse(
            status_code=_failure_status(outcome),
            content=error_response(code=outcome.errorCode or "affiliate_link_error", message=outcome.error or ""),
        )

    data = AffiliateLinkData.model_validate(outcome.model_dump(exclude={"success", "error", "errorCode"}))
    return success_response(data, meta=operation_meta("generateShortLink"))
