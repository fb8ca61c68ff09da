from __future__ import annotations

from fastapi import APIRouter, Depends

from promolink.core.context import AppContext, get_app_context
from promolink.core.security import get_current_user
from promolink.schemas.common import SuccessEnvelope, operation_meta, success_response
from promolink.schemas.redirects import ResolveResult, ResolveUrlRequest

router = APIRouter(prefix="/urls", tags=["url-dissection"])


@router.post("/resolve", response_model=SuccessEnvelope[ResolveResult])
async def resolve_url(
    payload: ResolveUrlRequest,
    context: AppContext = Depends(get_app_context),
    _: dict = Depends(get_current_user),
) -> dict:
    # The trace is returned even when the walk failed part way; callers read result.success.
    result = await context.resolver.resolve(payload.url)
    return success_response(result, meta=operation_meta("resolveRedirects", hops=len(result.redirectChain)))
