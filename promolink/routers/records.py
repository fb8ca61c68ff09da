from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from promolink.core.context import AppContext, get_app_context
from promolink.core.security import get_current_user
from promolink.schemas.common import ListData, SuccessEnvelope
from promolink.schemas.records import list_response

router = APIRouter(tags=["records"])

ListEnvelope = SuccessEnvelope[ListData[dict[str, Any]]]


@router.get("/link-generations", response_model=ListEnvelope)
async def list_link_generations(
    client_id: int | None = Query(default=None, alias="clientId"),
    limit: int = Query(default=10),
    context: AppContext = Depends(get_app_context),
    _: dict = Depends(get_current_user),
) -> dict:
    result = await context.link_generations.find_all(
        {"app_id": context.settings.link_app_id, "client_id": client_id, "limit": limit}
    )
    return list_response(result, operation="sp_link_generation_find_all_v2")


@router.get("/promo-links", response_model=ListEnvelope)
async def list_promo_links(
    client_id: int | None = Query(default=None, alias="clientId"),
    link_id: int = Query(default=0, alias="linkId"),
    limit: int = Query(default=10),
    context: AppContext = Depends(get_app_context),
    _: dict = Depends(get_current_user),
) -> dict:
    result = await context.promo_links.find_all(
        {"app_id": context.settings.link_app_id, "client_id": client_id, "link_id": link_id, "limit": limit}
    )
    return list_response(result, operation="sp_promo_link_find_all_v2")


def _log_filter(
    user_id: str = Query(default="", alias="userId"),
    search: str = Query(default=""),
    limit: int = Query(default=50),
) -> dict[str, Any]:
    return {"user_id": user_id, "search_user": search, "limit": limit}


@router.get("/logs/login", response_model=ListEnvelope)
async def list_login_logs(
    filters: dict[str, Any] = Depends(_log_filter),
    context: AppContext = Depends(get_app_context),
    _: dict = Depends(get_current_user),
) -> dict:
    payload = {"organization_id": context.settings.log_organization_id, **filters}
    result, cached = await context.logs.find_all_logins(payload)
    return list_response(result, operation="sp_log_login_find_all_v2", cached=cached)


@router.get("/logs/operations", response_model=ListEnvelope)
async def list_operation_logs(
    filters: dict[str, Any] = Depends(_log_filter),
    context: AppContext = Depends(get_app_context),
    _: dict = Depends(get_current_user),
) -> dict:
    payload = {"organization_id": context.settings.log_organization_id, **filters}
    result, cached = await context.logs.find_all_operations(payload)
    return list_response(result, operation="sp_log_operation_find_all_v2", cached=cached)
