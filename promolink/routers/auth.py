from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from promolink.core.context import AppContext, get_app_context
from promolink.core.security import get_current_user
from promolink.schemas.auth import LoginRequest, LoginTokenData, MeData
from promolink.schemas.common import SuccessEnvelope, success_response
from promolink.services.audit_service import record_login
from promolink.services.auth_service import login_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=SuccessEnvelope[LoginTokenData])
async def login(
    payload: LoginRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    context: AppContext = Depends(get_app_context),
) -> dict:
    data = login_user(context.settings, username=payload.username, password=payload.password)
    background_tasks.add_task(
        record_login,
        context.logs,
        context.settings,
        username=payload.username,
        client_host=request.client.host if request.client else None,
    )
    return success_response(data)


@router.get("/me", response_model=SuccessEnvelope[MeData])
async def me(current_user: dict = Depends(get_current_user)) -> dict:
    data = MeData(
        username=str(current_user.get("username", "")),
        sub=str(current_user.get("sub", "")),
        exp=int(current_user.get("exp", 0)),
        iat=int(current_user.get("iat", 0)),
    )
    return success_response(data)
