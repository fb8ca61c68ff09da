from __future__ import annotations

import logging

from promolink.core.config import Settings
from promolink.db.repositories.logs import LogCreate, LogRepository
from promolink.schemas.affiliate_links import AffiliateLinkResponse

logger = logging.getLogger(__name__)

MAX_NOTE_LENGTH = 999


async def record_login(logs: LogRepository, settings: Settings, *, username: str, client_host: str | None) -> None:
    result = await logs.create_login(
        LogCreate(
            organization_id=settings.log_organization_id,
            user_id=username,
            module_id=settings.log_module_id,
            record_id=0,
            log="login",
            note=f"Login from {client_host or 'unknown host'}",
        )
    )
    if not result.succeeded:
        logger.warning("Login log not stored: %s", result.message)


async def record_affiliate_link_operation(
    logs: LogRepository,
    settings: Settings,
    *,
    username: str,
    origin_url: str | None,
    outcome: AffiliateLinkResponse,
) -> None:
    record_id = 0
    if outcome.databaseRecord is not None and outcome.databaseRecord.recordId.isdigit():
        record_id = int(outcome.databaseRecord.recordId)

    if outcome.success:
        note = f"{origin_url} -> {outcome.shortLink}"
    else:
        note = f"{origin_url or '<empty>'} failed: {outcome.errorCode}"

    result = await logs.create_operation(
        LogCreate(
            organization_id=settings.log_organization_id,
            user_id=username,
            module_id=settings.log_module_id,
            record_id=record_id,
            log="generate_affiliate_link" if outcome.success else "generate_affiliate_link_failed",
            note=note[:MAX_NOTE_LENGTH],
        )
    )
    if not result.succeeded:
        logger.warning("Operation log not stored: %s", result.message)
