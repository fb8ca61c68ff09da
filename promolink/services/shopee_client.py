from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from promolink.core.config import Settings
from promolink.core.exceptions import ErrorKind, ServiceError
from promolink.core.logging import redact
from promolink.services.shopee_signing import build_shopee_signature

logger = logging.getLogger(__name__)


def compact_json(payload: dict[str, Any], *, sort_keys: bool = False) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, sort_keys=sort_keys)


def build_graphql_payload(query: str, variables: dict[str, Any] | None = None) -> str:
    payload: dict[str, Any] = {"query": query}
    if variables is not None:
        payload["variables"] = variables
    return compact_json(payload)


def _graphql_error_messages(errors: list[Any]) -> list[str]:
    messages: list[str] = []
    for error in errors:
        if isinstance(error, dict):
            messages.append(str(error.get("message") or "Unknown GraphQL error"))
        else:
            messages.append(str(error))
    return messages


def _first_extension_code(errors: list[Any]) -> int | None:
    first = errors[0] if errors else None
    if not isinstance(first, dict):
        return None
    extensions = first.get("extensions")
    if not isinstance(extensions, dict):
        return None
    code = extensions.get("code")
    return code if isinstance(code, int) else None


class ShopeeClient:
    """Signed GraphQL executor for the Shopee affiliate open API."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        *,
        operation: str,
    ) -> dict[str, Any]:
        # Serialized once: the signed string and the request body must be identical.
        payload_json = build_graphql_payload(query, variables)
        headers = build_shopee_signature(
            app_id=self.settings.shopee_app_id,
            app_secret=self.settings.shopee_app_secret,
            payload_json=payload_json,
        ).request_headers()

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.shopee_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.settings.shopee_graphql_url,
                    content=payload_json.encode("utf-8"),
                    headers=headers,
                )
        except httpx.TimeoutException as exc:
            logger.error("Shopee %s timed out", operation)
            raise ServiceError(
                ErrorKind.TIMEOUT,
                "Shopee API request timed out",
                details={"operation": operation},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Shopee %s transport failure: %s", operation, type(exc).__name__)
            raise ServiceError(
                ErrorKind.CONNECTION,
                "Failed to communicate with Shopee API",
                details={"operation": operation},
            ) from exc

        if not response.is_success:
            logger.error(
                "Shopee %s returned HTTP %s headers=%s",
                operation,
                response.status_code,
                redact(dict(response.headers)),
            )
            raise ServiceError(
                ErrorKind.UPSTREAM,
                f"Shopee API returned HTTP {response.status_code}",
                status_code=response.status_code,
                details={"operation": operation},
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ServiceError(
                ErrorKind.UPSTREAM,
                "Shopee API returned invalid JSON",
                status_code=response.status_code,
                details={"operation": operation},
            ) from exc

        if not isinstance(body, dict):
            raise ServiceError(
                ErrorKind.UPSTREAM,
                "Shopee API returned unexpected payload type",
                status_code=response.status_code,
                details={"operation": operation},
            )

        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            messages = _graphql_error_messages(errors)
            upstream_code = _first_extension_code(errors)
            logger.warning("Shopee %s GraphQL errors code=%s count=%s", operation, upstream_code, len(messages))
            raise ServiceError(
                ErrorKind.PROTOCOL,
                "Shopee GraphQL error: " + "; ".join(messages),
                upstream_code=upstream_code,
                details={"operation": operation},
            )

        data = body.get("data")
        if not isinstance(data, dict):
            raise ServiceError(
                ErrorKind.EMPTY_RESPONSE,
                "Invalid response from Shopee API: no data",
                details={"operation": operation},
            )

        return data
