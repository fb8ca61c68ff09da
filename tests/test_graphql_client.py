from __future__ import annotations

import asyncio
import json
import re

import httpx
import pytest
import respx

from promolink.core.exceptions import ErrorKind, ServiceError, http_status_for, safe_message
from promolink.services.shopee_client import ShopeeClient
from promolink.services.shopee_signing import build_shopee_signature

GRAPHQL_URL = "https://open-api.affiliate.shopee.com.br/graphql"


def _execute(settings, variables=None):
    client = ShopeeClient(settings)
    return asyncio.run(client.execute("query { ping }", variables, operation="ping"))


def _run_expecting_error(settings) -> ServiceError:
    with pytest.raises(ServiceError) as exc_info:
        _execute(settings)
    return exc_info.value


@respx.mock
def test_execute_signs_exact_request_body(settings) -> None:
    captured: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["content_type"] = request.headers["Content-Type"]
        captured["body"] = request.content.decode("utf-8")
        return httpx.Response(200, json={"data": {"ping": "pong"}})

    respx.post(GRAPHQL_URL).mock(side_effect=handler)

    data = _execute(settings, {"subIds": ["a"]})

    assert data == {"ping": "pong"}
    assert captured["content_type"] == "application/json"
    assert json.loads(captured["body"]) == {"query": "query { ping }", "variables": {"subIds": ["a"]}}

    match = re.search(r"Timestamp=(\d+), Signature=([0-9a-f]{64})", captured["auth"])
    assert match, captured["auth"]
    expected = build_shopee_signature(
        app_id=settings.shopee_app_id,
        app_secret=settings.shopee_app_secret,
        payload_json=captured["body"],
        timestamp=int(match.group(1)),
    )
    assert match.group(2) == expected.signature


@respx.mock
def test_execute_joins_graphql_error_messages(settings) -> None:
    respx.post(GRAPHQL_URL).mock(
        return_value=httpx.Response(200, json={"errors": [{"message": "first"}, {"message": "second"}], "data": None})
    )

    error = _run_expecting_error(settings)

    assert error.kind is ErrorKind.PROTOCOL
    assert error.message == "Shopee GraphQL error: first; second"
    assert safe_message(error) == "Shopee GraphQL error: first; second"


@respx.mock
def test_execute_maps_rate_limit_extension_code(settings) -> None:
    respx.post(GRAPHQL_URL).mock(
        return_value=httpx.Response(
            200, json={"errors": [{"message": "error [10030]: rate limit", "extensions": {"code": 10030}}]}
        )
    )

    error = _run_expecting_error(settings)

    assert error.upstream_code == 10030
    assert error.code == "rate_limited"
    assert http_status_for(error) == 429


@respx.mock
def test_execute_rejects_missing_data(settings) -> None:
    respx.post(GRAPHQL_URL).mock(return_value=httpx.Response(200, json={"data": None}))

    error = _run_expecting_error(settings)

    assert error.kind is ErrorKind.EMPTY_RESPONSE
    assert error.message == "Invalid response from Shopee API: no data"


@pytest.mark.parametrize(
    ("status_code", "code", "message_fragment"),
    [
        (429, "rate_limited", "Request limit"),
        (503, "upstream_unavailable", "temporarily unavailable"),
        (401, "upstream_auth_error", "Authentication error"),
        (404, "upstream_error", "Could not connect"),
    ],
)
@respx.mock
def test_execute_maps_http_failures_to_safe_messages(settings, status_code, code, message_fragment) -> None:
    respx.post(GRAPHQL_URL).mock(return_value=httpx.Response(status_code, text="internal upstream details"))

    error = _run_expecting_error(settings)

    assert error.kind is ErrorKind.UPSTREAM
    assert error.status_code == status_code
    assert error.code == code
    assert message_fragment in safe_message(error)
    assert "internal upstream details" not in safe_message(error)


@respx.mock
def test_execute_maps_timeout(settings) -> None:
    respx.post(GRAPHQL_URL).mock(side_effect=httpx.ConnectTimeout("slow"))

    error = _run_expecting_error(settings)

    assert error.kind is ErrorKind.TIMEOUT
    assert "Timed out" in safe_message(error)
    assert http_status_for(error) == 504


@respx.mock
def test_execute_maps_connection_failure_without_leaking_host(settings) -> None:
    respx.post(GRAPHQL_URL).mock(side_effect=httpx.ConnectError("dns failure for open-api.affiliate.shopee.com.br"))

    error = _run_expecting_error(settings)

    assert error.kind is ErrorKind.CONNECTION
    assert safe_message(error) == "Could not connect to the Shopee API."
