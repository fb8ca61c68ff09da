from __future__ import annotations

import asyncio

import httpx
import respx

from promolink.constants.http_status import status_text
from promolink.services.redirect_resolver import (
    INVALID_URL_MESSAGE,
    MAX_REDIRECTS,
    RedirectResolver,
    is_valid_http_url,
)


def _resolve(url: str, **kwargs):
    return asyncio.run(RedirectResolver(**kwargs).resolve(url))


@respx.mock
def test_short_link_is_followed_to_final_product_page() -> None:
    respx.head("https://s.shopee.com.br/abc").mock(
        return_value=httpx.Response(302, headers={"Location": "https://shopee.com.br/final"})
    )
    respx.head("https://shopee.com.br/final").mock(return_value=httpx.Response(200))

    result = _resolve("https://s.shopee.com.br/abc")

    assert result.success is True
    assert result.isShortened is True
    assert result.finalUrl == "https://shopee.com.br/final"
    assert [(step.step, step.url, step.statusCode, step.statusText) for step in result.redirectChain] == [
        (1, "https://s.shopee.com.br/abc", 302, "Found"),
        (2, "https://shopee.com.br/final", 200, "OK"),
    ]
    assert result.error is None


@respx.mock
def test_direct_url_yields_single_step_not_shortened() -> None:
    route = respx.head("https://shopee.com.br/item").mock(return_value=httpx.Response(200))

    result = _resolve("https://shopee.com.br/item")

    assert route.call_count == 1
    assert result.success is True
    assert result.isShortened is False
    assert len(result.redirectChain) == 1
    assert result.finalUrl == "https://shopee.com.br/item"


@respx.mock
def test_probe_sends_identifying_headers() -> None:
    route = respx.head("https://shopee.com.br/item").mock(return_value=httpx.Response(204))

    _resolve("https://shopee.com.br/item")

    request = route.calls.last.request
    assert "PromoLink" in request.headers["User-Agent"]
    assert request.headers["Accept"] == "*/*"


@respx.mock
def test_endless_redirects_are_cut_at_max_hops() -> None:
    def loop(request: httpx.Request) -> httpx.Response:
        hop = int(request.url.path.strip("/"))
        return httpx.Response(301, headers={"Location": f"https://loop.test/{hop + 1}"})

    route = respx.head(url__regex=r"https://loop\.test/\d+").mock(side_effect=loop)

    result = _resolve("https://loop.test/1")

    assert route.call_count == MAX_REDIRECTS
    assert result.success is True
    assert result.error is None
    assert len(result.redirectChain) == 15
    assert result.redirectChain[-1].step == 15
    assert result.finalUrl == "https://loop.test/15"


@respx.mock
def test_head_405_falls_back_to_get_and_records_one_step() -> None:
    respx.head("https://shopee.com.br/no-head").mock(return_value=httpx.Response(405))
    get_route = respx.get("https://shopee.com.br/no-head").mock(return_value=httpx.Response(200))

    result = _resolve("https://shopee.com.br/no-head")

    assert get_route.called
    assert len(result.redirectChain) == 1
    assert result.redirectChain[0].statusCode == 200
    assert result.success is True


@respx.mock
def test_get_fallback_recovers_redirect_from_status_error() -> None:
    respx.head("https://shp.ee/xyz").mock(return_value=httpx.Response(405))
    respx.get("https://shp.ee/xyz").mock(
        return_value=httpx.Response(307, headers={"Location": "https://shopee.com.br/p"})
    )
    respx.head("https://shopee.com.br/p").mock(return_value=httpx.Response(200))

    result = _resolve("https://shp.ee/xyz")

    assert [step.statusCode for step in result.redirectChain] == [307, 200]
    assert result.finalUrl == "https://shopee.com.br/p"


@respx.mock
def test_relative_location_resolves_against_current_hop() -> None:
    respx.head("https://a.test/start").mock(
        return_value=httpx.Response(302, headers={"Location": "https://b.test/deep/page"})
    )
    respx.head("https://b.test/deep/page").mock(return_value=httpx.Response(301, headers={"Location": "/new-path"}))
    respx.head("https://b.test/new-path").mock(return_value=httpx.Response(200))

    result = _resolve("https://a.test/start")

    assert [step.url for step in result.redirectChain] == [
        "https://a.test/start",
        "https://b.test/deep/page",
        "https://b.test/new-path",
    ]
    assert result.finalUrl == "https://b.test/new-path"


@respx.mock
def test_redirect_without_location_is_terminal() -> None:
    respx.head("https://a.test/r").mock(return_value=httpx.Response(302))

    result = _resolve("https://a.test/r")

    assert len(result.redirectChain) == 1
    assert result.redirectChain[0].statusCode == 302
    assert result.isShortened is False


@respx.mock
def test_failure_mid_walk_keeps_partial_chain() -> None:
    respx.head("https://a.test/1").mock(return_value=httpx.Response(302, headers={"Location": "https://b.test/2"}))
    respx.head("https://b.test/2").mock(side_effect=httpx.ConnectError("refused"))

    result = _resolve("https://a.test/1")

    assert result.success is True
    assert len(result.redirectChain) == 1
    assert result.finalUrl == "https://a.test/1"
    assert result.error == "Error accessing the URL: connection failed"


@respx.mock
def test_failure_on_first_hop_reports_unsuccessful() -> None:
    respx.head("https://a.test/missing").mock(return_value=httpx.Response(404))

    result = _resolve("https://a.test/missing")

    assert result.success is False
    assert result.redirectChain == []
    assert result.finalUrl == "https://a.test/missing"
    assert result.error == "Error accessing the URL: HTTP 404 Not Found"


@respx.mock
def test_first_hop_timeout_reports_unsuccessful() -> None:
    respx.head("https://a.test/slow").mock(side_effect=httpx.ReadTimeout("slow"))

    result = _resolve("https://a.test/slow")

    assert result.success is False
    assert "timed out" in result.error


@respx.mock
def test_invalid_input_fails_without_network() -> None:
    for value in ("not a url", "ftp://shopee.com.br/x", "https://"):
        result = _resolve(value)
        assert result.success is False
        assert result.redirectChain == []
        assert result.finalUrl == value
        assert result.error == INVALID_URL_MESSAGE

    assert len(respx.calls) == 0


def test_empty_input_fails_immediately() -> None:
    result = _resolve("   ")
    assert result.success is False
    assert result.redirectChain == []
    assert result.error


@respx.mock
def test_unknown_status_uses_fallback_text() -> None:
    respx.head("https://a.test/odd").mock(return_value=httpx.Response(299))

    result = _resolve("https://a.test/odd")

    assert result.redirectChain[0].statusText == "Unknown"


def test_status_text_table() -> None:
    assert status_text(308) == "Permanent Redirect"
    assert status_text(429) == "Too Many Requests"
    assert status_text(999) == "Unknown"


def test_is_valid_http_url() -> None:
    assert is_valid_http_url("https://shopee.com.br/x")
    assert is_valid_http_url("http://localhost:8000/")
    assert not is_valid_http_url("mailto:someone@example.com")
    assert not is_valid_http_url("shopee.com.br/x")
