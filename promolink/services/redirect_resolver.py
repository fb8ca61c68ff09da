from __future__ import annotations

import logging
from urllib.parse import urljoin

import httpx

from promolink.constants.http_status import REDIRECT_STATUSES, status_text
from promolink.core.retry import RetryPolicy, RetryTransport
from promolink.schemas.redirects import RedirectStep, ResolveResult

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 15
PROBE_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; PromoLink-URL-Dissector/1.0)"

EMPTY_URL_MESSAGE = "Please enter a valid URL."
INVALID_URL_MESSAGE = "Invalid URL. Please check it and try again."


def is_valid_http_url(value: str) -> bool:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        reason = exc.response.reason_phrase or status_text(code)
        return f"Error accessing the URL: HTTP {code} {reason}"
    if isinstance(exc, httpx.TimeoutException):
        return "Error accessing the URL: the request timed out"
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return "Error accessing the URL: invalid redirect target"
    return "Error accessing the URL: connection failed"


class RedirectResolver:
    """Walks a URL's redirect chain one hop at a time, recording every response."""

    def __init__(
        self,
        *,
        retry_policy: RetryPolicy | None = None,
        max_hops: int = MAX_REDIRECTS,
        timeout_seconds: float = PROBE_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.max_hops = max_hops
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._retry_policy = retry_policy or RetryPolicy(max_attempts=1)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=False,
            headers={"User-Agent": self.user_agent, "Accept": "*/*"},
            transport=RetryTransport(self._retry_policy, transport=self._transport),
        )

    async def _probe(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        response = await client.head(url)
        if response.status_code == 405:
            return await self._probe_with_get(client, url)
        if response.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HEAD {url} returned HTTP {response.status_code}",
                request=response.request,
                response=response,
            )
        return response

    async def _probe_with_get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        response = await client.get(url)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            # httpx treats 3xx as an error here; the redirect is still a valid hop.
            if exc.response.status_code not in REDIRECT_STATUSES:
                raise
            return exc.response
        return response

    async def resolve(self, input_url: str) -> ResolveResult:
        current_url = (input_url or "").strip()
        if not current_url:
            return ResolveResult(
                success=False, isShortened=False, finalUrl=input_url or "", error=EMPTY_URL_MESSAGE
            )
        if not is_valid_http_url(current_url):
            return ResolveResult(success=False, isShortened=False, finalUrl=input_url, error=INVALID_URL_MESSAGE)

        chain: list[RedirectStep] = []
        try:
            async with self._client() as client:
                for hop in range(1, self.max_hops + 1):
                    response = await self._probe(client, current_url)
                    code = response.status_code
                    chain.append(
                        RedirectStep(
                            step=hop,
                            url=current_url,
                            statusCode=code,
                            statusText=response.reason_phrase or status_text(code),
                        )
                    )
                    location = response.headers.get("location")
                    if code not in REDIRECT_STATUSES or not location:
                        break
                    current_url = urljoin(current_url, location)
                else:
                    logger.info("Redirect walk for %s stopped at %s hops", input_url, self.max_hops)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Redirect walk failed after %s steps: %s", len(chain), type(exc).__name__)
            return ResolveResult.from_chain(input_url, chain, error=_describe_failure(exc))

        return ResolveResult.from_chain(input_url, chain)
