from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from promolink.core.config import Settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})
FINAL_TRANSPORT_ERRORS: tuple[type[httpx.TransportError], ...] = (httpx.TimeoutException, httpx.UnsupportedProtocol)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    jitter_seconds: float = 0.25
    retry_statuses: frozenset[int] = RETRYABLE_STATUSES
    idempotent_methods: frozenset[str] = IDEMPOTENT_METHODS
    final_errors: tuple[type[httpx.TransportError], ...] = FINAL_TRANSPORT_ERRORS

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.http_retry_max_attempts,
            base_delay_seconds=settings.http_retry_base_delay_seconds,
            jitter_seconds=settings.http_retry_jitter_seconds,
        )

    def attempts_for(self, method: str) -> int:
        return self.max_attempts if method.upper() in self.idempotent_methods else 1

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retry_statuses

    def is_retryable_error(self, exc: httpx.TransportError) -> bool:
        # A timed-out attempt already spent the whole per-request budget.
        return not isinstance(exc, self.final_errors)

    def delay_for(self, attempt: int) -> float:
        # attempt is zero-based: 1s, 2s, 4s... plus jitter
        jitter = random.uniform(0, self.jitter_seconds) if self.jitter_seconds else 0.0
        return self.base_delay_seconds * (2**attempt) + jitter


class RetryTransport(httpx.AsyncBaseTransport):
    """Wraps another transport and replays idempotent requests according to a RetryPolicy."""

    def __init__(
        self,
        policy: RetryPolicy,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._policy = policy
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._sleep = sleep

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempts = self._policy.attempts_for(request.method)
        attempt = 0
        while True:
            is_last = attempt >= attempts - 1
            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError as exc:
                if is_last or not self._policy.is_retryable_error(exc):
                    raise
                logger.warning(
                    "Retrying %s %s after transport error (%s/%s): %s",
                    request.method,
                    request.url.host,
                    attempt + 1,
                    attempts,
                    type(exc).__name__,
                )
            else:
                if is_last or not self._policy.is_retryable_status(response.status_code):
                    return response
                await response.aclose()
                logger.warning(
                    "Retrying %s %s after HTTP %s (%s/%s)",
                    request.method,
                    request.url.host,
                    response.status_code,
                    attempt + 1,
                    attempts,
                )
            await self._sleep(self._policy.delay_for(attempt))
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()
