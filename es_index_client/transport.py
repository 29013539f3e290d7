"""Retrying HTTP transport built on httpx.

Implements exponential backoff over network failures and retryable status
codes.  Retries are invisible to the caller: one logical call is one request,
repeated by the transport as needed.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Protocol

import httpx

from .context import CallContext
from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({500, 502, 503, 504})


class Transport(Protocol):
    def do(self, ctx: CallContext, request: httpx.Request) -> httpx.Response:
        """Send *request* and return the unread, streamed response."""

    def close(self) -> None:
        ...


class RetryingTransport:
    """``httpx.Client`` wrapper with retry / backoff.

    Args:
        max_retries: Extra attempts after the first one (``0`` disables retry).
        timeout: Per-attempt timeout in seconds, further bounded by the
            caller's deadline when one is set.
        backoff: Base delay in seconds; attempt ``n`` waits ``backoff * 2**n``
            plus up to 10% jitter.
        max_backoff: Upper bound for a single delay.
        retryable_status_codes: Responses with these codes are retried.
        client: An existing ``httpx.Client``.  When given, the caller owns it
            and :meth:`close` leaves it open.
    """

    def __init__(
        self,
        max_retries: int = 3,
        timeout: float = 30.0,
        backoff: float = 0.5,
        max_backoff: float = 8.0,
        retryable_status_codes: Optional[frozenset[int]] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.timeout = timeout
        self.backoff = backoff
        self.max_backoff = max_backoff
        self.retryable_status_codes = (
            DEFAULT_RETRYABLE_STATUS_CODES
            if retryable_status_codes is None
            else frozenset(retryable_status_codes)
        )
        self._owns_client = client is None
        self._client = client or httpx.Client()

    def _delay(self, attempt: int) -> float:
        delay = min(self.backoff * (2 ** attempt), self.max_backoff)
        return delay + random.uniform(0, delay * 0.1)

    def _attempt_timeout(self, ctx: CallContext) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return self.timeout
        return min(self.timeout, remaining)

    def do(self, ctx: CallContext, request: httpx.Request) -> httpx.Response:
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            if ctx.done:
                raise TransportError(
                    "call cancelled before attempt %d" % (attempt + 1)
                ) from last_error

            request.extensions["timeout"] = httpx.Timeout(
                self._attempt_timeout(ctx)
            ).as_dict()

            try:
                response = self._client.send(request, stream=True)
            except httpx.TransportError as exc:
                last_error = exc
                if attempt < self.max_retries:
                    logger.warning(
                        "Attempt %d/%d for %s %s failed: %s",
                        attempt + 1, self.max_retries + 1,
                        request.method, request.url, exc,
                    )
                    if ctx.wait(self._delay(attempt)):
                        raise TransportError("call cancelled during backoff") from exc
                    continue
                raise TransportError(
                    "request failed after %d attempt(s): %s" % (attempt + 1, exc)
                ) from exc

            if (
                response.status_code in self.retryable_status_codes
                and attempt < self.max_retries
            ):
                logger.warning(
                    "Attempt %d/%d for %s %s returned %d, retrying",
                    attempt + 1, self.max_retries + 1,
                    request.method, request.url, response.status_code,
                )
                response.close()
                if ctx.wait(self._delay(attempt)):
                    raise TransportError("call cancelled during backoff")
                continue

            return response

        # max_retries >= 0 guarantees at least one attempt returns or raises
        raise TransportError("no attempt was made")  # pragma: no cover

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
