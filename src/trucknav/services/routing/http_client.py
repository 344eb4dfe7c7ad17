"""HTTP transport for routing provider requests."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

from ...config import settings

if TYPE_CHECKING:
    from .providers.base import ProviderQuery

logger = logging.getLogger(__name__)

# Status codes worth another attempt; other 4xx responses are final.
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class ProviderRequestError(ValueError):
    """The provider rejected the request (4xx other than rate limiting)."""

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProviderClient:
    """Sends provider queries with retry and backoff.

    A fresh ``httpx.Client`` is created per call so one instance can be
    shared by concurrent route evaluations.
    """

    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.backoff_seconds
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self.transport,
        )

    def fetch(self, query: ProviderQuery) -> bytes:
        """Execute ``query`` and return the raw response body."""
        logger.debug(f"{query.method} {query.url} params={query.redacted_params()}")
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.request(query.method, query.url, params=list(query.params))
                    response.raise_for_status()
                    logger.info(f"Provider responded {response.status_code} for {query.url} ({len(response.content)} bytes)")
                    return response.content
                except httpx.HTTPStatusError as e:
                    status_code = e.response.status_code
                    if status_code not in RETRYABLE_STATUS_CODES:
                        body = e.response.text[:500]
                        logger.warning(f"Provider rejected request to {query.url}: HTTP {status_code} {body}")
                        raise ProviderRequestError(
                            f"Provider rejected request: HTTP {status_code}", status_code, body
                        ) from e
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    wait_time = self.backoff_seconds * attempt
                    logger.debug(f"Provider returned HTTP {status_code}, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Provider request timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Provider request timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except httpx.TransportError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(f"Failed to reach routing provider at {query.url}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Provider network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()
