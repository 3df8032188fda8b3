"""
Async JSON-over-HTTP client for scores providers.

One ``httpx.AsyncClient`` per provider, opened in ``start()`` and shared by all
sports. Rate limiting (429), server errors (5xx), timeouts and transport errors
are retried up to ``max_retries`` attempts; any other HTTP error is raised at
once.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import httpx

from shared.config import get_settings
from shared.utils.logging import get_logger
from shared.utils.metrics import PROVIDER_LATENCY, PROVIDER_REQUESTS

logger = get_logger(__name__)

MAX_RETRY_AFTER_S = 10.0


def retry_delay(response: httpx.Response, attempt: int) -> Optional[float]:
    """Seconds to wait before retrying ``response``, or None if it should not be retried."""
    if response.status_code == 429:
        try:
            return min(float(response.headers.get("Retry-After", "2")), MAX_RETRY_AFTER_S)
        except ValueError:
            return 2.0
    if response.status_code >= 500:
        return 1.0 * attempt
    return None


class ProviderHTTPClient:
    """GET-and-decode client with per-attempt metrics."""

    def __init__(
        self,
        provider_name: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout_s: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._provider = provider_name
        self._base_url = base_url.rstrip("/")
        self._headers = headers or {}
        self._timeout_s = timeout_s or settings.request_timeout_s
        self._attempts = max(1, max_retries or settings.provider_max_retries)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=httpx.Timeout(self._timeout_s, connect=5.0),
            follow_redirects=True,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_json(self, path: str, params: dict[str, Any] | None = None, kind: str = "unknown") -> Any:
        """
        GET ``path`` and return the decoded JSON body.

        Raises:
            RuntimeError: If ``start()`` was not called.
            httpx.HTTPStatusError: Non-retryable status, or retryable status on the last attempt.
            httpx.HTTPError: Transport error or timeout on the last attempt.
            ValueError: Body is not JSON.
        """
        if self._client is None:
            raise RuntimeError("ProviderHTTPClient not started. Call start() first.")

        for attempt in range(1, self._attempts + 1):
            last = attempt == self._attempts
            started = time.perf_counter()
            outcome = "error"
            try:
                response = await self._client.get(path, params=params)
                outcome = str(response.status_code)
                delay = retry_delay(response, attempt)
                if delay is not None and not last:
                    logger.warning(
                        "provider_retryable_status",
                        provider=self._provider,
                        path=path,
                        status=response.status_code,
                        attempt=attempt,
                        delay_s=delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                response.raise_for_status()
                payload = response.json()
                logger.debug(
                    "provider_request_success",
                    provider=self._provider,
                    kind=kind,
                    path=path,
                    latency_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                return payload
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "provider_http_error",
                    provider=self._provider,
                    path=path,
                    status=exc.response.status_code,
                    attempt=attempt,
                )
                raise
            except httpx.HTTPError as exc:
                outcome = "timeout" if isinstance(exc, httpx.TimeoutException) else "error"
                logger.warning(
                    "provider_request_error",
                    provider=self._provider,
                    path=path,
                    error=str(exc) or type(exc).__name__,
                    attempt=attempt,
                )
                if last:
                    raise
                await asyncio.sleep(1.0 * attempt)
            finally:
                PROVIDER_REQUESTS.labels(provider=self._provider, kind=kind, status=outcome).inc()
                PROVIDER_LATENCY.labels(provider=self._provider).observe(time.perf_counter() - started)

        raise RuntimeError(f"{self._provider}: no attempt made for {path}")
