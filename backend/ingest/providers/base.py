"""
Abstract Fetch Port for scores providers.
Defines the contract every provider connector must implement.
"""
from __future__ import annotations

import abc
import asyncio
import time
from typing import Generic, Optional, Protocol, TypeVar

import httpx

from shared.config import get_settings
from shared.models.domain import MatchDetail, Snapshot
from shared.models.enums import Sport
from shared.utils.logging import get_logger
from shared.utils.metrics import FETCH_LATENCY

logger = get_logger(__name__)

T = TypeVar("T")

SNAPSHOT_FAILURE = "Failed to load scores"
DETAIL_FAILURE = "Failed to load match details"
INVALID_RESPONSE = "Invalid response from provider"
UNREACHABLE = "Could not reach the scores provider"


def failure_message(exc: BaseException, fallback: str) -> str:
    """Short user-facing message for an exception raised while fetching."""
    if isinstance(exc, httpx.HTTPStatusError):
        return f"Scores provider returned HTTP {exc.response.status_code}"
    if isinstance(exc, httpx.HTTPError):
        return UNREACHABLE
    # PayloadError, pydantic ValidationError and JSON decode errors
    if isinstance(exc, ValueError):
        return INVALID_RESPONSE
    return fallback


class FetchResult(Generic[T]):
    """
    Success-with-data or failure-with-message from a Fetch Port call.

    ``error`` is shown to the user as is; raw exception text belongs in the logs.
    """

    def __init__(
        self,
        success: bool,
        data: Optional[T] = None,
        error: Optional[str] = None,
        latency_ms: float = 0.0,
    ) -> None:
        self.success = success
        self.data = data
        self.error = error
        self.latency_ms = latency_ms

    @classmethod
    def ok(cls, data: T) -> "FetchResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "FetchResult[T]":
        return cls(success=False, error=error)

    def __repr__(self) -> str:
        if self.success:
            return f"FetchResult(success=True, data={type(self.data).__name__})"
        return f"FetchResult(success=False, error={self.error!r})"


class FetchPort(Protocol):
    """What a coordinator needs from a scores provider."""

    async def fetch_snapshot(self, sport: Sport, date: str) -> FetchResult[Snapshot]: ...

    async def fetch_match_detail(self, sport: Sport, match_id: str) -> FetchResult[MatchDetail]: ...


class BaseFetchPort(abc.ABC):
    """
    Base class for scores providers.

    Subclasses implement ``_fetch_snapshot`` and ``_fetch_match_detail`` and may
    raise freely; the public wrappers apply the per-request timeout, record
    latency and turn every exception into a failed ``FetchResult``. Instances
    must not keep cross-call state: one port is shared by every sport.
    """

    def __init__(self, name: str, timeout_s: float | None = None) -> None:
        self._name = name
        self._timeout_s = timeout_s or get_settings().request_timeout_s

    @property
    def name(self) -> str:
        return self._name

    async def start(self) -> None:
        """Acquire resources (HTTP clients) before the first fetch."""

    async def close(self) -> None:
        """Release resources acquired in ``start``."""

    async def fetch_snapshot(self, sport: Sport, date: str) -> FetchResult[Snapshot]:
        """Fetch the grouped scores for one date."""
        start = time.perf_counter()
        try:
            snapshot = await asyncio.wait_for(self._fetch_snapshot(sport, date), self._timeout_s)
            result: FetchResult[Snapshot] = FetchResult.ok(snapshot)
        except asyncio.TimeoutError:
            logger.warning("provider_fetch_snapshot_timeout", provider=self._name, sport=sport.value, date=date)
            result = FetchResult.fail(f"Request timed out after {self._timeout_s:.0f}s")
        except Exception as exc:
            logger.warning(
                "provider_fetch_snapshot_error",
                provider=self._name,
                sport=sport.value,
                date=date,
                error=str(exc) or type(exc).__name__,
            )
            result = FetchResult.fail(failure_message(exc, SNAPSHOT_FAILURE))
        elapsed = time.perf_counter() - start
        result.latency_ms = elapsed * 1000
        FETCH_LATENCY.labels(sport=sport.value, kind="snapshot").observe(elapsed)
        return result

    async def fetch_match_detail(self, sport: Sport, match_id: str) -> FetchResult[MatchDetail]:
        """Fetch the detail record for one match."""
        start = time.perf_counter()
        try:
            detail = await asyncio.wait_for(self._fetch_match_detail(sport, match_id), self._timeout_s)
            result: FetchResult[MatchDetail] = FetchResult.ok(detail)
        except asyncio.TimeoutError:
            logger.warning("provider_fetch_detail_timeout", provider=self._name, sport=sport.value, match_id=match_id)
            result = FetchResult.fail(f"Request timed out after {self._timeout_s:.0f}s")
        except Exception as exc:
            logger.warning(
                "provider_fetch_detail_error",
                provider=self._name,
                sport=sport.value,
                match_id=match_id,
                error=str(exc) or type(exc).__name__,
            )
            result = FetchResult.fail(failure_message(exc, DETAIL_FAILURE))
        elapsed = time.perf_counter() - start
        result.latency_ms = elapsed * 1000
        FETCH_LATENCY.labels(sport=sport.value, kind="detail").observe(elapsed)
        return result

    # ── Abstract methods (each provider implements these) ───────────────
    @abc.abstractmethod
    async def _fetch_snapshot(self, sport: Sport, date: str) -> Snapshot:
        """Provider-specific snapshot fetch and decode."""
        ...

    @abc.abstractmethod
    async def _fetch_match_detail(self, sport: Sport, match_id: str) -> MatchDetail:
        """Provider-specific match detail fetch and decode."""
        ...
