"""
Score coordinator: per-sport state machine for a day's scores.

Owns the selected date, the load channel (Loading / Success / Error), the
refreshing flag, the match detail channel (Hidden / Loading / Success / Error)
and the background poll timer. All state is mutated on the event loop by the
coordinator itself; consumers read it through properties or listeners.

Supersession: every load request carries the date it asked for and a
sequence number. A result is applied only if its date is still selected, it
was issued after the latest date selection, and no newer result has already
been applied. Late results are dropped, the underlying call is left to finish.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine, Optional

from shared.config import Settings, get_settings
from shared.models.domain import MatchDetail, Snapshot
from shared.models.enums import Sport
from shared.models.state import CoordinatorState, DetailState, Error, Hidden, LoadState, Loading, Success
from shared.utils.clock import Clock, SystemClock, is_date_key, today_key, tomorrow_key, yesterday_key
from shared.utils.logging import get_logger
from shared.utils.metrics import (
    DETAIL_FETCHES,
    LIVE_MATCHES,
    POLL_TICKS,
    SNAPSHOT_FETCHES,
    SUPERSEDED_RESPONSES,
)

from ingest.providers.base import FetchPort, FetchResult
from scheduler.engine.polling import PollTimer, SleepFn
from views.filtering import filter_snapshot

logger = get_logger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load scores for selected date"
DETAIL_ERROR_MESSAGE = "Failed to load match details"

Listener = Callable[[CoordinatorState], None]


class ScoreCoordinator:
    """
    One instance per sport; every sport uses the same class bound to its own
    Fetch Port.

    Commands (``select_date``, ``refresh``, ``select_match``) update state
    synchronously and return the ``asyncio.Task`` carrying the fetch, so the
    caller may await it or ignore it.
    """

    def __init__(
        self,
        sport: Sport,
        port: FetchPort,
        clock: Clock | None = None,
        settings: Settings | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._sport = sport
        self._port = port
        self._clock: Clock = clock or SystemClock()
        self._log = logger.bind(sport=sport.value)

        self._selected_date = today_key(self._clock)
        self._load_state: LoadState = Loading()
        self._refreshing = 0
        self._detail_state: DetailState = Hidden()
        self._selected_match_id: Optional[str] = None

        self._load_seq = 0
        self._selection_seq = 0
        self._applied_seq = 0
        self._detail_seq = 0

        self._tasks: set[asyncio.Task[Any]] = set()
        self._listeners: list[Listener] = []
        self._poller = PollTimer(sport.value, self._settings.poll_interval_s, self.poll_tick, sleep=sleep)
        self._started = False
        self._closed = False

    # ── Read-only state ─────────────────────────────────────────────────

    @property
    def sport(self) -> Sport:
        return self._sport

    @property
    def selected_date(self) -> str:
        return self._selected_date

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing > 0

    @property
    def detail_state(self) -> DetailState:
        return self._detail_state

    @property
    def selected_match_id(self) -> Optional[str]:
        return self._selected_match_id

    @property
    def state(self) -> CoordinatorState:
        return CoordinatorState(
            sport=self._sport,
            selected_date=self._selected_date,
            load_state=self._load_state,
            is_refreshing=self.is_refreshing,
            detail_state=self._detail_state,
            selected_match_id=self._selected_match_id,
        )

    def filtered_snapshot(self, query: str = "", live_only: bool = False) -> Optional[Snapshot]:
        """The current snapshot narrowed for display, or None while nothing is loaded."""
        if not isinstance(self._load_state, Success):
            return None
        return filter_snapshot(self._load_state.data, query, live_only)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a callback invoked with the new state after every transition."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ── Date helpers ────────────────────────────────────────────────────

    def today_key(self) -> str:
        return today_key(self._clock)

    def yesterday_key(self) -> str:
        return yesterday_key(self._clock)

    def tomorrow_key(self) -> str:
        return tomorrow_key(self._clock)

    # ── Lifecycle ───────────────────────────────────────────────────────

    def start(self) -> asyncio.Task[None]:
        """Fetch the initial date and start background polling."""
        if self._started:
            raise RuntimeError("coordinator already started")
        self._started = True
        task = self._load(self._selected_date, show_loading=True)
        self._poller.start()
        self._log.info("coordinator_started", date=self._selected_date)
        return task

    async def close(self) -> None:
        """Stop polling and cancel outstanding fetch tasks."""
        if self._closed:
            return
        self._closed = True
        await self._poller.stop()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._log.info("coordinator_stopped")

    async def __aenter__(self) -> "ScoreCoordinator":
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── Commands ────────────────────────────────────────────────────────

    def select_date(self, date: str) -> asyncio.Task[None]:
        """Switch to ``date`` (YYYYMMDD) and load it, blanking the current snapshot."""
        if not is_date_key(date):
            raise ValueError(f"not a YYYYMMDD date: {date!r}")
        self._ensure_open()
        self._selected_date = date
        return self._load(date, show_loading=True)

    def refresh(self) -> asyncio.Task[None]:
        """Reload the selected date in the background, keeping the current snapshot visible."""
        return self._load(self._selected_date, show_loading=False)

    async def poll_tick(self) -> Optional[asyncio.Task[None]]:
        """Refresh if and only if today is selected."""
        if self._selected_date != today_key(self._clock):
            POLL_TICKS.labels(sport=self._sport.value, action="skipped").inc()
            return None
        POLL_TICKS.labels(sport=self._sport.value, action="refreshed").inc()
        return self.refresh()

    def select_match(self, match_id: str) -> asyncio.Task[None]:
        """Open the detail view for ``match_id`` and fetch its detail record."""
        self._ensure_open()
        self._detail_seq += 1
        seq = self._detail_seq
        self._selected_match_id = match_id
        self._detail_state = Loading()
        self._notify()
        return self._spawn(self._run_detail(match_id, seq))

    def dismiss_match_detail(self) -> None:
        """Close the detail view; a detail fetch still in flight is ignored when it lands."""
        self._detail_seq += 1
        self._selected_match_id = None
        self._detail_state = Hidden()
        self._notify()

    # ── Load channel ────────────────────────────────────────────────────

    def _load(self, date: str, show_loading: bool) -> asyncio.Task[None]:
        self._ensure_open()
        self._load_seq += 1
        seq = self._load_seq
        if show_loading:
            self._selection_seq = seq
            self._load_state = Loading()
        else:
            self._refreshing += 1
        self._notify()
        return self._spawn(self._run_load(date, seq, show_loading))

    async def _run_load(self, date: str, seq: int, show_loading: bool) -> None:
        try:
            result = await self._call_port(self._port.fetch_snapshot, date)
        finally:
            if not show_loading:
                self._refreshing -= 1
        self._apply_load(date, seq, result)
        self._notify()

    def _apply_load(self, date: str, seq: int, result: FetchResult[Snapshot]) -> None:
        if date != self._selected_date or seq < self._selection_seq or seq < self._applied_seq:
            SUPERSEDED_RESPONSES.labels(sport=self._sport.value, channel="snapshot").inc()
            self._log.debug(
                "snapshot_response_superseded",
                date=date,
                selected_date=self._selected_date,
                seq=seq,
                success=result.success,
            )
            return

        if result.success and result.data is not None:
            snapshot = result.data
            self._applied_seq = seq
            self._load_state = Success(data=snapshot)
            SNAPSHOT_FETCHES.labels(sport=self._sport.value, outcome="success").inc()
            LIVE_MATCHES.labels(sport=self._sport.value).set(snapshot.live_count)
            self._log.info(
                "snapshot_applied",
                date=date,
                groups=len(snapshot.groups),
                matches=snapshot.match_count,
                live=snapshot.live_count,
            )
            return

        message = result.error or LOAD_ERROR_MESSAGE
        SNAPSHOT_FETCHES.labels(sport=self._sport.value, outcome="error").inc()
        if isinstance(self._load_state, Success):
            self._log.warning("snapshot_refresh_failed_stale_kept", date=date, error=message)
            return
        self._load_state = Error(message=message)
        self._log.warning("snapshot_load_failed", date=date, error=message)

    # ── Detail channel ──────────────────────────────────────────────────

    async def _run_detail(self, match_id: str, seq: int) -> None:
        result = await self._call_port(self._port.fetch_match_detail, match_id)
        if seq != self._detail_seq or not isinstance(self._detail_state, Loading):
            SUPERSEDED_RESPONSES.labels(sport=self._sport.value, channel="detail").inc()
            self._log.debug("detail_response_superseded", match_id=match_id, success=result.success)
            return
        if result.success and result.data is not None:
            detail: MatchDetail = result.data
            self._detail_state = Success(data=detail)
            DETAIL_FETCHES.labels(sport=self._sport.value, outcome="success").inc()
            self._log.info("detail_applied", match_id=match_id, incidents=len(detail.incidents))
        else:
            message = result.error or DETAIL_ERROR_MESSAGE
            self._detail_state = Error(message=message)
            DETAIL_FETCHES.labels(sport=self._sport.value, outcome="error").inc()
            self._log.warning("detail_load_failed", match_id=match_id, error=message)
        self._notify()

    # ── Plumbing ────────────────────────────────────────────────────────

    async def _call_port(
        self,
        fetch: Callable[[Sport, str], Coroutine[Any, Any, FetchResult[Any]]],
        key: str,
    ) -> FetchResult[Any]:
        try:
            return await fetch(self._sport, key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._log.error("fetch_port_raised", key=key, error=str(exc) or type(exc).__name__, exc_info=True)
            # no message: the channel falls back to its default error text
            return FetchResult(success=False)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("coordinator is closed")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                self._log.error("state_listener_error", error=str(exc), exc_info=True)
