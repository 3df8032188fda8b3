"""
Score Sync service.
Runs one ScoreCoordinator per configured sport against a shared Fetch Port
until SIGINT/SIGTERM, logging every state transition.
"""
from __future__ import annotations

import asyncio
import signal
from typing import Optional

from shared.config import Settings, get_settings
from shared.models.enums import Sport
from shared.models.state import CoordinatorState
from shared.utils.clock import Clock
from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import start_metrics_server

from ingest.providers.base import BaseFetchPort
from ingest.providers.livescore import LiveScoreProvider
from scheduler.coordinator import ScoreCoordinator

logger = get_logger(__name__)


def log_transition(state: CoordinatorState) -> None:
    logger.debug(
        "coordinator_state",
        sport=state.sport.value,
        date=state.selected_date,
        load=state.load_state.status.value,
        refreshing=state.is_refreshing,
        detail=state.detail_state.status.value,
    )


class ScoreService:
    """Owns the Fetch Port and the per-sport coordinators bound to it."""

    def __init__(
        self,
        port: BaseFetchPort,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._port = port
        self._clock = clock
        self._coordinators: dict[Sport, ScoreCoordinator] = {}
        self._shutdown = asyncio.Event()

    @property
    def coordinators(self) -> dict[Sport, ScoreCoordinator]:
        return dict(self._coordinators)

    def coordinator(self, sport: Sport) -> Optional[ScoreCoordinator]:
        return self._coordinators.get(sport)

    async def start(self) -> None:
        await self._port.start()
        for sport in self._settings.sports:
            coordinator = ScoreCoordinator(sport, self._port, clock=self._clock, settings=self._settings)
            coordinator.add_listener(log_transition)
            self._coordinators[sport] = coordinator
            coordinator.start()
        logger.info("score_service_started", sports=[s.value for s in self._coordinators])

    async def stop(self) -> None:
        for coordinator in self._coordinators.values():
            await coordinator.close()
        self._coordinators.clear()
        await self._port.close()
        logger.info("score_service_stopped")

    async def run(self) -> None:
        await self.start()
        try:
            await self._shutdown.wait()
        finally:
            await self.stop()

    def request_shutdown(self) -> None:
        self._shutdown.set()


async def main() -> None:
    """Service entrypoint."""
    settings = get_settings()
    setup_logging("scoresync", settings)
    start_metrics_server(settings)

    service = ScoreService(LiveScoreProvider(settings), settings)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, service.request_shutdown)

    await service.run()


def run_cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run_cli()
