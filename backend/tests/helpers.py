"""Builders and fakes shared by the test modules."""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from shared.models.domain import Group, Match, MatchDetail, Snapshot, Team
from shared.models.enums import Sport

from ingest.providers.base import FetchResult

FETCHED_AT = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def team(name: str, abbreviation: str = "") -> Team:
    return Team(id=name.lower().replace(" ", "-"), name=name, abbreviation=abbreviation or name[:3].upper())


def match(
    match_id: str,
    home: str,
    away: str,
    status: Optional[str] = "NS",
    **fields: Any,
) -> Match:
    return Match(id=match_id, home_team=team(home), away_team=team(away), status_code=status, **fields)


def group(group_id: str, short_name: str, *matches: Match, full_name: Optional[str] = None) -> Group:
    return Group(id=group_id, short_name=short_name, full_name=full_name, matches=matches)


def snapshot(*groups: Group) -> Snapshot:
    return Snapshot(fetched_at=FETCHED_AT, groups=groups)


def detail(match_id: str) -> MatchDetail:
    return MatchDetail(id=match_id, home_team=team("Arsenal"), away_team=team("Chelsea"), status_code="FT")


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> None:
        self.current += timedelta(**delta)


class ControlledPort:
    """Fetch Port whose calls stay pending until the test resolves them."""

    def __init__(self) -> None:
        self.snapshot_requests: list[tuple[Sport, str, asyncio.Future[FetchResult[Snapshot]]]] = []
        self.detail_requests: list[tuple[Sport, str, asyncio.Future[FetchResult[MatchDetail]]]] = []

    async def fetch_snapshot(self, sport: Sport, date: str) -> FetchResult[Snapshot]:
        fut: asyncio.Future[FetchResult[Snapshot]] = asyncio.get_running_loop().create_future()
        self.snapshot_requests.append((sport, date, fut))
        return await fut

    async def fetch_match_detail(self, sport: Sport, match_id: str) -> FetchResult[MatchDetail]:
        fut: asyncio.Future[FetchResult[MatchDetail]] = asyncio.get_running_loop().create_future()
        self.detail_requests.append((sport, match_id, fut))
        return await fut

    @property
    def requested_dates(self) -> list[str]:
        return [date for _, date, _ in self.snapshot_requests]

    def resolve_snapshot(self, index: int, result: FetchResult[Snapshot]) -> None:
        self.snapshot_requests[index][2].set_result(result)

    def resolve_detail(self, index: int, result: FetchResult[MatchDetail]) -> None:
        self.detail_requests[index][2].set_result(result)


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def sleep_forever(_interval: float) -> None:
    await asyncio.Event().wait()


class Ticker:
    """Stand-in for asyncio.sleep that only returns when the test calls tick()."""

    def __init__(self) -> None:
        self._gate: asyncio.Queue[None] = asyncio.Queue()
        self.waiting = 0

    async def sleep(self, _interval: float) -> None:
        self.waiting += 1
        try:
            await self._gate.get()
        finally:
            self.waiting -= 1

    def tick(self) -> None:
        self._gate.put_nowait(None)
