"""
LiveScore provider connector.
Fetches date listings and match scoreboards from the LiveScore public CDN API.
"""
from __future__ import annotations

from datetime import datetime, timezone

import httpx

from shared.config import Settings, get_settings
from shared.models.domain import MatchDetail, Snapshot
from shared.models.enums import Sport
from shared.utils.http_client import ProviderHTTPClient
from shared.utils.logging import get_logger

from ingest.normalization.normalizer import parse_match_detail, parse_snapshot
from ingest.providers.base import BaseFetchPort

logger = get_logger(__name__)

_SPORT_SLUGS: dict[Sport, str] = {
    Sport.SOCCER: "soccer",
    Sport.BASKETBALL: "basketball",
    Sport.CRICKET: "cricket",
    Sport.HOCKEY: "hockey",
}


class LiveScoreProvider(BaseFetchPort):
    """Fetch Port bound to the LiveScore CDN. Stateless between calls."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        super().__init__("livescore", timeout_s=self._settings.request_timeout_s)
        self._http = ProviderHTTPClient(
            provider_name="livescore",
            base_url=self._settings.provider_base_url,
            headers={"Accept": "application/json"},
            timeout_s=self._settings.request_timeout_s,
            max_retries=self._settings.provider_max_retries,
            transport=transport,
        )

    async def start(self) -> None:
        await self._http.start()

    async def close(self) -> None:
        await self._http.close()

    @staticmethod
    def snapshot_path(sport: Sport, date: str, tz_offset: int = 0) -> str:
        return f"/v1/api/app/date/{_SPORT_SLUGS[sport]}/{date}/{tz_offset}"

    @staticmethod
    def detail_path(sport: Sport, match_id: str) -> str:
        return f"/v1/api/app/scoreboard/{_SPORT_SLUGS[sport]}/{match_id}"

    async def _fetch_snapshot(self, sport: Sport, date: str) -> Snapshot:
        payload = await self._http.get_json(
            self.snapshot_path(sport, date, self._settings.provider_tz_offset),
            params={"MD": "1", "locale": self._settings.provider_locale},
            kind="snapshot",
        )
        snapshot = parse_snapshot(payload, fetched_at=datetime.now(timezone.utc))
        logger.debug(
            "livescore_snapshot_decoded",
            sport=sport.value,
            date=date,
            groups=len(snapshot.groups),
            matches=snapshot.match_count,
        )
        return snapshot

    async def _fetch_match_detail(self, sport: Sport, match_id: str) -> MatchDetail:
        payload = await self._http.get_json(
            self.detail_path(sport, match_id),
            params={"locale": self._settings.provider_locale},
            kind="detail",
        )
        return parse_match_detail(payload)
