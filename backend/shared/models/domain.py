"""
Pydantic v2 domain models for a day's scores.
Every model is frozen: filtering and normalization produce new instances.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from shared.models.enums import IncidentKind

# Status tokens that always mean the match is in play.
IN_PLAY_TOKENS = frozenset({"LIVE", "HT", "1H", "2H", "ET", "BT", "P", "AP"})
NOT_STARTED = "NS"
# Provider status class for a match currently in play.
STATUS_ID_IN_PLAY = 33

_CLOCK_RE = re.compile(r"^\d+'$")
_STOPPAGE_CLOCK_RE = re.compile(r"^\d+\+\d+'$")


def is_live(status: Optional[str]) -> bool:
    """Classify a provider status token as in play or not."""
    if not status:
        return False
    token = status.upper()
    if token in IN_PLAY_TOKENS:
        return True
    return "'" in token or bool(_CLOCK_RE.match(token)) or bool(_STOPPAGE_CLOCK_RE.match(token))


# ── Base ────────────────────────────────────────────────────────────────
class DomainModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)


# ── Reference entities ──────────────────────────────────────────────────
class Team(DomainModel):
    id: str
    name: str
    abbreviation: str = ""
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    crest_ref: Optional[str] = None


class CricketScore(DomainModel):
    """First-innings totals for both sides."""
    home_runs: int = 0
    home_wickets: int = 0
    home_overs: float = 0.0
    away_runs: int = 0
    away_wickets: int = 0
    away_overs: float = 0.0


# ── Match / group / snapshot ────────────────────────────────────────────
class Match(DomainModel):
    id: str
    home_team: Team
    away_team: Team
    status_code: Optional[str] = None
    status_id: int = 0
    home_score: Optional[str] = None
    away_score: Optional[str] = None
    home_halftime: Optional[str] = None
    away_halftime: Optional[str] = None
    start_timestamp: int = 0
    cricket: Optional[CricketScore] = None
    commentary: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return is_live(self.status_code)

    @property
    def is_cricket(self) -> bool:
        return self.cricket is not None


class Group(DomainModel):
    """A competition or stage bucket."""
    id: str
    short_name: str
    full_name: Optional[str] = None
    country_name: Optional[str] = None
    badge_ref: Optional[str] = None
    matches: tuple[Match, ...] = ()


class Snapshot(DomainModel):
    """All grouped matches for one calendar date, as fetched."""
    fetched_at: datetime
    groups: tuple[Group, ...] = ()

    @property
    def match_count(self) -> int:
        return sum(len(g.matches) for g in self.groups)

    @property
    def live_count(self) -> int:
        return sum(1 for g in self.groups for m in g.matches if m.is_live)


# ── Match detail ────────────────────────────────────────────────────────
class Venue(DomainModel):
    id: str
    name: str
    neutral: bool = False
    image_ref: Optional[str] = None


class Incident(DomainModel):
    id: str
    period: str
    minute: int
    kind_code: int
    type_id: int = 0
    player_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    short_name: Optional[str] = None
    score: Optional[tuple[int, ...]] = None

    @property
    def kind(self) -> IncidentKind:
        return IncidentKind.from_code(self.kind_code)

    @property
    def display_player(self) -> str:
        if self.player_name:
            return self.player_name
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        if self.short_name:
            return self.short_name
        return "Unknown Player"


class MediaItem(DomainModel):
    provider: Optional[str] = None
    type: str
    thumbnail: Optional[str] = None
    stream_url: Optional[str] = None
    allowed_countries: tuple[str, ...] = ()
    denied_countries: tuple[str, ...] = ()


class MatchDetail(DomainModel):
    """Per-match record fetched lazily when a match is selected."""
    id: str
    home_team: Team
    away_team: Team
    status_code: str = NOT_STARTED
    home_score: Optional[str] = None
    away_score: Optional[str] = None
    home_halftime: Optional[str] = None
    away_halftime: Optional[str] = None
    start_timestamp: int = 0
    venue: Optional[Venue] = None
    incidents: tuple[Incident, ...] = ()
    media: tuple[MediaItem, ...] = ()
    group: Optional[Group] = None

    @property
    def is_live(self) -> bool:
        return is_live(self.status_code)


# ── Display helpers ─────────────────────────────────────────────────────
def _score_or_zero(value: Optional[str]) -> str:
    if value is None or value == "" or value.lower() == "null":
        return "0"
    return value


def format_overs(overs: float) -> str:
    if overs == 0.0:
        return "0 ov"
    whole = int(overs)
    balls = int(round((overs - whole) * 10, 6))
    return f"{whole}.{balls} ov" if balls > 0 else f"{whole} ov"


def display_score(match: Match) -> str:
    """Scoreline shown on a match card."""
    if match.cricket is not None:
        c = match.cricket
        home = f"{c.home_runs}/{c.home_wickets} ({format_overs(c.home_overs)})" if c.home_runs > 0 else None
        away = f"{c.away_runs}/{c.away_wickets} ({format_overs(c.away_overs)})" if c.away_runs > 0 else None
        parts = [s for s in (home, away) if s is not None]
        return " | ".join(parts) if parts else "vs"

    home_score = _score_or_zero(match.home_score)
    away_score = _score_or_zero(match.away_score)
    if match.status_code == NOT_STARTED and home_score == "0" and away_score == "0":
        return "vs"
    return f"{home_score} - {away_score}"


def halftime_label(match: Match) -> Optional[str]:
    if match.is_cricket or not match.home_halftime or not match.away_halftime:
        return None
    return f"HT: {match.home_halftime}-{match.away_halftime}"


def format_start_time(timestamp: int) -> str:
    """Render a provider YYYYMMDDHHMMSS timestamp as HH:MM."""
    text = str(timestamp)
    if len(text) != 14:
        return text
    try:
        moment = datetime.strptime(text, "%Y%m%d%H%M%S")
    except ValueError:
        return text
    return moment.strftime("%H:%M")


def status_label(match: Match) -> str:
    """Text for the status badge on a match card."""
    status = (match.status_code or NOT_STARTED).upper()
    if match.status_id == STATUS_ID_IN_PLAY:
        return "LIVE"
    if status == NOT_STARTED:
        return format_start_time(match.start_timestamp) if match.start_timestamp else NOT_STARTED
    if status in ("FT", "AET", "AP", "HT"):
        return status
    raw = match.status_code or status
    return raw if "'" in raw else f"{raw}'"
