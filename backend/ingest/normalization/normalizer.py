"""
Normalization layer for provider payloads.
Decodes raw LiveScore JSON into canonical Snapshot / MatchDetail models and
applies the ingestion-time status default.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from shared.models.domain import (
    NOT_STARTED,
    CricketScore,
    Group,
    Incident,
    Match,
    MatchDetail,
    MediaItem,
    Snapshot,
    Team,
    Venue,
)
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class PayloadError(ValueError):
    """Raised when a provider payload cannot be decoded."""


# ── Status normalization ────────────────────────────────────────────────

def normalize_match(match: Match) -> Match:
    """Default a missing status to not-started. Already normalized matches are returned as is."""
    if match.status_code:
        return match
    return match.model_copy(update={"status_code": NOT_STARTED})


def normalize_snapshot(snapshot: Snapshot) -> Snapshot:
    """Apply ``normalize_match`` to every match, logging groups that needed it."""
    groups: list[Group] = []
    changed = False
    for group in snapshot.groups:
        missing = sum(1 for m in group.matches if not m.status_code)
        if not missing:
            groups.append(group)
            continue
        changed = True
        logger.warning("missing_status_normalized", group=group.short_name, count=missing)
        groups.append(group.model_copy(update={"matches": tuple(normalize_match(m) for m in group.matches)}))
    if not changed:
        return snapshot
    return snapshot.model_copy(update={"groups": tuple(groups)})


# ── Scalar helpers ──────────────────────────────────────────────────────

def _safe_int(val: Any) -> Optional[int]:
    if val is None or val == "":
        return None
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def _safe_float(val: Any) -> Optional[float]:
    if val is None or val == "":
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def _str_or_none(val: Any) -> Optional[str]:
    if val is None:
        return None
    text = str(val)
    return text or None


# ── Entity parsers ──────────────────────────────────────────────────────

def _parse_team(raw_list: Any) -> Team:
    raw = raw_list[0] if isinstance(raw_list, list) and raw_list else {}
    if not isinstance(raw, dict):
        raw = {}
    return Team(
        id=str(raw.get("ID") or ""),
        name=raw.get("Nm") or "",
        abbreviation=raw.get("Abr") or "",
        primary_color=raw.get("Fc") or raw.get("firstColor"),
        secondary_color=raw.get("Sc") or raw.get("secondColor"),
        crest_ref=raw.get("Img"),
    )


def _parse_cricket(raw: dict[str, Any]) -> Optional[CricketScore]:
    if raw.get("Tr1C1") is None:
        return None
    return CricketScore(
        home_runs=_safe_int(raw.get("Tr1C1")) or 0,
        home_wickets=_safe_int(raw.get("Tr1CW1")) or 0,
        home_overs=_safe_float(raw.get("Tr1CO1")) or 0.0,
        away_runs=_safe_int(raw.get("Tr2C1")) or 0,
        away_wickets=_safe_int(raw.get("Tr2CW1")) or 0,
        away_overs=_safe_float(raw.get("Tr2CO1")) or 0.0,
    )


def parse_match(raw: Any) -> Match:
    if not isinstance(raw, dict):
        raise PayloadError("event is not an object")
    match_id = raw.get("Eid")
    if not match_id:
        raise PayloadError("event without Eid")
    return Match(
        id=str(match_id),
        home_team=_parse_team(raw.get("T1")),
        away_team=_parse_team(raw.get("T2")),
        status_code=_str_or_none(raw.get("Eps")),
        status_id=_safe_int(raw.get("Esid")) or 0,
        home_score=_str_or_none(raw.get("Tr1")),
        away_score=_str_or_none(raw.get("Tr2")),
        home_halftime=_str_or_none(raw.get("Trh1")),
        away_halftime=_str_or_none(raw.get("Trh2")),
        start_timestamp=_safe_int(raw.get("Esd")) or 0,
        cricket=_parse_cricket(raw),
        commentary=_str_or_none(raw.get("ECo")),
    )


def parse_group(raw: dict[str, Any]) -> Group:
    """Decode one stage. Events that cannot be decoded are logged and skipped."""
    group_id = str(raw.get("Sid") or "")
    matches: list[Match] = []
    for index, event in enumerate(raw.get("Events") or []):
        try:
            matches.append(parse_match(event))
        except (PayloadError, ValidationError) as exc:
            logger.warning("event_skipped", group=group_id, index=index, error=str(exc))
    return Group(
        id=group_id,
        short_name=raw.get("Snm") or "",
        full_name=raw.get("CompN"),
        country_name=raw.get("Cnm"),
        badge_ref=raw.get("badgeUrl"),
        matches=tuple(matches),
    )


def parse_snapshot(payload: Any, fetched_at: Optional[datetime] = None) -> Snapshot:
    """Decode a date listing into a normalized Snapshot."""
    if not isinstance(payload, dict):
        raise PayloadError("snapshot payload is not an object")
    stages = payload.get("Stages")
    if stages is None:
        stages = []
    if not isinstance(stages, list):
        raise PayloadError("Stages is not a list")
    groups: list[Group] = []
    for index, stage in enumerate(stages):
        if not isinstance(stage, dict):
            logger.warning("stage_skipped", index=index, error="stage is not an object")
            continue
        groups.append(parse_group(stage))
    snapshot = Snapshot(fetched_at=fetched_at or datetime.now(timezone.utc), groups=tuple(groups))
    return normalize_snapshot(snapshot)


def _parse_media(raw: Any) -> tuple[MediaItem, ...]:
    if not isinstance(raw, dict):
        return ()
    items: list[MediaItem] = []
    for channel in sorted(raw, key=str):
        for item in raw[channel] or []:
            if not isinstance(item, dict):
                continue
            items.append(
                MediaItem(
                    provider=item.get("provider"),
                    type=item.get("type") or "",
                    thumbnail=item.get("thumbnail"),
                    stream_url=item.get("streamhls"),
                    allowed_countries=tuple(item.get("allowedCountries") or ()),
                    denied_countries=tuple(item.get("deniedCountries") or ()),
                )
            )
    return tuple(items)


def _parse_score(raw: Any) -> Optional[tuple[int, ...]]:
    """Running score after an incident; None unless every entry is numeric."""
    if not isinstance(raw, list):
        return None
    values = tuple(_safe_int(v) for v in raw)
    if any(v is None for v in values):
        return None
    return values


def _parse_incidents(raw: Any) -> tuple[Incident, ...]:
    if not isinstance(raw, dict):
        return ()
    incidents: list[Incident] = []
    for period in sorted(raw, key=str):
        for inc in raw[period] or []:
            if not isinstance(inc, dict):
                logger.warning("incident_skipped", period=str(period), error="incident is not an object")
                continue
            incidents.append(
                Incident(
                    id=str(inc.get("ID") or ""),
                    period=str(period),
                    minute=_safe_int(inc.get("Min")) or 0,
                    kind_code=_safe_int(inc.get("Nm")) or 0,
                    type_id=_safe_int(inc.get("IT")) or 0,
                    player_name=inc.get("Pn"),
                    first_name=inc.get("Fn"),
                    last_name=inc.get("Ln"),
                    short_name=inc.get("Snm"),
                    score=_parse_score(inc.get("Sc")),
                )
            )
    return tuple(incidents)


def parse_match_detail(payload: Any) -> MatchDetail:
    """Decode a scoreboard payload into a MatchDetail."""
    if not isinstance(payload, dict):
        raise PayloadError("detail payload is not an object")
    match_id = payload.get("Eid")
    if not match_id:
        raise PayloadError("detail payload without Eid")

    venue_raw = payload.get("Venue")
    venue = None
    if isinstance(venue_raw, dict):
        venue = Venue(
            id=str(venue_raw.get("id") or ""),
            name=venue_raw.get("Vnm") or "",
            neutral=bool(_safe_int(venue_raw.get("Vneut"))),
            image_ref=venue_raw.get("VImg"),
        )

    stage_raw = payload.get("Stg")
    group = None
    if isinstance(stage_raw, dict):
        group = parse_group({**stage_raw, "Events": []})

    return MatchDetail(
        id=str(match_id),
        home_team=_parse_team(payload.get("T1")),
        away_team=_parse_team(payload.get("T2")),
        status_code=_str_or_none(payload.get("Eps")) or NOT_STARTED,
        home_score=_str_or_none(payload.get("Tr1")),
        away_score=_str_or_none(payload.get("Tr2")),
        home_halftime=_str_or_none(payload.get("Trh1")),
        away_halftime=_str_or_none(payload.get("Trh2")),
        start_timestamp=_safe_int(payload.get("Esd")) or 0,
        venue=venue,
        incidents=_parse_incidents(payload.get("Incs-s")),
        media=_parse_media(payload.get("Media")),
        group=group,
    )
