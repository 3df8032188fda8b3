"""
Client-side filtering of a cached snapshot.

Filters never touch the snapshot they are given; each call builds a new one,
so the same cached snapshot can be filtered repeatedly with different inputs.
"""
from __future__ import annotations

from shared.models.domain import Group, Match, Snapshot
from shared.models.enums import Sport


def _matches_query(group: Group, match: Match, needle: str) -> bool:
    haystacks = (
        match.home_team.name,
        match.away_team.name,
        group.short_name,
        group.full_name or "",
    )
    return any(needle in h.lower() for h in haystacks)


def filter_snapshot(snapshot: Snapshot, query: str = "", live_only: bool = False) -> Snapshot:
    """
    Narrow a snapshot by free text and live status.

    Args:
        snapshot: The cached snapshot.
        query: Case-insensitive substring matched against both team names and
            the group's short and full names. Blank means no text filter.
        live_only: Keep only matches that are currently in play.

    Returns:
        A new Snapshot with the same group and match order, without groups
        that ended up empty.
    """
    needle = (query or "").strip().lower()
    groups: list[Group] = []
    for group in snapshot.groups:
        kept = tuple(
            m
            for m in group.matches
            if (not needle or _matches_query(group, m, needle)) and (not live_only or m.is_live)
        )
        if not kept:
            continue
        groups.append(group if len(kept) == len(group.matches) else group.model_copy(update={"matches": kept}))
    return snapshot.model_copy(update={"groups": tuple(groups)})


def empty_message(sport: Sport, query: str = "", live_only: bool = False) -> str:
    """Message shown when a filtered snapshot has no groups left."""
    text = (query or "").strip()
    name = sport.display_name.lower()
    if live_only and text:
        return f'No live {name} matches found for "{text}"'
    if live_only:
        return f"No live {name} matches found for selected date"
    if text:
        return f'No {name} matches found for "{text}"'
    return f"No {name} matches found for selected date"
