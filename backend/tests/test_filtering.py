"""
Unit tests for the snapshot filter: text search, live-only, empty-group removal.
"""
from __future__ import annotations

import pytest

from shared.models.domain import Snapshot
from shared.models.enums import Sport
from views.filtering import empty_message, filter_snapshot

from helpers import group, match, snapshot


@pytest.fixture
def day() -> Snapshot:
    return snapshot(
        group(
            "pl",
            "Premier League",
            match("1", "Arsenal", "Chelsea", status="67'"),
            match("2", "Everton", "Fulham", status="FT"),
            match("3", "Brentford", "Wolves", status="NS"),
            full_name="England Premier League",
        ),
        group(
            "ll",
            "LaLiga",
            match("4", "Real Madrid", "Barcelona", status="HT"),
            match("5", "Sevilla", "Valencia", status="NS"),
            full_name="Spain LaLiga",
        ),
        group("cup", "Copa del Rey", match("6", "Getafe", "Osasuna", status="AET")),
    )


def _ids(snap: Snapshot) -> list[str]:
    return [m.id for g in snap.groups for m in g.matches]


# ── Text query ──────────────────────────────────────────────────────────

class TestQuery:

    def test_blank_query_keeps_everything(self, day: Snapshot) -> None:
        assert filter_snapshot(day, "   ") == day
        assert filter_snapshot(day, "") == day

    def test_home_team_match(self, day: Snapshot) -> None:
        assert _ids(filter_snapshot(day, "arsenal")) == ["1"]

    def test_away_team_match_case_insensitive(self, day: Snapshot) -> None:
        assert _ids(filter_snapshot(day, "BARCE")) == ["4"]

    def test_group_short_name_keeps_all_its_matches(self, day: Snapshot) -> None:
        assert _ids(filter_snapshot(day, "laliga")) == ["4", "5"]

    def test_group_full_name(self, day: Snapshot) -> None:
        assert _ids(filter_snapshot(day, "england")) == ["1", "2", "3"]

    def test_query_is_trimmed(self, day: Snapshot) -> None:
        assert _ids(filter_snapshot(day, "  getafe ")) == ["6"]

    def test_no_hits_yields_no_groups(self, day: Snapshot) -> None:
        assert filter_snapshot(day, "bayern").groups == ()


# ── Live-only ───────────────────────────────────────────────────────────

class TestLiveOnly:

    def test_live_only(self, day: Snapshot) -> None:
        assert _ids(filter_snapshot(day, live_only=True)) == ["1", "4"]

    def test_group_without_live_matches_is_dropped(self, day: Snapshot) -> None:
        result = filter_snapshot(day, live_only=True)
        assert [g.id for g in result.groups] == ["pl", "ll"]
        assert all(g.matches for g in result.groups)

    def test_combined_with_query(self, day: Snapshot) -> None:
        assert _ids(filter_snapshot(day, "premier", live_only=True)) == ["1"]
        assert filter_snapshot(day, "sevilla", live_only=True).groups == ()


# ── Purity ──────────────────────────────────────────────────────────────

class TestPurity:

    def test_idempotent(self, day: Snapshot) -> None:
        once = filter_snapshot(day, "a", True)
        assert filter_snapshot(once, "a", True) == once

    def test_input_not_mutated(self, day: Snapshot) -> None:
        before = day.model_dump()
        filter_snapshot(day, "arsenal", True)
        filter_snapshot(day, "laliga", False)
        assert day.model_dump() == before

    def test_order_preserved(self, day: Snapshot) -> None:
        result = filter_snapshot(day, "e")
        assert [g.id for g in result.groups] == ["pl", "ll", "cup"]
        assert _ids(result) == sorted(_ids(result), key=int)

    def test_fetched_at_carried_over(self, day: Snapshot) -> None:
        assert filter_snapshot(day, "x", True).fetched_at == day.fetched_at

    def test_upstream_empty_group_removed(self) -> None:
        snap = snapshot(group("empty", "Nothing"), group("g", "League", match("1", "A", "B")))
        assert [g.id for g in filter_snapshot(snap).groups] == ["g"]


# ── Empty-state messages ────────────────────────────────────────────────

@pytest.mark.parametrize(
    "query, live_only, expected",
    [
        ("derby", True, 'No live football matches found for "derby"'),
        ("", True, "No live football matches found for selected date"),
        ("derby", False, 'No football matches found for "derby"'),
        ("  ", False, "No football matches found for selected date"),
    ],
)
def test_empty_message(query: str, live_only: bool, expected: str) -> None:
    assert empty_message(Sport.SOCCER, query, live_only) == expected


def test_empty_message_other_sport() -> None:
    assert empty_message(Sport.CRICKET) == "No cricket matches found for selected date"
