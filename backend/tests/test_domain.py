"""
Unit tests for the snapshot model: liveness classification and display helpers.

Run: pytest backend/tests/test_domain.py -v
"""
from __future__ import annotations

from typing import Optional

import pytest

from shared.models.domain import (
    CricketScore,
    Incident,
    display_score,
    format_overs,
    format_start_time,
    halftime_label,
    is_live,
    status_label,
)
from shared.models.enums import IncidentKind, Sport

from helpers import match


# ── is_live ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "status, expected",
    [
        ("LIVE", True),
        ("HT", True),
        ("45'", True),
        ("45+2'", True),
        ("NS", False),
        ("FT", False),
        ("", False),
        (None, False),
    ],
)
def test_liveness_table(status: Optional[str], expected: bool) -> None:
    assert is_live(status) is expected


@pytest.mark.parametrize("status", ["1H", "2H", "ET", "BT", "P", "AP", "ht", "live", "90+4'", "7'"])
def test_in_play_tokens_are_live(status: str) -> None:
    assert is_live(status)


@pytest.mark.parametrize("status", ["AET", "Postp.", "Canc.", "AW", "ns"])
def test_other_tokens_are_not_live(status: str) -> None:
    assert not is_live(status)


def test_match_is_live_uses_status_code() -> None:
    assert match("1", "A", "B", status="67'").is_live
    assert not match("2", "A", "B", status="FT").is_live


# ── display_score ───────────────────────────────────────────────────────

class TestDisplayScore:

    def test_not_started_without_score_is_vs(self) -> None:
        assert display_score(match("1", "A", "B", status="NS")) == "vs"

    def test_running_score(self) -> None:
        m = match("1", "A", "B", status="55'", home_score="2", away_score="1")
        assert display_score(m) == "2 - 1"

    def test_missing_and_null_scores_show_zero(self) -> None:
        m = match("1", "A", "B", status="FT", home_score="null", away_score=None)
        assert display_score(m) == "0 - 0"

    def test_cricket_both_innings(self) -> None:
        cricket = CricketScore(home_runs=250, home_wickets=8, home_overs=50.0, away_runs=120, away_wickets=3, away_overs=22.4)
        m = match("1", "A", "B", status="LIVE", cricket=cricket)
        assert display_score(m) == "250/8 (50 ov) | 120/3 (22.4 ov)"

    def test_cricket_one_side_batted(self) -> None:
        m = match("1", "A", "B", status="LIVE", cricket=CricketScore(away_runs=45, away_wickets=1, away_overs=6.2))
        assert display_score(m) == "45/1 (6.2 ov)"

    def test_cricket_not_started(self) -> None:
        assert display_score(match("1", "A", "B", cricket=CricketScore())) == "vs"


def test_format_overs() -> None:
    assert format_overs(0.0) == "0 ov"
    assert format_overs(20.0) == "20 ov"
    assert format_overs(19.3) == "19.3 ov"


# ── halftime / status labels ────────────────────────────────────────────

def test_halftime_label() -> None:
    m = match("1", "A", "B", status="FT", home_halftime="1", away_halftime="0")
    assert halftime_label(m) == "HT: 1-0"
    assert halftime_label(match("2", "A", "B", status="FT")) is None


def test_halftime_label_hidden_for_cricket() -> None:
    m = match("1", "A", "B", home_halftime="1", away_halftime="0", cricket=CricketScore())
    assert halftime_label(m) is None


class TestStatusLabel:

    def test_in_play_status_id(self) -> None:
        assert status_label(match("1", "A", "B", status="2H", status_id=33)) == "LIVE"

    def test_not_started_shows_kickoff(self) -> None:
        assert status_label(match("1", "A", "B", status="NS", start_timestamp=20261019193000)) == "19:30"

    def test_not_started_without_time(self) -> None:
        assert status_label(match("1", "A", "B", status="NS")) == "NS"

    def test_terminal_tokens_verbatim(self) -> None:
        for token in ("FT", "AET", "AP", "HT"):
            assert status_label(match("1", "A", "B", status=token)) == token

    def test_clock_gets_apostrophe(self) -> None:
        assert status_label(match("1", "A", "B", status="67")) == "67'"
        assert status_label(match("1", "A", "B", status="45+2'")) == "45+2'"


def test_format_start_time_passthrough_for_odd_values() -> None:
    assert format_start_time(1234) == "1234"
    assert format_start_time(20261399999999) == "20261399999999"


# ── Incident ────────────────────────────────────────────────────────────

class TestIncident:

    def test_kind_from_code(self) -> None:
        assert Incident(id="1", period="1", minute=10, kind_code=1).kind == IncidentKind.GOAL
        assert Incident(id="1", period="1", minute=10, kind_code=4).kind == IncidentKind.RED_CARD
        assert Incident(id="1", period="1", minute=10, kind_code=42).kind == IncidentKind.UNKNOWN

    def test_display_player_fallbacks(self) -> None:
        base = dict(id="1", period="1", minute=10, kind_code=1)
        assert Incident(**base, player_name="Saka").display_player == "Saka"
        assert Incident(**base, first_name="Bukayo", last_name="Saka").display_player == "Bukayo Saka"
        assert Incident(**base, first_name="Bukayo", short_name="B. Saka").display_player == "B. Saka"
        assert Incident(**base).display_player == "Unknown Player"


def test_sport_display_names() -> None:
    assert Sport.SOCCER.display_name == "Football"
    assert Sport.HOCKEY.display_name == "Hockey"
