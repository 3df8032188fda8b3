"""Domain enumerations for Score Sync."""
from __future__ import annotations

from enum import Enum


class Sport(str, Enum):
    SOCCER = "soccer"
    BASKETBALL = "basketball"
    CRICKET = "cricket"
    HOCKEY = "hockey"

    @property
    def display_name(self) -> str:
        return "Football" if self is Sport.SOCCER else self.value.capitalize()


class IncidentKind(str, Enum):
    GOAL = "Goal"
    YELLOW_CARD = "Yellow Card"
    RED_CARD = "Red Card"
    SUBSTITUTION = "Substitution"
    OWN_GOAL = "Own Goal"
    PENALTY = "Penalty"
    MISSED_PENALTY = "Missed Penalty"
    VAR = "Var"
    UNKNOWN = "Unknown"

    @classmethod
    def from_code(cls, code: int) -> "IncidentKind":
        return _INCIDENT_CODES.get(code, cls.UNKNOWN)


_INCIDENT_CODES: dict[int, IncidentKind] = {
    1: IncidentKind.GOAL,
    2: IncidentKind.GOAL,
    3: IncidentKind.YELLOW_CARD,
    4: IncidentKind.RED_CARD,
    5: IncidentKind.SUBSTITUTION,
    6: IncidentKind.OWN_GOAL,
    7: IncidentKind.PENALTY,
    8: IncidentKind.MISSED_PENALTY,
    9: IncidentKind.VAR,
}


class LoadStatus(str, Enum):
    HIDDEN = "hidden"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
