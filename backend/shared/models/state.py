"""
Tagged state variants shared by every sport's coordinator.

The load channel is ``Loading | Success[Snapshot] | Error`` and the match
detail channel is ``Hidden | Loading | Success[MatchDetail] | Error``.
"""
from __future__ import annotations

from typing import Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict

from shared.models.domain import MatchDetail, Snapshot
from shared.models.enums import LoadStatus, Sport

T = TypeVar("T")


class StateModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class Hidden(StateModel):
    status: Literal[LoadStatus.HIDDEN] = LoadStatus.HIDDEN


class Loading(StateModel):
    status: Literal[LoadStatus.LOADING] = LoadStatus.LOADING


class Success(StateModel, Generic[T]):
    status: Literal[LoadStatus.SUCCESS] = LoadStatus.SUCCESS
    data: T


class Error(StateModel):
    status: Literal[LoadStatus.ERROR] = LoadStatus.ERROR
    message: str


LoadState = Union[Loading, Success[Snapshot], Error]
DetailState = Union[Hidden, Loading, Success[MatchDetail], Error]


class CoordinatorState(StateModel):
    """Read-only view of a coordinator handed to listeners."""
    sport: Sport
    selected_date: str
    load_state: Any
    is_refreshing: bool = False
    detail_state: Any = Hidden()
    selected_match_id: Optional[str] = None

    @property
    def snapshot(self) -> Optional[Snapshot]:
        if isinstance(self.load_state, Success):
            return self.load_state.data
        return None
