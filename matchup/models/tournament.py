"""Tournament, registration and team snapshots.

All models are frozen: a mutation produces a new snapshot (``model_copy``)
and the store swaps it in.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BalanceMode(str, Enum):
    balanced = "balanced"
    random = "random"


class TournamentStatus(str, Enum):
    open = "open"
    generated = "generated"
    deleted = "deleted"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epic_key(epic_id: str) -> str:
    """Case-insensitive registration key for an Epic handle."""
    return epic_id.strip().casefold()


def name_key(name: str) -> str:
    """Tournament names collide regardless of case and whitespace."""
    return "".join(name.split()).casefold()


class PlayerRegistration(BaseModel):
    """Player signed up for a tournament."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    epic_id: str
    mmr: int
    timestamp: datetime
    pre_assigned_team: Optional[int] = None  # 1-based team number

    @property
    def key(self) -> str:
        return epic_key(self.epic_id)


class Team(BaseModel):
    model_config = ConfigDict(frozen=True)

    team_number: int
    players: tuple[PlayerRegistration, ...] = ()
    avg_mmr: int = 0


class Tournament(BaseModel):
    """Full tournament record as stored."""

    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    name: str
    max_players: int
    team_size: int
    region: str = ""
    is_public: bool = True
    balance_mode: BalanceMode = BalanceMode.balanced
    registrations: tuple[PlayerRegistration, ...] = ()
    teams: tuple[Team, ...] = ()
    status: TournamentStatus = TournamentStatus.open
    created_at: datetime
    teams_generated_at: Optional[datetime] = None
    creator_id: Optional[str] = None
    removed_players: tuple[PlayerRegistration, ...] = ()

    def find_registration(self, epic_id: str) -> Optional[PlayerRegistration]:
        key = epic_key(epic_id)
        return next((p for p in self.registrations if p.key == key), None)
