"""Tournament models and database records."""
from matchup.models.base import Base, init_db
from matchup.models.record import TournamentRecord
from matchup.models.tournament import (
    BalanceMode,
    PlayerRegistration,
    Team,
    Tournament,
    TournamentStatus,
)

__all__ = [
    "Base",
    "BalanceMode",
    "PlayerRegistration",
    "Team",
    "Tournament",
    "TournamentRecord",
    "TournamentStatus",
    "init_db",
]
