"""Registration ledger: tournament lifecycle and validation.

Mutations are pure functions taking a Tournament snapshot and returning a new
one. ``TournamentLedger`` wraps each in a single fetch -> compute -> store
cycle. There is no cross-request locking; concurrent writers to the same
tournament can lose updates.
"""
from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import Callable, Optional, Sequence

import config
from matchup.errors import Conflict, InvalidInput, NotCreator, NotFound, StateConflict
from matchup.models import BalanceMode, PlayerRegistration, Tournament, TournamentStatus
from matchup.models.tournament import epic_key, name_key, utcnow
from matchup.services.balancer import build_team, generate_teams
from matchup.services.rating import RatingService
from matchup.services.storage import TournamentStore

logger = logging.getLogger("rlmatchup.ledger")

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"  # no I, O, 0, 1
CODE_LENGTH = 6


def generate_code(rng: random.Random) -> str:
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def validate_mmr(mmr) -> int:
    if isinstance(mmr, bool) or not isinstance(mmr, int):
        raise InvalidInput("MMR must be a whole number")
    if not config.MIN_MMR <= mmr <= config.MAX_MMR:
        raise InvalidInput(f"MMR must be between {config.MIN_MMR} and {config.MAX_MMR}")
    return mmr


def _require_open(t: Tournament, message: str = "Registrations are closed") -> None:
    if t.status != TournamentStatus.open:
        raise StateConflict(message)


def _require_player(t: Tournament, epic_id: str) -> PlayerRegistration:
    player = t.find_registration(epic_id)
    if not player:
        raise NotFound("Player not found")
    return player


def _replace_player(t: Tournament, player: PlayerRegistration) -> Tournament:
    regs = tuple(player if p.key == player.key else p for p in t.registrations)
    return t.model_copy(update={"registrations": regs})


# --- Snapshot mutations ---


def check_can_register(t: Tournament, epic_id: str) -> None:
    """Raise unless ``epic_id`` could join ``t`` right now."""
    _require_open(t)
    if len(t.registrations) >= t.max_players:
        raise Conflict("Tournament is full")
    if t.find_registration(epic_id):
        raise Conflict("Already registered for this tournament")


def add_registration(t: Tournament, player: PlayerRegistration) -> Tournament:
    check_can_register(t, player.epic_id)
    validate_mmr(player.mmr)
    return t.model_copy(update={"registrations": t.registrations + (player,)})


def remove_registration(t: Tournament, epic_id: str) -> tuple[Tournament, PlayerRegistration]:
    _require_open(t)
    player = _require_player(t, epic_id)
    regs = tuple(p for p in t.registrations if p.key != player.key)
    return t.model_copy(update={"registrations": regs}), player


def set_pre_assignment(t: Tournament, epic_id: str, team_number: Optional[int]) -> Tournament:
    """Pin a player to a 1-based team number, or clear the pin with None."""
    _require_open(t)
    player = _require_player(t, epic_id)
    if team_number is not None and (isinstance(team_number, bool) or not isinstance(team_number, int) or team_number < 1):
        raise InvalidInput("Team number must be a positive whole number")
    return _replace_player(t, player.model_copy(update={"pre_assigned_team": team_number}))


def set_mmr(t: Tournament, epic_id: str, mmr: int) -> Tournament:
    _require_open(t, "Ratings can no longer be edited")
    player = _require_player(t, epic_id)
    validate_mmr(mmr)
    return _replace_player(t, player.model_copy(update={"mmr": mmr}))


def with_generated_teams(
    t: Tournament, rng: Optional[random.Random] = None, now: Optional[datetime] = None
) -> Tournament:
    """Run trimming + team assignment. Allowed again after generation (re-roll)."""
    teams, removed = generate_teams(t.registrations, t.team_size, t.balance_mode, rng)
    return t.model_copy(
        update={
            "teams": tuple(teams),
            "removed_players": tuple(removed),
            "status": TournamentStatus.generated,
            "teams_generated_at": t.teams_generated_at or now or utcnow(),
        }
    )


def with_teams(t: Tournament, rosters: Sequence[Sequence[str]], now: Optional[datetime] = None) -> Tournament:
    """Overwrite teams from lists of Epic handles. Averages are recomputed.

    Handles resolve against registrations and removed players, so an excluded
    player can be brought back into a team.
    """
    known = {p.key: p for p in t.removed_players}
    known.update({p.key: p for p in t.registrations})
    teams = []
    seen: set[str] = set()
    for number, roster in enumerate(rosters, start=1):
        players = []
        for epic_id in roster:
            key = epic_key(epic_id)
            if key not in known:
                raise NotFound(f"Player not found: {epic_id}")
            if key in seen:
                raise InvalidInput(f"Player is on more than one team: {epic_id}")
            seen.add(key)
            players.append(known[key])
        teams.append(build_team(number, players))
    return t.model_copy(
        update={
            "teams": tuple(teams),
            "status": TournamentStatus.generated,
            "teams_generated_at": t.teams_generated_at or now or utcnow(),
        }
    )


def public_summary(t: Tournament) -> dict:
    return {
        "id": t.id,
        "code": t.code,
        "name": t.name,
        "max_players": t.max_players,
        "team_size": t.team_size,
        "current_players": len(t.registrations),
        "region": t.region,
        "balance_mode": t.balance_mode.value,
    }


# --- Ledger service ---


class TournamentLedger:
    """Tournament operations against a store. One instance per request is fine."""

    def __init__(
        self,
        store: TournamentStore,
        rating_service: Optional[RatingService] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.rating_service = rating_service
        self.rng = rng or random.Random()
        self.clock = clock

    async def get(self, tournament_id: str) -> Tournament:
        t = await self.store.get(tournament_id)
        if not t or t.status == TournamentStatus.deleted:
            raise NotFound("Tournament not found")
        return t

    async def _mutate(
        self,
        tournament_id: str,
        change: Callable[[Tournament], Tournament],
        creator_id: Optional[str] = None,
    ) -> Tournament:
        """Fetch, check the caller is the creator, apply ``change``, store."""
        t = await self.get(tournament_id)
        self.check_creator(t, creator_id)
        updated = change(t)
        await self.store.put(updated)
        return updated

    @staticmethod
    def check_creator(t: Tournament, creator_id: Optional[str]) -> None:
        """Tournaments without a recorded creator can be managed by anyone."""
        if t.creator_id and t.creator_id != creator_id:
            raise NotCreator("Only the tournament creator can do this")

    @staticmethod
    def is_creator(t: Tournament, creator_id: Optional[str]) -> bool:
        return bool(t.creator_id) and t.creator_id == creator_id

    async def create(
        self,
        *,
        name: str,
        max_players: int,
        team_size: int,
        region: str = "",
        is_public: bool = True,
        balance_mode: BalanceMode = BalanceMode.balanced,
        creator_id: Optional[str] = None,
    ) -> Tournament:
        name = " ".join(name.split())
        if not name:
            raise InvalidInput("Tournament name is required")
        if max_players < 1:
            raise InvalidInput("max_players must be at least 1")
        if team_size < 1:
            raise InvalidInput("team_size must be at least 1")

        existing = [t for t in await self.store.list_all() if t.status != TournamentStatus.deleted]
        if any(name_key(t.name) == name_key(name) for t in existing):
            raise Conflict("A tournament with this name already exists")
        if creator_id:
            active = sum(1 for t in existing if t.creator_id == creator_id)
            if active >= config.MAX_ACTIVE_TOURNAMENTS_PER_CREATOR:
                raise Conflict(
                    f"You can have at most {config.MAX_ACTIVE_TOURNAMENTS_PER_CREATOR} active tournaments"
                )

        code = generate_code(self.rng)
        while await self.store.find_by_code(code):
            code = generate_code(self.rng)

        t = Tournament(
            id=uuid.uuid4().hex,
            code=code,
            name=name,
            max_players=max_players,
            team_size=team_size,
            region=region,
            is_public=is_public,
            balance_mode=balance_mode,
            created_at=self.clock(),
            creator_id=creator_id or None,
        )
        await self.store.put(t)
        logger.info("Created tournament %s (%s) code=%s", t.name, t.id, t.code)
        return t

    async def list_public_open(self) -> list[Tournament]:
        tournaments = await self.store.list_all()
        return [t for t in tournaments if t.is_public and t.status == TournamentStatus.open]

    async def resolve_code(self, code: str) -> str:
        t = await self.store.find_by_code(code)
        if not t or t.status == TournamentStatus.deleted:
            raise NotFound("Invalid code")
        return t.id

    async def register(
        self,
        tournament_id: str,
        display_name: str,
        epic_id: str,
        mmr: Optional[int] = None,
    ) -> PlayerRegistration:
        """Register a player. Without ``mmr`` the rating service supplies it."""
        display_name = display_name.strip()
        epic_id = epic_id.strip()
        if not display_name or not epic_id:
            raise InvalidInput("display_name and epic_id are required")

        t = await self.get(tournament_id)
        check_can_register(t, epic_id)
        if mmr is None:
            mmr = await self._verified_mmr(epic_id)
        player = PlayerRegistration(
            display_name=display_name,
            epic_id=epic_id,
            mmr=validate_mmr(mmr),
            timestamp=self.clock(),
        )
        await self.store.put(add_registration(t, player))
        logger.info("Registered %s in tournament %s (mmr=%d)", epic_id, tournament_id, player.mmr)
        return player

    async def _verified_mmr(self, epic_id: str) -> int:
        if self.rating_service is None:
            raise InvalidInput("MMR is required")
        result = await self.rating_service.verify(epic_id)
        if not result.exists:
            raise NotFound("Epic account not found")
        return result.rating

    async def remove_player(
        self, tournament_id: str, epic_id: str, creator_id: Optional[str] = None
    ) -> PlayerRegistration:
        t = await self.get(tournament_id)
        self.check_creator(t, creator_id)
        updated, player = remove_registration(t, epic_id)
        await self.store.put(updated)
        return player

    async def assign_player(
        self,
        tournament_id: str,
        epic_id: str,
        team_number: Optional[int],
        creator_id: Optional[str] = None,
    ) -> PlayerRegistration:
        t = await self._mutate(
            tournament_id,
            lambda t: set_pre_assignment(t, epic_id, team_number),
            creator_id,
        )
        return t.find_registration(epic_id)

    async def edit_mmr(
        self, tournament_id: str, epic_id: str, mmr: int, creator_id: Optional[str] = None
    ) -> PlayerRegistration:
        t = await self._mutate(
            tournament_id,
            lambda t: set_mmr(t, epic_id, mmr),
            creator_id,
        )
        return t.find_registration(epic_id)

    async def generate(self, tournament_id: str, creator_id: Optional[str] = None) -> Tournament:
        t = await self._mutate(
            tournament_id,
            lambda t: with_generated_teams(t, self.rng, self.clock()),
            creator_id,
        )
        logger.info(
            "Generated %d team(s) for tournament %s, %d player(s) left out",
            len(t.teams),
            tournament_id,
            len(t.removed_players),
        )
        return t

    async def update_teams(
        self,
        tournament_id: str,
        rosters: Sequence[Sequence[str]],
        creator_id: Optional[str] = None,
    ) -> Tournament:
        return await self._mutate(
            tournament_id,
            lambda t: with_teams(t, rosters, self.clock()),
            creator_id,
        )

    async def delete(self, tournament_id: str, creator_id: Optional[str] = None) -> Tournament:
        t = await self._mutate(
            tournament_id,
            lambda t: t.model_copy(update={"status": TournamentStatus.deleted}),
            creator_id,
        )
        logger.info("Deleted tournament %s", tournament_id)
        return t
