"""API routes for tournament registration and team generation."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from matchup.models import BalanceMode
from matchup.services.ledger import TournamentLedger, public_summary
from web.api.deps import get_ledger
from web.api.utils import creator_view, public_view
from web.auth import get_creator_id

router = APIRouter(prefix="/api", tags=["tournaments"])


# --- Pydantic schemas ---


class TournamentCreate(BaseModel):
    name: str
    max_players: int
    team_size: int
    region: str = ""
    is_public: bool = True
    balance_mode: BalanceMode = BalanceMode.balanced


class RegistrationCreate(BaseModel):
    display_name: str
    epic_id: str
    mmr: Optional[int] = None  # Omit to look the rating up


class TeamAssignment(BaseModel):
    team_number: Optional[int] = None  # None clears the assignment


class MMRUpdate(BaseModel):
    mmr: int


class TeamUpdate(BaseModel):
    players: list[str]  # Epic IDs


class TeamsBulkUpdate(BaseModel):
    teams: list[TeamUpdate]


# --- Tournaments ---


@router.post("/tournament/create")
async def create_tournament(
    body: TournamentCreate,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    """Create a tournament. The X-Creator-Id header (if any) becomes its creator."""
    t = await ledger.create(
        name=body.name,
        max_players=body.max_players,
        team_size=body.team_size,
        region=body.region,
        is_public=body.is_public,
        balance_mode=body.balance_mode,
        creator_id=creator_id,
    )
    return {"success": True, "id": t.id, "code": t.code}


@router.get("/tournaments/public")
async def list_public_tournaments(ledger: TournamentLedger = Depends(get_ledger)):
    """Public tournaments still taking registrations."""
    return [public_summary(t) for t in await ledger.list_public_open()]


@router.get("/tournament/code/{code}")
async def resolve_code(code: str, ledger: TournamentLedger = Depends(get_ledger)):
    return {"success": True, "id": await ledger.resolve_code(code)}


@router.get("/tournament/{tournament_id}")
async def get_tournament(
    tournament_id: str,
    is_creator: bool = False,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    """Creator view (with ratings) for the creator; everyone else gets the redacted view.
    Tournaments created without a creator id honor ?is_creator=true."""
    t = await ledger.get(tournament_id)
    if ledger.is_creator(t, creator_id) or (is_creator and not t.creator_id):
        return creator_view(t)
    return public_view(t)


@router.delete("/tournament/{tournament_id}")
async def delete_tournament(
    tournament_id: str,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    await ledger.delete(tournament_id, creator_id)
    return {"success": True}


# --- Registrations ---


@router.post("/tournament/{tournament_id}/register")
async def register_player(
    tournament_id: str,
    body: RegistrationCreate,
    ledger: TournamentLedger = Depends(get_ledger),
):
    player = await ledger.register(tournament_id, body.display_name, body.epic_id, body.mmr)
    return {"success": True, "mmr": player.mmr}


@router.delete("/tournament/{tournament_id}/player/{epic_id}")
async def remove_player(
    tournament_id: str,
    epic_id: str,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    """Remove a registered player (creator only, while open)."""
    player = await ledger.remove_player(tournament_id, epic_id, creator_id)
    return {"success": True, "player": player.model_dump(mode="json")}


@router.post("/tournament/{tournament_id}/player/{epic_id}/assign")
async def assign_player(
    tournament_id: str,
    epic_id: str,
    body: TeamAssignment,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    """Pin a player to a team before generation, or clear the pin (creator only, while open)."""
    player = await ledger.assign_player(tournament_id, epic_id, body.team_number, creator_id)
    return {"success": True, "player": player.model_dump(mode="json")}


@router.post("/tournament/{tournament_id}/player/{epic_id}/mmr")
async def edit_player_mmr(
    tournament_id: str,
    epic_id: str,
    body: MMRUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    """Correct a player's rating (creator only, while open)."""
    player = await ledger.edit_mmr(tournament_id, epic_id, body.mmr, creator_id)
    return {"success": True, "player": player.model_dump(mode="json")}


# --- Teams ---


@router.post("/tournament/{tournament_id}/generate")
async def generate_teams(
    tournament_id: str,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    """Trim the pool and build teams. Can be called again to re-roll."""
    t = await ledger.generate(tournament_id, creator_id)
    data = creator_view(t)
    return {"success": True, "teams": data["teams"], "removed_players": data["removed_players"]}


@router.post("/tournament/{tournament_id}/update-teams")
async def update_teams(
    tournament_id: str,
    body: TeamsBulkUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
    creator_id: Optional[str] = Depends(get_creator_id),
):
    """Replace teams with the given rosters (Epic IDs). Team averages are recomputed."""
    t = await ledger.update_teams(tournament_id, [team.players for team in body.teams], creator_id)
    return {"success": True, "teams": creator_view(t)["teams"]}
