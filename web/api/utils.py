"""Shared API utilities: what each audience gets to see of a tournament."""

from matchup.models import PlayerRegistration, Tournament


def _player_name_only(player: PlayerRegistration) -> dict:
    return {"display_name": player.display_name, "epic_id": player.epic_id}


def creator_view(t: Tournament) -> dict:
    """Everything, ratings included."""
    return t.model_dump(mode="json")


def public_view(t: Tournament) -> dict:
    """Tournament with ratings hidden. Team averages stay visible."""
    data = t.model_dump(mode="json", exclude={"registrations", "teams", "removed_players", "creator_id"})
    data["registrations"] = [
        p.model_dump(mode="json", include={"display_name", "epic_id", "timestamp"}) for p in t.registrations
    ]
    data["teams"] = [
        {
            "team_number": team.team_number,
            "players": [_player_name_only(p) for p in team.players],
            "avg_mmr": team.avg_mmr,
        }
        for team in t.teams
    ]
    data["removed_players"] = [_player_name_only(p) for p in t.removed_players]
    return data
