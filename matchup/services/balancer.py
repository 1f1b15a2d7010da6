"""Team balancing: trim the pool to a multiple of the team size, then split it into teams."""
from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence, Tuple

from matchup.models import BalanceMode, PlayerRegistration, Team


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (0.5 -> 1, 2.5 -> 3)."""
    return math.floor(value + 0.5)


def average_mmr(players: Sequence[PlayerRegistration]) -> int:
    """Rounded mean MMR. An empty team averages 0."""
    if not players:
        return 0
    return round_half_up(sum(p.mmr for p in players) / len(players))


def build_team(team_number: int, players: Sequence[PlayerRegistration]) -> Team:
    return Team(team_number=team_number, players=tuple(players), avg_mmr=average_mmr(players))


def _outlier_index(pool: Sequence[PlayerRegistration]) -> int:
    """Index of the player furthest from the pool's mean MMR. First one wins ties."""
    mean = sum(p.mmr for p in pool) / len(pool)
    best = 0
    for idx, p in enumerate(pool):
        if abs(p.mmr - mean) > abs(pool[best].mmr - mean):
            best = idx
    return best


def trim_pool(
    players: Sequence[PlayerRegistration],
    team_size: int,
    mode: BalanceMode,
    rng: Optional[random.Random] = None,
) -> Tuple[List[PlayerRegistration], List[PlayerRegistration]]:
    """Remove ``len(players) % team_size`` players so the rest divides evenly.

    Balanced mode drops the biggest MMR outlier each round (mean recomputed after
    every removal); random mode drops a uniformly random player each round.
    Returns (pool, removed) with removed in removal order.
    """
    pool = list(players)
    removed: List[PlayerRegistration] = []
    remainder = len(pool) % team_size
    if remainder == 0:
        return pool, removed
    rng = rng or random.Random()
    for _ in range(remainder):
        if mode == BalanceMode.balanced:
            idx = _outlier_index(pool)
        else:
            idx = rng.randrange(len(pool))
        removed.append(pool.pop(idx))
    return pool, removed


def balance_teams(players: Sequence[PlayerRegistration], team_size: int) -> List[Team]:
    """Split players into teams of near-equal total MMR, honoring pre-assignments.

    Pre-assigned players go straight to their team. A pre-assignment pointing past
    the last team drops that player from every team. The rest are placed highest
    MMR first, each onto the team with the fewest players, then the lowest total
    MMR, then the lowest team number.
    """
    num_teams = len(players) // team_size
    rosters: List[List[PlayerRegistration]] = [[] for _ in range(num_teams)]

    assigned = [p for p in players if p.pre_assigned_team]
    unassigned = [p for p in players if not p.pre_assigned_team]

    for player in assigned:
        idx = player.pre_assigned_team - 1
        if 0 <= idx < num_teams:
            rosters[idx].append(player)

    if rosters:
        for player in sorted(unassigned, key=lambda p: p.mmr, reverse=True):
            target = min(rosters, key=lambda r: (len(r), sum(p.mmr for p in r)))
            target.append(player)

    return [build_team(i + 1, roster) for i, roster in enumerate(rosters)]


def random_teams(
    players: Sequence[PlayerRegistration],
    team_size: int,
    rng: Optional[random.Random] = None,
) -> List[Team]:
    """Shuffle and cut into consecutive teams of exactly ``team_size``. Leftovers are dropped."""
    rng = rng or random.Random()
    shuffled = list(players)
    rng.shuffle(shuffled)
    num_teams = len(shuffled) // team_size
    return [
        build_team(i + 1, shuffled[i * team_size : (i + 1) * team_size])
        for i in range(num_teams)
    ]


def generate_teams(
    players: Sequence[PlayerRegistration],
    team_size: int,
    mode: BalanceMode,
    rng: Optional[random.Random] = None,
) -> Tuple[List[Team], List[PlayerRegistration]]:
    """Trim, then build teams per balance mode. Returns (teams, removed_players)."""
    rng = rng or random.Random()
    pool, removed = trim_pool(players, team_size, mode, rng)
    if mode == BalanceMode.balanced:
        teams = balance_teams(pool, team_size)
    else:
        teams = random_teams(pool, team_size, rng)
    return teams, removed
