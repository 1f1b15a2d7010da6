"""Tests for trimming and team assignment."""
import random

import pytest

from conftest import make_player
from matchup.models import BalanceMode
from matchup.services.balancer import (
    average_mmr,
    balance_teams,
    generate_teams,
    random_teams,
    round_half_up,
    trim_pool,
)


def _pool(*mmrs):
    return [make_player(f"p{i}", mmr) for i, mmr in enumerate(mmrs)]


def _ids(players):
    return [p.epic_id for p in players]


@pytest.mark.parametrize("mode", [BalanceMode.balanced, BalanceMode.random])
@pytest.mark.parametrize("n,team_size", [(4, 2), (6, 3), (8, 4), (9, 3), (3, 1)])
def test_divisible_pool_gives_full_teams(mode, n, team_size):
    players = _pool(*range(1000, 1000 + 37 * n, 37))
    teams, removed = generate_teams(players, team_size, mode, random.Random(7))
    assert removed == []
    assert len(teams) == n // team_size
    assert all(len(t.players) == team_size for t in teams)
    assert [t.team_number for t in teams] == list(range(1, n // team_size + 1))
    placed = sorted(p.epic_id for t in teams for p in t.players)
    assert placed == sorted(_ids(players))


@pytest.mark.parametrize("mode", [BalanceMode.balanced, BalanceMode.random])
def test_trim_removes_remainder_only(mode):
    players = _pool(1200, 800, 1500, 900, 1000, 1100, 2000)
    pool, removed = trim_pool(players, 3, mode, random.Random(3))
    assert len(removed) == 7 % 3
    assert len(pool) == 6
    assert set(_ids(pool)).isdisjoint(_ids(removed))

    teams, removed = generate_teams(players, 3, mode, random.Random(3))
    in_teams = {p.epic_id for t in teams for p in t.players}
    assert len(removed) == 1
    assert removed[0].epic_id not in in_teams


def test_trim_noop_when_divisible():
    players = _pool(1, 2, 3, 4)
    pool, removed = trim_pool(players, 2, BalanceMode.balanced)
    assert pool == players
    assert removed == []


def test_balanced_trim_removes_biggest_outlier():
    players = _pool(1000, 1000, 1000, 10)
    pool, removed = trim_pool(players, 3, BalanceMode.balanced)
    assert _ids(removed) == ["p3"]
    assert all(p.mmr == 1000 for p in pool)


def test_balanced_trim_recomputes_mean_after_each_removal():
    # Mean 1280: 2000 goes first. New mean 1100: 1400 is now furthest, though against
    # the old mean the 1000s would have been.
    players = _pool(2000, 1400, 1000, 1000, 1000)
    pool, removed = trim_pool(players, 3, BalanceMode.balanced)
    assert _ids(removed) == ["p0", "p1"]
    assert _ids(pool) == ["p2", "p3", "p4"]


def test_balanced_trim_ties_go_to_first_player():
    players = _pool(500, 1500, 1000)
    _, removed = trim_pool(players, 2, BalanceMode.balanced)
    assert _ids(removed) == ["p0"]


def test_random_trim_uses_rng():
    players = _pool(1000, 1100, 1200, 1300, 1400)
    first = trim_pool(players, 2, BalanceMode.random, random.Random(42))[1]
    again = trim_pool(players, 2, BalanceMode.random, random.Random(42))[1]
    assert _ids(first) == _ids(again)


def test_random_trim_is_roughly_uniform():
    players = _pool(1000, 1100, 1200, 1300, 1400)
    rng = random.Random(0)
    counts = {p.epic_id: 0 for p in players}
    for _ in range(5000):
        _, removed = trim_pool(players, 2, BalanceMode.random, rng)
        counts[removed[0].epic_id] += 1
    assert all(800 < c < 1200 for c in counts.values())


def test_balance_teams_snake_draft():
    players = _pool(1800, 1600, 1400, 1200, 1000, 800)
    teams = balance_teams(players, 2)
    rosters = [sorted(p.mmr for p in t.players) for t in teams]
    # 1800->T1, 1600->T2, 1400->T3, 1200->T3 (lowest total), 1000->T2, 800->T1
    assert rosters == [[800, 1800], [1000, 1600], [1200, 1400]]
    assert [t.avg_mmr for t in teams] == [1300, 1300, 1300]


def test_balance_teams_is_deterministic():
    players = _pool(1500, 1320, 1180, 1050, 920, 850, 750, 680)
    first = balance_teams(players, 2)
    second = balance_teams(list(players), 2)
    assert [_ids(t.players) for t in first] == [_ids(t.players) for t in second]


def test_balance_teams_equal_mmr_keeps_input_order():
    players = _pool(1000, 1000, 1000, 1000)
    teams = balance_teams(players, 2)
    assert [_ids(t.players) for t in teams] == [["p0", "p2"], ["p1", "p3"]]


def test_pre_assigned_player_lands_on_team():
    a = make_player("a", 900, team=1)
    others = [make_player("b", 1500), make_player("c", 1200), make_player("d", 1000)]
    teams = balance_teams([a] + others, 2)
    assert "a" in _ids(teams[0].players)
    assert sorted(len(t.players) for t in teams) == [2, 2]
    # b goes to the empty team 2, c to team 1 (fewest players tie, lower total), d to team 2
    assert _ids(teams[0].players) == ["a", "c"]
    assert _ids(teams[1].players) == ["b", "d"]


def test_pre_assignment_can_overfill_a_team():
    players = [
        make_player("a", 1000, team=1),
        make_player("b", 1000, team=1),
        make_player("c", 1000, team=1),
        make_player("d", 1000),
    ]
    teams = balance_teams(players, 2)
    assert _ids(teams[0].players) == ["a", "b", "c"]
    assert _ids(teams[1].players) == ["d"]


def test_out_of_range_pre_assignment_drops_player():
    players = [
        make_player("a", 1000, team=5),
        make_player("b", 1100),
        make_player("c", 1200),
        make_player("d", 1300),
    ]
    teams = balance_teams(players, 2)
    placed = {p.epic_id for t in teams for p in t.players}
    assert placed == {"b", "c", "d"}


def test_empty_team_averages_zero():
    players = [make_player("a", 1000, team=1), make_player("b", 1200, team=1)]
    teams = balance_teams(players, 1)
    assert teams[1].players == ()
    assert teams[1].avg_mmr == 0


def test_random_teams_are_a_permutation():
    players = _pool(*range(100, 1300, 100))
    teams = random_teams(players, 3, random.Random(9))
    assert len(teams) == 4
    assert all(len(t.players) == 3 for t in teams)
    assert sorted(p.epic_id for t in teams for p in t.players) == sorted(_ids(players))
    for t in teams:
        assert t.avg_mmr == average_mmr(t.players)


def test_random_teams_drop_leftovers_silently():
    players = _pool(100, 200, 300, 400, 500)
    teams = random_teams(players, 2, random.Random(1))
    assert len(teams) == 2
    assert sum(len(t.players) for t in teams) == 4


def test_random_generation_five_players_pairs():
    players = _pool(1000, 1100, 1200, 1300, 1400)
    teams, removed = generate_teams(players, 2, BalanceMode.random, random.Random(11))
    assert len(teams) == 2
    assert all(len(t.players) == 2 for t in teams)
    assert len(removed) == 1


def test_team_size_larger_than_pool():
    players = _pool(1000, 1100)
    teams, removed = generate_teams(players, 3, BalanceMode.balanced)
    assert teams == []
    assert len(removed) == 2


def test_rounding_is_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(1.5) == 2
    assert round_half_up(1.49) == 1
    assert average_mmr(_pool(1000, 1001)) == 1001
    assert average_mmr([]) == 0
