"""Shared fixtures for tournament tests."""

import pytest

from archery.schemas import Match, Team
from archery.scoring import build_set
from archery.tournament import AddSet, GenerateFinals, SetupTournament, reduce

# 100-90 to team A: set points 2-0, X+10s 10-0
A_WIN = build_set([10] * 10, [9] * 10)
# 90-100 to team B: set points 0-2
B_WIN = build_set([9] * 10, [10] * 10)
# 90-90: set points 1-1
TIE = build_set([9] * 10, [9] * 10)


@pytest.fixture
def teams():
    """Seven registered teams, ids 1-7."""
    return [
        Team(id=i, name=f'Team {i}', color=None, members=[f'Archer {i}a', f'Archer {i}b'])
        for i in range(1, 8)
    ]


@pytest.fixture
def match():
    """Fresh group match between teams 1 and 2."""
    return Match(id=1, team_a_id=1, team_b_id=2, label='Match 1')


@pytest.fixture
def group_state(teams):
    """Tournament in the group stage, nothing scored."""
    return reduce(
        None,
        SetupTournament(name='Club Cup', teams=tuple(teams), date='2026-05-01', tournament_id='t1'),
        admin=True,
    )


@pytest.fixture
def play_match():
    """Return a function that wins a match 6-0 for one side in three sets."""

    def _play(state, match_id, winner='A'):
        set_score = A_WIN if winner == 'A' else B_WIN
        for _ in range(3):
            state = reduce(state, AddSet(match_id=match_id, set_score=set_score))
        return state

    return _play


@pytest.fixture
def finished_group_state(group_state, play_match):
    """All group matches completed; the lower team id always wins.

    Final ranking is therefore team 1, 2, 3, ... 7.
    """
    state = group_state
    for m in group_state.group_matches:
        winner = 'A' if m.team_a_id < m.team_b_id else 'B'
        state = play_match(state, m.id, winner)
    return state


@pytest.fixture
def playoff_state(finished_group_state):
    """Semifinals generated: 101 is team 1 vs 4, 102 is team 2 vs 3."""
    return reduce(finished_group_state, GenerateFinals(), admin=True)
