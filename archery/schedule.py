"""Round-robin group schedules.

Every team meets every other team once. Pairings are expressed as 1-based
positions in the order teams were selected at setup, grouped into rounds
with the circle method so no team shoots twice in a round:

- 7 teams: 7 rounds, 21 matches (one team rests each round)
- 8 teams: 7 rounds, 28 matches
- 9 teams: 9 rounds, 36 matches (one team rests each round)
- 10 teams: 9 rounds, 45 matches
"""

from .constants import MAX_TEAMS, MIN_TEAMS
from .schemas import Match, Team


def round_robin_rounds(num_teams: int) -> list[list[tuple[int, int]]]:
    """Circle-method rounds for ``num_teams`` positions.

    Position 1 stays fixed while the others rotate. With an odd team count a
    rest slot is added and its pairing skipped.

    Args:
        num_teams: Number of teams (at least 2)

    Returns:
        List of rounds, each a list of (position_a, position_b) tuples
    """
    if num_teams < 2:
        raise ValueError(f'A round robin needs at least 2 teams, got {num_teams}')

    positions: list[int | None] = list(range(1, num_teams + 1))
    if num_teams % 2:
        positions.append(None)

    size = len(positions)
    rounds = []
    for round_num in range(size - 1):
        pairs = []
        for i in range(size // 2):
            a = positions[i]
            b = positions[size - 1 - i]
            if a is None or b is None:
                continue
            # Alternate the fixed team's side from round to round
            if i == 0 and round_num % 2 == 1:
                a, b = b, a
            pairs.append((a, b))
        rounds.append(pairs)
        positions = [positions[0], positions[-1], *positions[1:-1]]

    return rounds


def round_robin_pairs(num_teams: int) -> list[tuple[int, int]]:
    """Flattened round-robin pairings in play order."""
    return [pair for round_pairs in round_robin_rounds(num_teams) for pair in round_pairs]


GROUP_SCHEDULES: dict[int, list[tuple[int, int]]] = {
    n: round_robin_pairs(n) for n in range(MIN_TEAMS, MAX_TEAMS + 1)
}


def expected_match_count(num_teams: int) -> int:
    """Group matches for a full round robin: n * (n - 1) / 2."""
    return num_teams * (num_teams - 1) // 2


def generate_group_matches(teams: list[Team]) -> list[Match]:
    """Build the fixed list of group matches for the selected teams.

    Args:
        teams: Tournament teams in seeding order (7 to 10)

    Returns:
        Group matches with ids 1..N and empty sets

    Raises:
        ValueError: If there is no schedule for this number of teams
    """
    schedule = GROUP_SCHEDULES.get(len(teams))
    if schedule is None:
        raise ValueError(
            f'No group schedule for {len(teams)} teams (supported: {MIN_TEAMS}-{MAX_TEAMS})'
        )

    matches = []
    for index, (pos_a, pos_b) in enumerate(schedule, 1):
        matches.append(
            Match(
                id=index,
                team_a_id=teams[pos_a - 1].id,
                team_b_id=teams[pos_b - 1].id,
                stage='group',
                label=f'Match {index}',
            )
        )
    return matches
