"""Validation functions for tournament setup, teams and match consistency."""

from .constants import MATCH_WIN_SET_POINTS, MAX_TEAMS, MIN_TEAMS
from .match import recompute_totals
from .schemas import Match, Team, TournamentState
from .scoring import count_x10s, resolve_set_points, set_total


def validate_tournament_setup(name: str, teams: list[Team]) -> list[str]:
    """
    Validate a new tournament before its group matches are generated.

    Checks:
    - Tournament name is not empty
    - Between 7 and 10 teams selected
    - No team selected twice

    Args:
        name: Tournament name
        teams: Selected teams in seeding order

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not name or not name.strip():
        errors.append('Tournament name is required')

    if len(teams) < MIN_TEAMS or len(teams) > MAX_TEAMS:
        errors.append(
            f'Please select between {MIN_TEAMS} and {MAX_TEAMS} teams for the tournament '
            f'({len(teams)} selected)'
        )

    seen = set()
    duplicates = set()
    for team in teams:
        if team.id in seen:
            duplicates.add(team.id)
        seen.add(team.id)

    if duplicates:
        errors.append(f'Teams selected more than once: {", ".join(str(i) for i in sorted(duplicates))}')

    return errors


def find_duplicate_members(teams: list[Team]) -> list[str]:
    """
    Find archers registered on more than one team.

    Member names are compared case-insensitively after trimming.

    Returns:
        List of warnings like ``"ana lopez (in: Team A, Team B)"``
    """
    member_teams: dict[str, list[str]] = {}
    for team in teams:
        for member in team.members:
            normalized = member.lower().strip()
            if not normalized:
                continue
            member_teams.setdefault(normalized, []).append(team.name)

    return [
        f'{member} (in: {", ".join(team_names)})'
        for member, team_names in member_teams.items()
        if len(team_names) > 1
    ]


def validate_match(match: Match) -> list[str]:
    """
    Check that a match is internally consistent.

    Sanity checks:
    - Each set's totals, X10 counts and points match its arrows
    - Set points add up to 2 in every set
    - Cumulative totals equal the fold of the sets
    - A completed match has a side with five or more set points

    Returns:
        List of error messages (empty if consistent)
    """
    errors = []

    for index, s in enumerate(match.sets, 1):
        if s.team_a_set_total != set_total(s.team_a_arrows) or s.team_b_set_total != set_total(s.team_b_arrows):
            errors.append(f'Match {match.id} set {index}: totals do not match arrows')
        if s.team_a_x10s != count_x10s(s.team_a_arrows) or s.team_b_x10s != count_x10s(s.team_b_arrows):
            errors.append(f'Match {match.id} set {index}: X+10 counts do not match arrows')
        expected = resolve_set_points(s.team_a_set_total, s.team_b_set_total)
        if (s.team_a_set_points, s.team_b_set_points) != expected:
            errors.append(
                f'Match {match.id} set {index}: set points '
                f'{s.team_a_set_points}-{s.team_b_set_points} should be {expected[0]}-{expected[1]}'
            )

    recomputed = recompute_totals(match)
    fields = (
        'team_a_set_points_total',
        'team_b_set_points_total',
        'team_a_arrow_score_total',
        'team_b_arrow_score_total',
        'team_a_x10s_total',
        'team_b_x10s_total',
    )
    stale = [f for f in fields if getattr(match, f) != getattr(recomputed, f)]
    if stale:
        errors.append(f'Match {match.id}: stale totals ({", ".join(stale)})')

    if match.completed and max(recomputed.team_a_set_points_total, recomputed.team_b_set_points_total) < MATCH_WIN_SET_POINTS:
        errors.append(f'Match {match.id} is marked completed without a side reaching {MATCH_WIN_SET_POINTS} set points')

    if match.winner_id is not None and match.winner_id not in (match.team_a_id, match.team_b_id):
        errors.append(f'Match {match.id}: winner {match.winner_id} is not one of its teams')

    return errors


def validate_state(state: TournamentState) -> list[str]:
    """
    Validate a whole tournament document.

    Returns:
        List of error messages (empty if consistent)
    """
    errors = []
    team_ids = {t.id for t in state.teams}

    for match in [*state.group_matches, *state.playoff_matches]:
        for team_id in (match.team_a_id, match.team_b_id):
            if team_id not in team_ids:
                errors.append(f'Match {match.id} references unknown team {team_id}')
        errors.extend(validate_match(match))

    return errors
