"""Registered team management.

Registered teams live under their own store key and outlive tournaments.
Tournament teams are copies that keep the registered id, so edits made
here are propagated into an active tournament by id.
"""

import logging
from typing import Optional

from .constants import TEAM_COLORS
from .exceptions import TournamentValidationError
from .schemas import Team, TournamentState

logger = logging.getLogger('archery.teams')


def _clean_members(members: Optional[list[str]]) -> list[str]:
    return [m.strip() for m in (members or []) if m and m.strip()]


def next_team_id(teams: list[Team]) -> int:
    """One more than the highest registered id (1 when empty)."""
    return max((t.id for t in teams), default=0) + 1


def add_team(teams: list[Team], name: str, members: Optional[list[str]] = None) -> list[Team]:
    """
    Register a new team.

    The color is taken from the palette by registration order.

    Raises:
        TournamentValidationError: If the name is empty
    """
    if not name or not name.strip():
        raise TournamentValidationError('Team name is required')

    team = Team(
        id=next_team_id(teams),
        name=name.strip(),
        color=TEAM_COLORS[len(teams) % len(TEAM_COLORS)],
        members=_clean_members(members),
    )
    logger.info(f'Registered team {team.id}: {team.name}')
    return [*teams, team]


def update_team(
    teams: list[Team],
    team_id: int,
    name: Optional[str] = None,
    members: Optional[list[str]] = None,
    color: Optional[str] = None,
) -> list[Team]:
    """
    Change the name, members or color of a registered team.

    Raises:
        TournamentValidationError: If the team does not exist or the new name is empty
    """
    if name is not None and not name.strip():
        raise TournamentValidationError('Team name is required')

    updated = []
    found = False
    for team in teams:
        if team.id == team_id:
            found = True
            changes = {}
            if name is not None:
                changes['name'] = name.strip()
            if members is not None:
                changes['members'] = _clean_members(members)
            if color is not None:
                changes['color'] = color
            team = team.model_copy(update=changes)
        updated.append(team)

    if not found:
        raise TournamentValidationError(f'Team {team_id} is not registered')
    return updated


def remove_team(teams: list[Team], team_id: int) -> list[Team]:
    """
    Remove a registered team.

    Raises:
        TournamentValidationError: If the team does not exist
    """
    remaining = [t for t in teams if t.id != team_id]
    if len(remaining) == len(teams):
        raise TournamentValidationError(f'Team {team_id} is not registered')
    return remaining


def propagate_team_updates(state: TournamentState | None, teams: list[Team]) -> TournamentState | None:
    """
    Copy name, color and members of registered teams into the tournament.

    Tournament teams are matched by id; teams without a registered
    counterpart are left as they are.
    """
    if state is None:
        return None

    by_id = {t.id: t for t in teams}
    tournament_teams = []
    for team in state.teams:
        registered = by_id.get(team.id)
        if registered:
            team = team.model_copy(
                update={
                    'name': registered.name,
                    'color': registered.color,
                    'members': list(registered.members),
                }
            )
        tournament_teams.append(team)

    return state.model_copy(update={'teams': tournament_teams})


def team_name(state: TournamentState | None, team_id: Optional[int], default: str = 'N/A') -> str:
    """Display name of a tournament team."""
    if state is None or team_id is None:
        return default
    for team in state.teams:
        if team.id == team_id:
            return team.name
    return default
