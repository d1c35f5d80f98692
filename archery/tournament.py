"""Tournament reducer.

``reduce(state, action)`` is the only code path that produces a new
tournament state. Each action either returns a fully updated state (match
totals settled, playoff progression applied) or raises with the input state
untouched.
"""

import logging
import time
from dataclasses import dataclass
from datetime import date as date_cls
from typing import Optional, Union

from .bracket import advance_stage, generate_finals
from .exceptions import MatchNotFoundError, PermissionDeniedError, TournamentValidationError
from .match import add_set, continue_match, delete_last_set, edit_set, record_shoot_off, settle
from .schedule import generate_group_matches
from .schemas import Match, SetScore, Team, TournamentState
from .scoring import rescore_set
from .teams import propagate_team_updates
from .validators import validate_tournament_setup

logger = logging.getLogger('archery.tournament')


@dataclass(frozen=True)
class SetupTournament:
    """Create a tournament from the selected teams (in seeding order)."""
    name: str
    teams: tuple[Team, ...]
    date: Optional[str] = None
    tournament_id: Optional[str] = None


@dataclass(frozen=True)
class AddSet:
    match_id: int
    set_score: SetScore


@dataclass(frozen=True)
class EditSet:
    match_id: int
    set_index: int
    set_score: SetScore


@dataclass(frozen=True)
class DeleteLastSet:
    match_id: int


@dataclass(frozen=True)
class RecordShootOff:
    match_id: int
    winner_id: int
    team_a_arrow_score: Optional[str] = None
    team_b_arrow_score: Optional[str] = None


@dataclass(frozen=True)
class ContinueMatch:
    match_id: int


@dataclass(frozen=True)
class GenerateFinals:
    """Close the group stage and create the semifinals."""


@dataclass(frozen=True)
class UpdateTeams:
    """Propagate edited registered teams into the tournament."""
    teams: tuple[Team, ...]


@dataclass(frozen=True)
class ResetTournament:
    """Clear all tournament state."""


Action = Union[
    SetupTournament,
    AddSet,
    EditSet,
    DeleteLastSet,
    RecordShootOff,
    ContinueMatch,
    GenerateFinals,
    UpdateTeams,
    ResetTournament,
]

ADMIN_ACTIONS = (
    SetupTournament,
    EditSet,
    DeleteLastSet,
    ContinueMatch,
    GenerateFinals,
    UpdateTeams,
    ResetTournament,
)


def all_matches(state: TournamentState) -> list[Match]:
    """Group matches followed by playoff matches."""
    return [*state.group_matches, *state.playoff_matches]


def find_match(state: TournamentState | None, match_id: int) -> Match:
    """
    Look up a match by id across group and playoff matches.

    Raises:
        MatchNotFoundError: If no match has this id
    """
    if state is not None:
        for match in all_matches(state):
            if match.id == match_id:
                return match
    raise MatchNotFoundError(f'Match {match_id} not found')


def settle_state(state: TournamentState | None) -> TournamentState | None:
    """
    Rebuild every derived field of a stored tournament from its arrows.

    Each set is rescored from its arrows and each match is settled before
    playoff progression runs. Stored totals and winners are never trusted.
    Running it on a state produced by ``reduce`` changes nothing.
    """
    if state is None:
        return None

    def _resettle(match: Match) -> Match:
        return settle(match.model_copy(update={'sets': [rescore_set(s) for s in match.sets]}))

    settled = state.model_copy(
        update={
            'group_matches': [_resettle(m) for m in state.group_matches],
            'playoff_matches': [_resettle(m) for m in state.playoff_matches],
        }
    )
    return advance_stage(settled)


def _replace_match(state: TournamentState, updated: Match) -> TournamentState:
    if updated.stage == 'group':
        key = 'group_matches'
        matches = state.group_matches
    else:
        key = 'playoff_matches'
        matches = state.playoff_matches
    return state.model_copy(
        update={key: [updated if m.id == updated.id else m for m in matches]}
    )


def _require_state(state: TournamentState | None) -> TournamentState:
    if state is None:
        raise TournamentValidationError('No tournament has been set up')
    return state


def _require_scoring_open(state: TournamentState, match: Match) -> None:
    """Group matches are scored during the group stage, playoff matches during the playoffs."""
    required = 'group' if match.stage == 'group' else 'playoffs'
    if state.stage != required:
        raise TournamentValidationError(
            f'Match {match.id} ({match.stage}) can only be scored while the tournament '
            f'is in the {required} stage (stage is {state.stage})'
        )


def _require_correctable(state: TournamentState, match: Match) -> None:
    if state.stage == 'setup':
        raise TournamentValidationError('Matches cannot be corrected before the tournament starts')
    if match.stage == 'group' and state.stage != 'group':
        raise TournamentValidationError(
            f'Group match {match.id} cannot be corrected after the group stage is closed'
        )


def _setup(state: TournamentState | None, action: SetupTournament) -> TournamentState:
    if state is not None and state.stage != 'setup':
        raise TournamentValidationError('A tournament is already in progress; reset it first')

    teams = list(action.teams)
    errors = validate_tournament_setup(action.name, teams)
    if errors:
        raise TournamentValidationError('; '.join(errors))

    group_matches = generate_group_matches(teams)
    logger.info(
        f'Tournament "{action.name.strip()}" set up with {len(teams)} teams, '
        f'{len(group_matches)} group matches'
    )
    return TournamentState(
        id=action.tournament_id or str(int(time.time() * 1000)),
        name=action.name.strip(),
        date=action.date or date_cls.today().isoformat(),
        stage='group',
        teams=teams,
        group_matches=group_matches,
        playoff_matches=[],
    )


def _apply(state: TournamentState | None, action: Action) -> TournamentState | None:
    if isinstance(action, SetupTournament):
        return _setup(state, action)

    if isinstance(action, ResetTournament):
        logger.info('Tournament reset')
        return None

    state = _require_state(state)

    if isinstance(action, GenerateFinals):
        return generate_finals(state)

    if isinstance(action, UpdateTeams):
        return propagate_team_updates(state, list(action.teams))

    match = find_match(state, action.match_id)

    if isinstance(action, AddSet):
        _require_scoring_open(state, match)
        updated = add_set(match, action.set_score)
    elif isinstance(action, RecordShootOff):
        _require_scoring_open(state, match)
        updated = record_shoot_off(
            match, action.winner_id, action.team_a_arrow_score, action.team_b_arrow_score
        )
    elif isinstance(action, EditSet):
        _require_correctable(state, match)
        updated = edit_set(match, action.set_index, action.set_score)
    elif isinstance(action, DeleteLastSet):
        _require_correctable(state, match)
        updated = delete_last_set(match)
    elif isinstance(action, ContinueMatch):
        _require_correctable(state, match)
        updated = continue_match(match)
    else:
        raise TypeError(f'Unknown action: {action!r}')

    return _replace_match(state, updated)


def reduce(state: TournamentState | None, action: Action, admin: bool = False) -> TournamentState | None:
    """
    Apply one action to the tournament state.

    Args:
        state: Current state (None when no tournament exists)
        action: Action to apply
        admin: Whether the caller passed the admin gate

    Returns:
        The new state (None after a reset). The input is never modified.

    Raises:
        PermissionDeniedError: If an admin-only action is requested without admin
        TournamentValidationError: If the action breaks a tournament rule
        MatchNotFoundError: If the action names an unknown match
    """
    if isinstance(action, ADMIN_ACTIONS) and not admin:
        raise PermissionDeniedError(f'{type(action).__name__} requires admin access')

    logger.debug(f'Applying {type(action).__name__}')
    new_state = _apply(state, action)
    return advance_stage(new_state)
