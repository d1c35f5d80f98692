"""Match state machine.

A match moves through three states:

- ``collecting``: fewer than five set points on both sides, more sets may be shot
- ``shoot_off_required``: exactly four sets at 4-4 and no shoot-off recorded
- ``completed``: one side holds five or more set points (shoot-off point included)

Every function here is pure: it returns a new Match and never mutates its
input. Totals are always rebuilt from ``sets`` by ``recompute_totals``.
"""

import logging
from typing import Optional, Tuple

from .constants import MATCH_WIN_SET_POINTS, SHOOT_OFF_AFTER_SETS, SHOOT_OFF_TIED_POINTS
from .exceptions import TournamentValidationError
from .schemas import EditHistoryEntry, Match, SetScore, ShootOffScore
from .scoring import rescore_set, shoot_off_points
from .utils import utc_timestamp

logger = logging.getLogger('archery.match')

COLLECTING = 'collecting'
SHOOT_OFF_REQUIRED = 'shoot_off_required'
COMPLETED = 'completed'


def sets_points(match: Match) -> Tuple[int, int]:
    """Set points won in the shot sets, without any shoot-off credit."""
    points_a = sum(s.team_a_set_points for s in match.sets)
    points_b = sum(s.team_b_set_points for s in match.sets)
    return points_a, points_b


def _shoot_off_allowed(match: Match) -> bool:
    return (
        len(match.sets) == SHOOT_OFF_AFTER_SETS
        and sets_points(match) == (SHOOT_OFF_TIED_POINTS, SHOOT_OFF_TIED_POINTS)
    )


def recompute_totals(match: Match) -> Match:
    """
    Rebuild the cumulative totals of a match from its sets.

    Set points include the shoot-off point when one is recorded. Running it
    twice on the same sets gives the same totals.
    """
    points_a, points_b = sets_points(match)
    if match.is_shoot_off:
        bonus_a, bonus_b = shoot_off_points(match.shoot_off_score)
        points_a += bonus_a
        points_b += bonus_b

    return match.model_copy(
        update={
            'team_a_set_points_total': points_a,
            'team_b_set_points_total': points_b,
            'team_a_arrow_score_total': sum(s.team_a_set_total for s in match.sets),
            'team_b_arrow_score_total': sum(s.team_b_set_total for s in match.sets),
            'team_a_x10s_total': sum(s.team_a_x10s for s in match.sets),
            'team_b_x10s_total': sum(s.team_b_x10s for s in match.sets),
        }
    )


def settle(match: Match) -> Match:
    """
    Recompute totals and derive completion and winner.

    A recorded shoot-off is dropped once the sets no longer stand at 4-4
    after four sets. The match is completed iff a side has at least five set
    points; the winner is the side with strictly more points. A match that
    falls below five is demoted back to in progress.
    """
    if match.is_shoot_off and not _shoot_off_allowed(match):
        logger.info(f'Match {match.id}: clearing shoot-off, sets no longer tied 4-4')
        match = match.model_copy(update={'is_shoot_off': False, 'shoot_off_score': None})

    match = recompute_totals(match)
    points_a = match.team_a_set_points_total
    points_b = match.team_b_set_points_total

    if max(points_a, points_b) >= MATCH_WIN_SET_POINTS:
        if points_a > points_b:
            winner_id = match.team_a_id
        elif points_b > points_a:
            winner_id = match.team_b_id
        else:
            winner_id = None
        return match.model_copy(update={'completed': True, 'winner_id': winner_id})

    return match.model_copy(update={'completed': False, 'winner_id': None})


def needs_shoot_off(match: Match) -> bool:
    """True after exactly four sets at 4-4 while no shoot-off is recorded."""
    return _shoot_off_allowed(match) and not match.is_shoot_off


def match_status(match: Match) -> str:
    """Current state: ``collecting``, ``shoot_off_required`` or ``completed``."""
    if match.completed:
        return COMPLETED
    if needs_shoot_off(match):
        return SHOOT_OFF_REQUIRED
    return COLLECTING


def can_add_set(match: Match) -> bool:
    """True while another set may be shot."""
    return match_status(match) == COLLECTING and len(match.sets) < SHOOT_OFF_AFTER_SETS


def loser_id(match: Match) -> Optional[int]:
    """Team id of the loser, or None while undecided or tied."""
    if match.winner_id is None:
        return None
    return match.team_b_id if match.winner_id == match.team_a_id else match.team_a_id


def _with_history(match: Match, *entries: EditHistoryEntry) -> Match:
    return match.model_copy(update={'edit_history': [*match.edit_history, *entries]})


def _entry(action: str, set_index: Optional[int] = None, details: Optional[str] = None) -> EditHistoryEntry:
    return EditHistoryEntry(
        timestamp=utc_timestamp(),
        action=action,
        set_index=set_index,
        details=details,
    )


def _completed_entry(match: Match) -> EditHistoryEntry:
    return _entry(
        'match_completed',
        details=f'Match completed: {match.team_a_set_points_total}-{match.team_b_set_points_total}',
    )


def add_set(match: Match, set_score: SetScore) -> Match:
    """
    Append a finalized set and settle the match.

    The set is rebuilt from its arrows, so totals, X+10 counts and set
    points always follow the arrows whatever the caller computed.

    Raises:
        TournamentValidationError: If the match is completed, waits for a
            shoot-off, or already has four sets
    """
    status = match_status(match)
    if status == COMPLETED:
        raise TournamentValidationError(f'Match {match.id} is already completed')
    if status == SHOOT_OFF_REQUIRED:
        raise TournamentValidationError(
            f'Match {match.id} is tied 4-4 after {SHOOT_OFF_AFTER_SETS} sets and needs a shoot-off'
        )
    if len(match.sets) >= SHOOT_OFF_AFTER_SETS:
        raise TournamentValidationError(
            f'Match {match.id} already has {SHOOT_OFF_AFTER_SETS} sets'
        )

    set_score = rescore_set(set_score)
    set_index = len(match.sets)
    updated = settle(match.model_copy(update={'sets': [*match.sets, set_score]}))

    entries = [
        _entry(
            'set_added',
            set_index=set_index,
            details=(
                f'Set {set_index + 1}: {set_score.team_a_set_total}-{set_score.team_b_set_total} '
                f'({set_score.team_a_set_points}-{set_score.team_b_set_points} points)'
            ),
        )
    ]
    if updated.completed:
        entries.append(_completed_entry(updated))
        logger.info(
            f'Match {match.id} completed '
            f'{updated.team_a_set_points_total}-{updated.team_b_set_points_total}'
        )

    return _with_history(updated, *entries)


def edit_set(match: Match, set_index: int, set_score: SetScore) -> Match:
    """
    Replace a saved set and settle the match.

    Editing can demote a completed match when the new totals no longer reach
    five set points, and can complete a match that was in progress.

    Raises:
        TournamentValidationError: If ``set_index`` does not refer to a saved set
    """
    if not 0 <= set_index < len(match.sets):
        raise TournamentValidationError(
            f'Match {match.id} has no set {set_index + 1} (sets saved: {len(match.sets)})'
        )

    set_score = rescore_set(set_score)
    sets = list(match.sets)
    sets[set_index] = set_score
    updated = settle(match.model_copy(update={'sets': sets}))

    entries = [
        _entry(
            'set_edited',
            set_index=set_index,
            details=(
                f'Set {set_index + 1} edited: '
                f'{set_score.team_a_set_total}-{set_score.team_b_set_total}'
            ),
        )
    ]
    if updated.completed and not match.completed:
        entries.append(_completed_entry(updated))
    if match.completed and not updated.completed:
        logger.info(f'Match {match.id} reopened after editing set {set_index + 1}')

    return _with_history(updated, *entries)


def delete_last_set(match: Match) -> Match:
    """
    Remove the most recent set, clear any shoot-off and settle the match.

    Raises:
        TournamentValidationError: If the match has no sets
    """
    if not match.sets:
        raise TournamentValidationError(f'Match {match.id} has no sets to delete')

    set_index = len(match.sets) - 1
    updated = settle(
        match.model_copy(
            update={
                'sets': list(match.sets[:-1]),
                'is_shoot_off': False,
                'shoot_off_score': None,
            }
        )
    )
    return _with_history(
        updated,
        _entry('set_deleted', set_index=set_index, details=f'Deleted set {set_index + 1}'),
    )


def record_shoot_off(
    match: Match,
    winner_id: int,
    team_a_arrow_score: Optional[str] = None,
    team_b_arrow_score: Optional[str] = None,
) -> Match:
    """
    Record the shoot-off of a match tied 4-4 after four sets.

    The winner is credited one set point, which completes the match 5-4.

    Raises:
        TournamentValidationError: If no shoot-off is required or the winner
            is not one of the two teams
    """
    if not needs_shoot_off(match):
        raise TournamentValidationError(
            f'Match {match.id} does not need a shoot-off '
            f'(only after {SHOOT_OFF_AFTER_SETS} sets tied 4-4)'
        )
    if winner_id not in (match.team_a_id, match.team_b_id):
        raise TournamentValidationError(
            f'Shoot-off winner {winner_id} is not playing in match {match.id}'
        )

    shoot_off = ShootOffScore(
        team_a_winner=1 if winner_id == match.team_a_id else 0,
        team_b_winner=1 if winner_id == match.team_b_id else 0,
        team_a_arrow_score=team_a_arrow_score or None,
        team_b_arrow_score=team_b_arrow_score or None,
    )
    updated = settle(match.model_copy(update={'is_shoot_off': True, 'shoot_off_score': shoot_off}))
    logger.info(f'Match {match.id} decided by shoot-off, winner team {winner_id}')

    return _with_history(
        updated,
        _entry(
            'match_completed',
            details=(
                f'Shoot-off won by team {winner_id}: '
                f'{updated.team_a_set_points_total}-{updated.team_b_set_points_total}'
            ),
        ),
    )


def continue_match(match: Match) -> Match:
    """
    Reopen a completed match for more scoring without touching its sets.

    Only ``completed`` and ``winner_id`` are cleared.

    Raises:
        TournamentValidationError: If the match is not completed, or a side
            already holds five set points
    """
    if not match.completed:
        raise TournamentValidationError(f'Match {match.id} is not completed')

    current = recompute_totals(match)
    if max(current.team_a_set_points_total, current.team_b_set_points_total) >= MATCH_WIN_SET_POINTS:
        raise TournamentValidationError(
            f'Match {match.id} cannot be continued: a team already has '
            f'{MATCH_WIN_SET_POINTS} or more set points'
        )
    logger.info(f'Match {match.id} reopened for more scoring')
    return current.model_copy(update={'completed': False, 'winner_id': None})
