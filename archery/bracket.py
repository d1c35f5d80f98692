"""Playoff bracket generation and tournament stage progression.

Playoff structure:
- Semifinals (created by an admin once all group matches are completed):
  - Semifinal 1: seed 1 vs seed 4
  - Semifinal 2: seed 2 vs seed 3
- Finals (created automatically when both semifinals are completed):
  - Gold Medal Match: semifinal winners (1st/2nd place)
  - Bronze Medal Match: semifinal losers (3rd/4th place)

The tournament is finished once both medal matches are completed.
"""

import logging

from .constants import (
    BRONZE_MATCH_ID,
    GOLD_MATCH_ID,
    MATCH_LABELS,
    PLAYOFF_SEEDS,
    SEMIFINAL_1_ID,
    SEMIFINAL_2_ID,
)
from .exceptions import TournamentValidationError
from .match import loser_id
from .models import MedalTable
from .ranking import compute_rankings
from .schemas import Match, TournamentState

logger = logging.getLogger('archery.bracket')


PLAYOFF_STRUCTURE = {
    'semifinals': {
        'round': 'Semifinals',
        'matchups': [
            {'seed1': 1, 'seed2': 4, 'game': SEMIFINAL_1_ID, 'stage': 'semifinal'},
            {'seed1': 2, 'seed2': 3, 'game': SEMIFINAL_2_ID, 'stage': 'semifinal'},
        ],
    },
    'finals': {
        'round': 'Finals',
        'matchups': [
            {'from_games': [SEMIFINAL_1_ID, SEMIFINAL_2_ID], 'take': 'losers', 'game': BRONZE_MATCH_ID, 'stage': 'bronze', 'determines': [3, 4]},
            {'from_games': [SEMIFINAL_1_ID, SEMIFINAL_2_ID], 'take': 'winners', 'game': GOLD_MATCH_ID, 'stage': 'gold', 'determines': [1, 2]},
        ],
    },
}


def _new_match(match_id: int, stage: str, team_a_id: int, team_b_id: int) -> Match:
    return Match(
        id=match_id,
        team_a_id=team_a_id,
        team_b_id=team_b_id,
        stage=stage,
        label=MATCH_LABELS[match_id],
    )


def find_playoff_match(state: TournamentState, match_id: int) -> Match | None:
    """Playoff match with the given id, or None."""
    for match in state.playoff_matches:
        if match.id == match_id:
            return match
    return None


def validate_finals_ready(state: TournamentState) -> list[str]:
    """
    Check that the group stage can be closed.

    Returns:
        List of error messages (empty if finals can be generated)
    """
    errors = []

    if state.stage != 'group':
        errors.append(f'Finals can only be generated during the group stage (stage is {state.stage})')

    pending = [m.id for m in state.group_matches if not m.completed]
    if pending:
        errors.append(
            f'All group matches must be completed before generating finals '
            f'({len(pending)} pending: {", ".join(str(i) for i in pending)})'
        )

    ranked = len(compute_rankings(state))
    if ranked < PLAYOFF_SEEDS:
        errors.append(f'Need at least {PLAYOFF_SEEDS} ranked teams to generate finals (have {ranked})')

    return errors


def generate_finals(state: TournamentState) -> TournamentState:
    """
    Close the group stage and seed the top four into the semifinals.

    Raises:
        TournamentValidationError: If the group stage is not finished or
            fewer than four teams are ranked
    """
    errors = validate_finals_ready(state)
    if errors:
        raise TournamentValidationError('; '.join(errors))

    seed_to_team = {i + 1: r.team_id for i, r in enumerate(compute_rankings(state)[:PLAYOFF_SEEDS])}

    semifinals = [
        _new_match(game['game'], game['stage'], seed_to_team[game['seed1']], seed_to_team[game['seed2']])
        for game in PLAYOFF_STRUCTURE['semifinals']['matchups']
    ]
    logger.info(
        'Group stage closed, semifinals: '
        + ', '.join(f'{m.team_a_id} vs {m.team_b_id}' for m in semifinals)
    )

    return state.model_copy(update={'stage': 'playoffs', 'playoff_matches': semifinals})


def _generate_medal_matches(state: TournamentState) -> list[Match] | None:
    """Gold and bronze matches once both semifinals are decided, else None."""
    results = {}
    for game_id in (SEMIFINAL_1_ID, SEMIFINAL_2_ID):
        semi = find_playoff_match(state, game_id)
        if semi is None or not semi.completed or semi.winner_id is None:
            return None
        results[game_id] = {'winners': semi.winner_id, 'losers': loser_id(semi)}

    medal_matches = []
    for game in PLAYOFF_STRUCTURE['finals']['matchups']:
        team_a, team_b = (results[g][game['take']] for g in game['from_games'])
        medal_matches.append(_new_match(game['game'], game['stage'], team_a, team_b))
    return medal_matches


def advance_stage(state: TournamentState | None) -> TournamentState | None:
    """
    Apply automatic playoff progression.

    Runs after every state change. Outside the playoffs, or when nothing
    needs to change, the same state object is returned, so running it twice
    is a no-op.

    - Both semifinals completed and no medal match yet: add Bronze and Gold
    - Both medal matches completed: stage becomes ``finished``
    - A finished tournament whose medal match was reopened returns to ``playoffs``
    """
    if state is None or state.stage not in ('playoffs', 'finished'):
        return state

    gold = find_playoff_match(state, GOLD_MATCH_ID)
    bronze = find_playoff_match(state, BRONZE_MATCH_ID)

    if gold is None and bronze is None:
        medal_matches = _generate_medal_matches(state)
        if medal_matches is None:
            return state
        logger.info('Semifinals completed, medal matches generated')
        return state.model_copy(
            update={'playoff_matches': [*state.playoff_matches, *medal_matches]}
        )

    medals_decided = bool(gold and gold.completed and bronze and bronze.completed)
    if medals_decided and state.stage != 'finished':
        logger.info('Medal matches completed, tournament finished')
        return state.model_copy(update={'stage': 'finished'})
    if not medals_decided and state.stage == 'finished':
        logger.info('Medal match reopened, tournament back in playoffs')
        return state.model_copy(update={'stage': 'playoffs'})

    return state


def final_placings(state: TournamentState | None) -> MedalTable:
    """Gold, silver, bronze and fourth place from the medal matches."""
    table = MedalTable()
    if state is None:
        return table

    gold = find_playoff_match(state, GOLD_MATCH_ID)
    if gold and gold.completed and gold.winner_id is not None:
        table.gold = gold.winner_id
        table.silver = loser_id(gold)

    bronze = find_playoff_match(state, BRONZE_MATCH_ID)
    if bronze and bronze.completed and bronze.winner_id is not None:
        table.bronze = bronze.winner_id
        table.fourth = loser_id(bronze)

    return table
