"""Group-stage ranking computed from completed group matches."""

from .constants import MATCH_LOSS_POINTS, MATCH_TIE_POINTS, MATCH_WIN_POINTS
from .models import RankingData
from .schemas import Match, TournamentState


def _arrows_shot(match: Match) -> float:
    """Arrows shot by one side: both sides always shoot the same count."""
    total = sum(len(s.team_a_arrows) + len(s.team_b_arrows) for s in match.sets)
    return total / 2


def compute_rankings(state: TournamentState | None) -> list[RankingData]:
    """
    Build the group-stage standings.

    Only completed group matches count. A win is worth 2 match points, a tie
    (``winner_id`` is None) 1 point to each side, a loss 0.

    Sort order:
        1. Match points (descending)
        2. Arrow average (descending)
        3. X+10 total (descending)

    Teams still tied keep their tournament order (the sort is stable).

    Args:
        state: Tournament state, or None when no tournament exists

    Returns:
        List of RankingData sorted by position (rank 1 first)
    """
    if state is None or state.stage == 'setup' or not state.teams:
        return []

    rankings = {
        team.id: RankingData(team_id=team.id, team_name=team.name) for team in state.teams
    }

    for match in state.group_matches:
        if not match.completed:
            continue

        ranking_a = rankings.get(match.team_a_id)
        ranking_b = rankings.get(match.team_b_id)
        arrows_shot = _arrows_shot(match)

        if ranking_a:
            ranking_a.matches_played += 1
            ranking_a.total_arrow_score += match.team_a_arrow_score_total
            ranking_a.total_x10s += match.team_a_x10s_total
            ranking_a.total_arrows_shot += arrows_shot
        if ranking_b:
            ranking_b.matches_played += 1
            ranking_b.total_arrow_score += match.team_b_arrow_score_total
            ranking_b.total_x10s += match.team_b_x10s_total
            ranking_b.total_arrows_shot += arrows_shot

        if match.winner_id is None:
            points_a, points_b = MATCH_TIE_POINTS, MATCH_TIE_POINTS
        elif match.winner_id == match.team_a_id:
            points_a, points_b = MATCH_WIN_POINTS, MATCH_LOSS_POINTS
        elif match.winner_id == match.team_b_id:
            points_a, points_b = MATCH_LOSS_POINTS, MATCH_WIN_POINTS
        else:
            # Winner is not one of the two teams
            points_a, points_b = MATCH_LOSS_POINTS, MATCH_LOSS_POINTS

        if ranking_a:
            ranking_a.match_points += points_a
            ranking_a.wins += 1 if points_a == MATCH_WIN_POINTS else 0
        if ranking_b:
            ranking_b.match_points += points_b
            ranking_b.wins += 1 if points_b == MATCH_WIN_POINTS else 0

    for ranking in rankings.values():
        if ranking.total_arrows_shot > 0:
            ranking.arrow_average = ranking.total_arrow_score / ranking.total_arrows_shot

    return sorted(
        rankings.values(),
        key=lambda r: (r.match_points, r.arrow_average, r.total_x10s),
        reverse=True,
    )


def ranked_team_ids(state: TournamentState | None) -> list[int]:
    """Team ids in ranking order."""
    return [r.team_id for r in compute_rankings(state)]
