"""CSV and Excel exports of tournament results.

The CSV report has two sections:

    RANKING
    Rank,Team,Matches Played,Match Points,Arrow Average,X+10s
    ...

    MATCHES
    Match,Team A,Team B,Score,Winner,Sets Played
    ...
"""

import csv
import io
from datetime import date
from pathlib import Path
from typing import Optional

import openpyxl
from openpyxl.styles import Font

from .models import RankingData
from .schemas import Match, Team, TournamentState
from .teams import team_name

RANKING_HEADER = ['Rank', 'Team', 'Matches Played', 'Match Points', 'Arrow Average', 'X+10s']
MATCHES_HEADER = ['Match', 'Team A', 'Team B', 'Score', 'Winner', 'Sets Played']
TEAMS_HEADER = ['Team', 'Members']


def results_filename(on: Optional[date] = None) -> str:
    """Default results file name, e.g. ``tournament_results_2026-10-18.csv``."""
    return f'tournament_results_{(on or date.today()).isoformat()}.csv'


def ranking_rows(rankings: list[RankingData]) -> list[list]:
    """Ranking table rows (without header)."""
    return [
        [
            rank,
            r.team_name,
            r.matches_played,
            r.match_points,
            f'{r.arrow_average:.2f}',
            r.total_x10s,
        ]
        for rank, r in enumerate(rankings, 1)
    ]


def match_rows(state: TournamentState, matches: list[Match]) -> list[list]:
    """Per-match score summary rows (without header)."""
    rows = []
    for match in matches:
        winner = team_name(state, match.winner_id) if match.winner_id is not None else 'N/A'
        rows.append(
            [
                match.label or f'Match {match.id}',
                team_name(state, match.team_a_id),
                team_name(state, match.team_b_id),
                f'{match.team_a_set_points_total}-{match.team_b_set_points_total}',
                winner,
                len(match.sets),
            ]
        )
    return rows


def _csv_text(header: list[str], rows: list[list]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue().rstrip('\n')


def results_csv(
    state: TournamentState,
    rankings: list[RankingData],
    matches: Optional[list[Match]] = None,
) -> str:
    """
    Build the results report.

    Args:
        state: Tournament state (for team names)
        rankings: Ranking as returned by ``compute_rankings``
        matches: Matches to list (default: the group matches)

    Returns:
        CSV text with a RANKING and a MATCHES section
    """
    if matches is None:
        matches = state.group_matches
    ranking_csv = _csv_text(RANKING_HEADER, ranking_rows(rankings))
    matches_csv = _csv_text(MATCHES_HEADER, match_rows(state, matches))
    return f'RANKING\n{ranking_csv}\n\nMATCHES\n{matches_csv}\n'


def teams_csv(teams: list[Team]) -> str:
    """Registered teams with members joined by ``; ``."""
    rows = [[t.name, '; '.join(t.members) if t.members else 'No members'] for t in teams]
    return _csv_text(TEAMS_HEADER, rows) + '\n'


def write_results_workbook(
    path: str | Path,
    state: TournamentState,
    rankings: list[RankingData],
    matches: Optional[list[Match]] = None,
) -> Path:
    """
    Save the results report as an Excel workbook.

    Creates a ``Ranking`` sheet and a ``Matches`` sheet with bold headers.
    Group and playoff matches are both listed unless ``matches`` is given.
    """
    if matches is None:
        matches = [*state.group_matches, *state.playoff_matches]

    wb = openpyxl.Workbook()
    ranking_ws = wb.active
    ranking_ws.title = 'Ranking'
    matches_ws = wb.create_sheet('Matches')

    for ws, header, rows in (
        (ranking_ws, RANKING_HEADER, ranking_rows(rankings)),
        (matches_ws, MATCHES_HEADER, match_rows(state, matches)),
    ):
        ws.append(header)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for row in rows:
            ws.append(row)

    # Arrow average as a number in the workbook
    for row in ranking_ws.iter_rows(min_row=2, min_col=5, max_col=5):
        for cell in row:
            cell.value = float(cell.value)
            cell.number_format = '0.00'

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))
    return path
