"""Tests for CSV and Excel exports."""

import csv
import io
from datetime import date

import openpyxl

from archery.export import (
    results_csv,
    results_filename,
    teams_csv,
    write_results_workbook,
)
from archery.ranking import compute_rankings
from archery.schemas import Team


class TestResultsCsv:
    """Tests for the results report."""

    def test_sections(self, finished_group_state):
        text = results_csv(finished_group_state, compute_rankings(finished_group_state))
        ranking_part, matches_part = text.split('\n\n')
        assert ranking_part.startswith('RANKING\nRank,Team,Matches Played,Match Points,Arrow Average,X+10s\n')
        assert matches_part.startswith('MATCHES\nMatch,Team A,Team B,Score,Winner,Sets Played\n')

    def test_ranking_rows(self, finished_group_state):
        text = results_csv(finished_group_state, compute_rankings(finished_group_state))
        rows = list(csv.reader(io.StringIO(text.split('\n\n')[0])))
        assert rows[2] == ['1', 'Team 1', '6', '12', '10.00', '180']
        assert rows[-1] == ['7', 'Team 7', '6', '0', '9.00', '0']

    def test_match_rows(self, group_state, play_match):
        state = play_match(group_state, 1, 'B')
        text = results_csv(state, compute_rankings(state))
        rows = list(csv.reader(io.StringIO(text.split('\n\n')[1])))
        first = state.group_matches[0]
        assert rows[2] == [
            'Match 1',
            f'Team {first.team_a_id}',
            f'Team {first.team_b_id}',
            '0-6',
            f'Team {first.team_b_id}',
            '3',
        ]
        assert rows[3][4] == 'N/A'
        assert len(rows) == 2 + 21

    def test_filename(self):
        assert results_filename(date(2026, 5, 1)) == 'tournament_results_2026-05-01.csv'


class TestTeamsCsv:
    def test_members_joined(self):
        text = teams_csv([
            Team(id=1, name='Red', members=['Ana', 'Ben']),
            Team(id=2, name='Blue'),
        ])
        assert text == 'Team,Members\nRed,Ana; Ben\nBlue,No members\n'


class TestWorkbook:
    """Tests for the Excel export."""

    def test_sheets(self, tmp_path, playoff_state):
        path = write_results_workbook(
            tmp_path / 'out' / 'results.xlsx', playoff_state, compute_rankings(playoff_state)
        )
        wb = openpyxl.load_workbook(path)
        assert wb.sheetnames == ['Ranking', 'Matches']

        ranking = wb['Ranking']
        assert ranking['A1'].value == 'Rank'
        assert ranking['B2'].value == 'Team 1'
        assert ranking['E2'].value == 10.0

        matches = wb['Matches']
        assert matches.max_row == 1 + 21 + 2
        assert matches.cell(row=matches.max_row, column=1).value == 'Semifinal 2'
