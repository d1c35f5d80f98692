"""Tests for validation functions."""

from conftest import A_WIN, TIE

from archery.match import add_set, settle
from archery.schemas import Match, Team
from archery.validators import (
    find_duplicate_members,
    validate_match,
    validate_state,
    validate_tournament_setup,
)


class TestValidateTournamentSetup:
    """Tests for tournament setup validation."""

    def test_valid_setup(self, teams):
        assert validate_tournament_setup('Club Cup', teams) == []

    def test_all_errors_reported(self, teams):
        """Test several problems are reported together."""
        errors = validate_tournament_setup('', teams[:3] + [teams[0]])
        assert len(errors) == 3
        assert 'Tournament name is required' in errors
        assert any('between 7 and 10' in e for e in errors)
        assert any('more than once: 1' in e for e in errors)

    def test_ten_teams_allowed(self):
        teams = [Team(id=i, name=f'T{i}') for i in range(1, 11)]
        assert validate_tournament_setup('Big Cup', teams) == []


class TestDuplicateMembers:
    """Tests for archers listed on several teams."""

    def test_case_insensitive_match(self):
        """Test names are compared ignoring case and spacing."""
        teams = [
            Team(id=1, name='Red', members=['Ana Lopez', 'Ben']),
            Team(id=2, name='Blue', members=[' ana lopez ', 'Carl']),
        ]
        assert find_duplicate_members(teams) == ['ana lopez (in: Red, Blue)']

    def test_no_duplicates(self, teams):
        assert find_duplicate_members(teams) == []


class TestValidateMatch:
    """Tests for match consistency checks."""

    def test_engine_output_is_consistent(self, match):
        m = add_set(add_set(add_set(match, A_WIN), A_WIN), TIE)
        assert validate_match(m) == []

    def test_stale_totals(self, match):
        m = add_set(match, A_WIN).model_copy(update={'team_a_set_points_total': 4})
        errors = validate_match(m)
        assert len(errors) == 1
        assert 'stale totals (team_a_set_points_total)' in errors[0]

    def test_completed_without_five_points(self, match):
        m = settle(add_set(match, A_WIN)).model_copy(update={'completed': True})
        assert any('without a side reaching 5' in e for e in validate_match(m))

    def test_inconsistent_set(self, match):
        """Test set totals that disagree with the arrows are reported."""
        bad_set = A_WIN.model_copy(update={'team_a_set_total': 50})
        m = Match(id=1, team_a_id=1, team_b_id=2, sets=[bad_set])
        errors = validate_match(m)
        assert any('set 1: totals do not match arrows' in e for e in errors)

    def test_foreign_winner(self, match):
        m = match.model_copy(update={'winner_id': 9})
        assert any('winner 9 is not one of its teams' in e for e in validate_match(m))


class TestValidateState:
    """Tests for whole-document validation."""

    def test_valid_state(self, group_state):
        assert validate_state(group_state) == []

    def test_unknown_team(self, group_state):
        """Test a match referencing a team outside the tournament."""
        state = group_state.model_copy(update={'teams': group_state.teams[1:]})
        errors = validate_state(state)
        assert errors
        assert all('unknown team 1' in e for e in errors)
