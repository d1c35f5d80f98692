"""Tests for registered team management."""

import pytest

from archery.constants import TEAM_COLORS
from archery.exceptions import TournamentValidationError
from archery.schemas import Team
from archery.teams import (
    add_team,
    next_team_id,
    propagate_team_updates,
    remove_team,
    team_name,
    update_team,
)


class TestAddTeam:
    """Tests for registering teams."""

    def test_ids_and_colors(self):
        """Test ids count up and colors follow the palette."""
        teams = add_team([], 'Red', ['Ana'])
        teams = add_team(teams, 'Blue')
        assert [t.id for t in teams] == [1, 2]
        assert [t.color for t in teams] == TEAM_COLORS[:2]
        assert teams[1].members == []

    def test_id_after_removal(self):
        """Test a new id is one more than the highest remaining id."""
        teams = [Team(id=1, name='A'), Team(id=5, name='B')]
        assert next_team_id(teams) == 6
        assert next_team_id([]) == 1

    def test_palette_wraps(self):
        teams = []
        for i in range(len(TEAM_COLORS) + 1):
            teams = add_team(teams, f'Team {i}')
        assert teams[-1].color == TEAM_COLORS[0]

    def test_members_cleaned(self):
        """Test blank member entries are dropped and names trimmed."""
        teams = add_team([], ' Green ', [' Ana ', '', '  ', 'Ben'])
        assert teams[0].name == 'Green'
        assert teams[0].members == ['Ana', 'Ben']

    def test_blank_name(self):
        with pytest.raises(TournamentValidationError, match='name is required'):
            add_team([], '   ')


class TestUpdateAndRemove:
    """Tests for editing and removing registered teams."""

    def test_update_fields(self):
        teams = add_team([], 'Red', ['Ana'])
        teams = update_team(teams, 1, name='Crimson', members=['Ana', 'Ben'], color='#111111')
        assert teams[0].name == 'Crimson'
        assert teams[0].members == ['Ana', 'Ben']
        assert teams[0].color == '#111111'

    def test_update_keeps_unchanged_fields(self):
        teams = add_team([], 'Red', ['Ana'])
        teams = update_team(teams, 1, name='Crimson')
        assert teams[0].members == ['Ana']
        assert teams[0].color == TEAM_COLORS[0]

    def test_update_unknown_team(self):
        with pytest.raises(TournamentValidationError, match='not registered'):
            update_team([], 3, name='X')

    def test_update_blank_name(self):
        teams = add_team([], 'Red')
        with pytest.raises(TournamentValidationError):
            update_team(teams, 1, name='')

    def test_remove(self):
        teams = add_team(add_team([], 'Red'), 'Blue')
        assert [t.name for t in remove_team(teams, 1)] == ['Blue']
        with pytest.raises(TournamentValidationError):
            remove_team(teams, 7)


class TestPropagation:
    """Tests for copying registered team edits into a tournament."""

    def test_propagate(self, group_state):
        teams = [Team(id=2, name='Eagles', members=['Dee'])]
        state = propagate_team_updates(group_state, teams)
        assert team_name(state, 2) == 'Eagles'
        assert team_name(state, 1) == 'Team 1'
        assert propagate_team_updates(None, teams) is None

    def test_team_name_default(self, group_state):
        assert team_name(group_state, None) == 'N/A'
        assert team_name(group_state, 99) == 'N/A'
        assert team_name(None, 1, default='?') == '?'
