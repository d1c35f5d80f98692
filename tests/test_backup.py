"""Tests for backup and restore."""

import json
from datetime import date

import pytest

from archery.backup import backup_filename, load_backup, make_backup, restore_backup, save_backup
from archery.constants import BRONZE_MATCH_ID, GOLD_MATCH_ID, REGISTERED_TEAMS_KEY, TOURNAMENT_STATE_KEY
from archery.exceptions import PermissionDeniedError, TournamentValidationError
from archery.ranking import compute_rankings
from archery.schemas import Team
from archery.session import TournamentController, dump_state
from archery.store import MemoryStore


class TestMakeBackup:
    """Tests for creating backups."""

    def test_backup_contents(self, group_state, teams):
        backup = make_backup(group_state, teams)
        assert backup.version == '1.0'
        assert backup.timestamp
        assert backup.tournament_state == group_state
        assert len(backup.registered_teams) == 7

    def test_filename(self):
        assert backup_filename(date(2026, 5, 1)) == 'archery_backup_2026-05-01.json'

    def test_saved_with_stored_key_names(self, tmp_path, group_state, teams):
        """Test the file uses the same keys as the stored documents."""
        path = save_backup(make_backup(group_state, teams), tmp_path, 'b.json')
        document = json.loads(path.read_text())
        assert set(document) == {'version', 'timestamp', 'tournamentState', 'registeredTeams'}
        assert document['tournamentState'] == dump_state(group_state)

    def test_round_trip(self, tmp_path, finished_group_state, teams):
        path = save_backup(make_backup(finished_group_state, teams), tmp_path)
        state, restored_teams = load_backup(path)
        assert state == finished_group_state
        assert restored_teams == teams


class TestRestoreBackup:
    """Tests for reading backup documents."""

    def test_legacy_data_field(self, group_state):
        """Test older backups that keep the state under "data"."""
        state, teams = restore_backup({'data': dump_state(group_state), 'version': '0.9'})
        assert state == group_state
        assert teams is None

    def test_empty_teams_not_restored(self, group_state):
        """Test an empty team list leaves registered teams alone."""
        _, teams = restore_backup({'tournamentState': None, 'registeredTeams': []})
        assert teams is None

    def test_invalid_document(self):
        with pytest.raises(TournamentValidationError):
            restore_backup(['not', 'a', 'backup'])
        with pytest.raises(TournamentValidationError):
            restore_backup({'tournamentState': {'stage': 'nope'}})
        with pytest.raises(TournamentValidationError):
            restore_backup({'registeredTeams': [{'id': 0, 'name': ''}]})


class TestRestoreRederives:
    """Tests that restored documents are rebuilt from their arrows."""

    def test_stale_totals_replaced(self, finished_group_state):
        document = dump_state(finished_group_state)
        document['groupMatches'][0]['teamA_arrow_score_total'] = 9999
        document['groupMatches'][0]['teamB_set_points_total'] = 8

        state, _ = restore_backup({'tournamentState': document})
        assert state.group_matches[0] == finished_group_state.group_matches[0]
        assert compute_rankings(state) == compute_rankings(finished_group_state)

    def test_completion_and_winner_rederived(self, finished_group_state):
        """Test a stored match claiming to be open with the wrong winner is settled."""
        document = dump_state(finished_group_state)
        stored = document['groupMatches'][2]
        stored['completed'] = False
        stored['winner_id'] = stored['teamB_id']

        state, _ = restore_backup({'tournamentState': document})
        match = state.group_matches[2]
        assert match.completed
        assert match.winner_id == finished_group_state.group_matches[2].winner_id

    def test_medal_matches_generated(self, playoff_state, play_match):
        """Test a backup taken with both semifinals done gets its medal matches."""
        state = play_match(play_match(playoff_state, 101, 'A'), 102, 'A')
        document = dump_state(state)
        document['playoffMatches'] = document['playoffMatches'][:2]

        restored, _ = restore_backup({'tournamentState': document})
        ids = [m.id for m in restored.playoff_matches]
        assert ids == [101, 102, BRONZE_MATCH_ID, GOLD_MATCH_ID]
        assert restored.stage == 'playoffs'

    def test_controller_restore_uses_rebuilt_state(self, finished_group_state):
        document = dump_state(finished_group_state)
        document['groupMatches'][0]['teamA_arrow_score_total'] = 9999
        store = MemoryStore()
        controller = TournamentController(store, admin=True)
        controller.load()
        controller.restore({'tournamentState': document})

        assert controller.state == finished_group_state
        assert store.read(TOURNAMENT_STATE_KEY) == dump_state(finished_group_state)


class TestControllerRestore:
    """Tests for restoring through the controller."""

    def test_restore_replaces_state_and_teams(self, group_state, teams):
        store = MemoryStore({REGISTERED_TEAMS_KEY: [{'id': 9, 'name': 'Old'}]})
        controller = TournamentController(store, admin=True)
        controller.load()
        controller.restore(make_backup(group_state, teams).model_dump(mode='json', by_alias=True))

        assert controller.state == group_state
        assert store.read(TOURNAMENT_STATE_KEY)['name'] == 'Club Cup'
        assert [t['id'] for t in store.read(REGISTERED_TEAMS_KEY)] == list(range(1, 8))

    def test_restore_keeps_teams_when_backup_has_none(self, group_state):
        store = MemoryStore({REGISTERED_TEAMS_KEY: [{'id': 9, 'name': 'Old'}]})
        controller = TournamentController(store, admin=True)
        controller.load()
        controller.restore({'tournamentState': dump_state(group_state)})
        assert controller.registered_teams == [Team(id=9, name='Old')]

    def test_restore_requires_admin(self, group_state):
        controller = TournamentController(MemoryStore())
        with pytest.raises(PermissionDeniedError):
            controller.restore({'tournamentState': dump_state(group_state)})
