"""End-to-end tests for the command line, backed by a JSON file store."""

import json
import logging

import pytest

import tournament_cli
from archery.config import clear_config_cache


@pytest.fixture
def cli(tmp_path, monkeypatch, capsys):
    """Run CLI commands against a fresh file store; returns captured stdout."""
    config = {
        'admin_password': 'bullseye',
        'store_backend': 'file',
        'data_dir': str(tmp_path / 'store'),
        'backup_dir': str(tmp_path / 'backups'),
        'log_dir': str(tmp_path / 'logs'),
        'score_link_base_url': 'http://range.local',
    }
    config_path = tmp_path / 'config.json'
    config_path.write_text(json.dumps(config))
    monkeypatch.setenv('ARCHERY_CONFIG', str(config_path))
    monkeypatch.delenv('ARCHERY_ADMIN_PASSWORD', raising=False)
    clear_config_cache()

    def run(*argv):
        tournament_cli.main(['--no-log-file', *argv])
        return capsys.readouterr().out

    yield run

    clear_config_cache()
    logging.getLogger('archery').handlers = []


def register_and_setup(cli):
    for i in range(1, 8):
        cli('-p', 'bullseye', 'teams', 'add', f'Team {i}', '--members', f'Archer {i}')
    return cli('-p', 'bullseye', 'setup', 'Club Cup', '--teams', *[str(i) for i in range(1, 8)])


class TestCli:
    """Tests for tournament commands."""

    def test_register_and_list(self, cli):
        out = cli('-p', 'bullseye', 'teams', 'add', 'Red', '--members', 'Ana', 'Ben')
        assert 'Registered team 1: Red' in out
        out = cli('teams', 'list')
        assert 'Red' in out
        assert 'Ana, Ben' in out

    def test_admin_command_without_password(self, cli):
        with pytest.raises(SystemExit):
            cli('teams', 'add', 'Red')

    def test_wrong_password(self, cli):
        with pytest.raises(SystemExit):
            cli('-p', 'nope', 'ranking')

    def test_setup_score_and_rank(self, cli):
        out = register_and_setup(cli)
        assert '21 group matches generated' in out

        arrows_a = ['X', '10', '10', '9', '9', '9', '9', '9', '9', '9']
        arrows_b = ['X', '9', '9', '9', '9', '9', '9', '9', '9', '8']
        out = cli('score', '1', '--a', *arrows_a, '--b', *arrows_b)
        assert 'Set saved. Match 1: 2-0' in out

        out = cli('ranking')
        assert 'RANKING' in out

        out = cli('matches')
        assert '[  1] Match 1' in out
        assert '2-0 (collecting, 1 sets)' in out

    def test_export_and_backup(self, cli, tmp_path):
        register_and_setup(cli)
        results = tmp_path / 'results.csv'
        cli('export', '-o', str(results))
        assert results.read_text().startswith('RANKING\n')

        out = cli('backup', '--filename', 'b.json')
        assert (tmp_path / 'backups' / 'b.json').exists()
        assert 'Backup written' in out

        cli('-p', 'bullseye', 'reset', '--yes')
        assert 'No tournament' in cli('matches')
        cli('-p', 'bullseye', 'restore', str(tmp_path / 'backups' / 'b.json'))
        assert 'Match 21' in cli('matches')

    def test_finals_blocked_until_group_done(self, cli):
        register_and_setup(cli)
        with pytest.raises(SystemExit):
            cli('-p', 'bullseye', 'finals')

    def test_link(self, cli):
        assert cli('link', '7').strip() == 'http://range.local/score/7'
