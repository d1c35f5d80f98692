"""Backup and restore of the tournament and registered teams."""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .constants import BACKUP_VERSION
from .exceptions import TournamentValidationError
from .schemas import Backup, Team, TournamentState
from .tournament import settle_state
from .utils import load_json, save_json, utc_timestamp

logger = logging.getLogger('archery.backup')


def backup_filename(on: Optional[date] = None) -> str:
    """Default backup file name, e.g. ``archery_backup_2026-10-18.json``."""
    return f'archery_backup_{(on or date.today()).isoformat()}.json'


def make_backup(state: Optional[TournamentState], teams: list[Team]) -> Backup:
    """Bundle the tournament state and registered teams with a version tag and timestamp."""
    return Backup(
        version=BACKUP_VERSION,
        timestamp=utc_timestamp(),
        tournament_state=state,
        registered_teams=list(teams),
    )


def restore_backup(document: dict[str, Any]) -> tuple[Optional[TournamentState], Optional[list[Team]]]:
    """
    Read a backup document.

    Supports the current shape (``tournamentState``/``registeredTeams``) and
    the older shape that nests the state under ``data``. Match totals,
    completion and stage progression are rebuilt from the stored arrows.

    Args:
        document: Parsed backup JSON

    Returns:
        Tuple of (state, teams). ``state`` is None when the backup has no
        tournament. ``teams`` is None when the backup has no teams, so the
        caller keeps its existing registered teams.

    Raises:
        TournamentValidationError: If the document is not a valid backup
    """
    if not isinstance(document, dict):
        raise TournamentValidationError('Invalid backup file format: expected a JSON object')

    raw_state = document.get('tournamentState') or document.get('data')
    raw_teams = document.get('registeredTeams') or []

    try:
        state = TournamentState.model_validate(raw_state) if raw_state else None
        teams = [Team.model_validate(t) for t in raw_teams] if isinstance(raw_teams, list) else []
    except ValidationError as e:
        logger.error(f'Invalid backup document: {e}')
        raise TournamentValidationError(f'Invalid backup file format:\n{e}') from e
    state = settle_state(state)

    logger.info(
        f'Backup read: {"tournament " + repr(state.name) if state else "no tournament"}, '
        f'{len(teams)} registered teams'
    )
    return state, (teams or None)


def save_backup(backup: Backup, directory: str | Path, filename: Optional[str] = None) -> Path:
    """Write a backup document and return its path."""
    path = Path(directory) / (filename or backup_filename())
    save_json(path, backup)
    logger.info(f'Backup saved to {path}')
    return path


def load_backup(path: str | Path) -> tuple[Optional[TournamentState], Optional[list[Team]]]:
    """Load and read a backup file (see ``restore_backup``)."""
    return restore_backup(load_json(path))
