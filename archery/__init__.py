from .models import MedalTable, RankingData, SetInProgress
from .schemas import (
    Backup,
    Match,
    SetScore,
    ShootOffScore,
    Team,
    TournamentConfig,
    TournamentState,
)
from .exceptions import (
    ArcheryError,
    MatchNotFoundError,
    PermissionDeniedError,
    StoreLoadError,
    StoreWriteError,
    TournamentValidationError,
)
from .scoring import build_set, parse_arrow, resolve_set_points
from .match import match_status, needs_shoot_off, settle
from .ranking import compute_rankings
from .schedule import GROUP_SCHEDULES, generate_group_matches
from .bracket import PLAYOFF_STRUCTURE, advance_stage, final_placings, generate_finals
from .tournament import (
    AddSet,
    ContinueMatch,
    DeleteLastSet,
    EditSet,
    GenerateFinals,
    RecordShootOff,
    ResetTournament,
    SetupTournament,
    UpdateTeams,
    find_match,
    reduce,
    settle_state,
)
from .store import HttpStore, JsonFileStore, KeyValueStore, MemoryStore, create_store
from .session import ScoringSession, TournamentController, score_link
from .backup import make_backup, restore_backup
from .export import results_csv, teams_csv, write_results_workbook

__all__ = [
    # Models
    'MedalTable',
    'RankingData',
    'SetInProgress',
    # Schemas
    'Backup',
    'Match',
    'SetScore',
    'ShootOffScore',
    'Team',
    'TournamentConfig',
    'TournamentState',
    # Errors
    'ArcheryError',
    'MatchNotFoundError',
    'PermissionDeniedError',
    'StoreLoadError',
    'StoreWriteError',
    'TournamentValidationError',
    # Scoring
    'build_set',
    'parse_arrow',
    'resolve_set_points',
    'match_status',
    'needs_shoot_off',
    'settle',
    'compute_rankings',
    # Schedule and bracket
    'GROUP_SCHEDULES',
    'generate_group_matches',
    'PLAYOFF_STRUCTURE',
    'advance_stage',
    'final_placings',
    'generate_finals',
    # Reducer actions
    'AddSet',
    'ContinueMatch',
    'DeleteLastSet',
    'EditSet',
    'GenerateFinals',
    'RecordShootOff',
    'ResetTournament',
    'SetupTournament',
    'UpdateTeams',
    'find_match',
    'reduce',
    'settle_state',
    # Persistence
    'HttpStore',
    'JsonFileStore',
    'KeyValueStore',
    'MemoryStore',
    'create_store',
    'ScoringSession',
    'TournamentController',
    'score_link',
    # Backup and export
    'make_backup',
    'restore_backup',
    'results_csv',
    'teams_csv',
    'write_results_workbook',
]
