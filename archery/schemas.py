"""Pydantic schemas for persisted tournament documents.

Field names are snake_case; aliases keep the key names used by the web
client so stored documents and backups round-trip unchanged.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import ARROWS_PER_SET, BACKUP_VERSION

ArrowValue = Literal['X', 10, 9, 8, 7, 6, 5, 'M']
MatchStage = Literal['group', 'semifinal', 'bronze', 'gold']
TournamentStage = Literal['setup', 'group', 'playoffs', 'finished']
HistoryAction = Literal['set_added', 'set_edited', 'set_deleted', 'match_completed']


class Team(BaseModel):
    """Registered team."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    color: Optional[str] = None
    members: list[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Reject blank team names."""
        if not v.strip():
            raise ValueError('Team name is required')
        return v.strip()

    class Config:
        extra = 'ignore'


class SetScore(BaseModel):
    """One completed set: ten arrows per side and the resulting set points."""

    team_a_arrows: list[ArrowValue] = Field(..., alias='teamA_arrows')
    team_b_arrows: list[ArrowValue] = Field(..., alias='teamB_arrows')
    team_a_set_total: int = Field(..., ge=0, alias='teamA_set_total')
    team_b_set_total: int = Field(..., ge=0, alias='teamB_set_total')
    team_a_x10s: int = Field(..., ge=0, alias='teamA_x10s')
    team_b_x10s: int = Field(..., ge=0, alias='teamB_x10s')
    team_a_set_points: int = Field(..., ge=0, le=2, alias='teamA_set_points')
    team_b_set_points: int = Field(..., ge=0, le=2, alias='teamB_set_points')

    @field_validator('team_a_arrows', 'team_b_arrows')
    @classmethod
    def validate_arrow_count(cls, v):
        """Ensure each side shot a full set."""
        if len(v) != ARROWS_PER_SET:
            raise ValueError(f'A set needs exactly {ARROWS_PER_SET} arrows per team, got {len(v)}')
        return v

    class Config:
        frozen = True
        populate_by_name = True
        extra = 'ignore'


class ShootOffScore(BaseModel):
    """Shoot-off outcome: exactly one side is flagged as the winner."""

    team_a_winner: Literal[0, 1] = Field(..., alias='teamA_winner')
    team_b_winner: Literal[0, 1] = Field(..., alias='teamB_winner')
    team_a_arrow_score: Optional[str] = Field(None, alias='teamA_arrow_score')
    team_b_arrow_score: Optional[str] = Field(None, alias='teamB_arrow_score')

    class Config:
        frozen = True
        populate_by_name = True
        extra = 'ignore'


class EditHistoryEntry(BaseModel):
    """Entry in a match's append-only edit log."""

    timestamp: str
    action: HistoryAction
    set_index: Optional[int] = Field(None, ge=0, alias='setIndex')
    details: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True
        extra = 'ignore'


class Match(BaseModel):
    """A match between two teams.

    The ``*_total`` fields are a projection of ``sets`` (plus the shoot-off
    point) and are rebuilt by ``archery.match.recompute_totals``.
    """

    id: int = Field(..., ge=1)
    team_a_id: int = Field(..., alias='teamA_id')
    team_b_id: int = Field(..., alias='teamB_id')
    sets: list[SetScore] = Field(default_factory=list)
    stage: MatchStage = 'group'
    label: Optional[str] = None
    completed: bool = False
    winner_id: Optional[int] = None
    is_shoot_off: bool = Field(False, alias='isShootOff')
    shoot_off_score: Optional[ShootOffScore] = Field(None, alias='shootOffScore')
    team_a_set_points_total: int = Field(0, alias='teamA_set_points_total')
    team_b_set_points_total: int = Field(0, alias='teamB_set_points_total')
    team_a_arrow_score_total: int = Field(0, alias='teamA_arrow_score_total')
    team_b_arrow_score_total: int = Field(0, alias='teamB_arrow_score_total')
    team_a_x10s_total: int = Field(0, alias='teamA_x10s_total')
    team_b_x10s_total: int = Field(0, alias='teamB_x10s_total')
    edit_history: list[EditHistoryEntry] = Field(default_factory=list, alias='editHistory')

    class Config:
        populate_by_name = True
        extra = 'ignore'


class TournamentState(BaseModel):
    """The shared tournament document."""

    id: Optional[str] = None
    name: Optional[str] = None
    date: Optional[str] = None
    stage: TournamentStage = 'setup'
    teams: list[Team] = Field(default_factory=list)
    group_matches: list[Match] = Field(default_factory=list, alias='groupMatches')
    playoff_matches: list[Match] = Field(default_factory=list, alias='playoffMatches')

    class Config:
        populate_by_name = True
        extra = 'ignore'


class Backup(BaseModel):
    """Backup document holding the tournament and the registered teams."""

    version: str = BACKUP_VERSION
    timestamp: str
    tournament_state: Optional[TournamentState] = Field(None, alias='tournamentState')
    registered_teams: list[Team] = Field(default_factory=list, alias='registeredTeams')

    class Config:
        populate_by_name = True
        extra = 'allow'


class TournamentConfig(BaseModel):
    """Runtime configuration."""

    admin_password: str = Field('', description='Shared secret for admin actions')
    store_backend: Literal['file', 'http', 'memory'] = 'file'
    data_dir: str = 'data/store'
    store_url: Optional[str] = None
    store_timeout: float = Field(10.0, gt=0)
    backup_dir: str = 'backups'
    log_dir: str = 'logs'
    log_level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR'] = 'INFO'
    score_link_base_url: str = 'http://localhost'

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        """Accept level names in any case."""
        return v.upper() if isinstance(v, str) else v

    @field_validator('store_url')
    @classmethod
    def validate_store_url(cls, v):
        """Strip the trailing slash so keys can be appended."""
        if v is None:
            return v
        if not v.startswith(('http://', 'https://')):
            raise ValueError(f'Store URL must be http(s): {v}')
        return v.rstrip('/')

    class Config:
        extra = 'forbid'

