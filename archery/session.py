"""Tournament controller and single-match scoring sessions.

TournamentController binds the reducer to a store: it loads the shared
documents, applies actions, and writes the whole tournament state back
after each one. ScoringSession is the direct-link scorer view of exactly
one match.
"""

import logging
import re
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .auth import check_admin_password
from .backup import make_backup, restore_backup
from .constants import ARROWS_PER_SET, REGISTERED_TEAMS_KEY, TOURNAMENT_STATE_KEY
from .exceptions import (
    MatchNotFoundError,
    PermissionDeniedError,
    StoreLoadError,
    StoreWriteError,
    TournamentValidationError,
)
from .match import match_status
from .models import RankingData, SetInProgress
from .ranking import compute_rankings
from .schemas import Backup, Match, Team, TournamentState
from .scoring import build_set, count_x10s, parse_arrow, set_total
from .store import KeyValueStore
from .teams import add_team, remove_team, team_name, update_team
from .tournament import Action, AddSet, RecordShootOff, UpdateTeams, find_match, reduce, settle_state

logger = logging.getLogger('archery.session')

_SCORE_PATH = re.compile(r'/score/(\d+)/?$')


def parse_tournament_state(raw: Any) -> Optional[TournamentState]:
    """
    Validate a stored tournament document.

    Derived totals, completion and stage progression are rebuilt from the
    stored arrows.

    Raises:
        StoreLoadError: If the payload is not a valid tournament state
    """
    if raw is None:
        return None
    try:
        state = TournamentState.model_validate(raw)
    except ValidationError as e:
        raise StoreLoadError(f'Malformed tournament state: {e}') from e
    return settle_state(state)


def parse_registered_teams(raw: Any) -> list[Team]:
    """
    Validate the stored registered teams.

    A single team object is accepted and wrapped in a list.

    Raises:
        StoreLoadError: If the payload is not a list of teams
    """
    if raw is None:
        return []
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        raise StoreLoadError(f'Malformed registered teams: expected a list, got {type(raw).__name__}')
    try:
        return [Team.model_validate(t) for t in raw if t is not None]
    except ValidationError as e:
        raise StoreLoadError(f'Malformed registered teams: {e}') from e


def dump_state(state: Optional[TournamentState]) -> Any:
    """Tournament state as stored JSON (None clears the key)."""
    if state is None:
        return None
    return state.model_dump(mode='json', by_alias=True)


def dump_teams(teams: list[Team]) -> list[dict]:
    return [t.model_dump(mode='json', by_alias=True) for t in teams]


def score_link(base_url: str, match_id: int) -> str:
    """Shareable locator that opens the scoring session of one match."""
    return f'{base_url.rstrip("/")}/score/{match_id}'


def parse_score_link(path: str) -> Optional[int]:
    """Match id from a ``/score/<id>`` locator, or None if it is not one."""
    found = _SCORE_PATH.search(path)
    return int(found.group(1)) if found else None


class TournamentController:
    """
    Shared tournament state bound to a store.

    Load failures block: ``state`` stays None and ``load_error`` is set until
    ``reload()`` succeeds. Write failures do not: the new state is kept in
    memory, ``write_error`` is set, and ``retry_save()`` sends it again.
    """

    def __init__(self, store: KeyValueStore, admin: bool = False):
        self.store = store
        self.admin = admin
        self.state: Optional[TournamentState] = None
        self.registered_teams: list[Team] = []
        self.load_error: Optional[str] = None
        self.write_error: Optional[str] = None
        self.loaded = False
        self._unsubscribers: list[Callable[[], None]] = []

    # ----- loading -----

    def load(self) -> Optional[TournamentState]:
        """
        Read both documents from the store.

        Raises:
            StoreLoadError: If the store is unreachable or a payload is malformed
        """
        try:
            state = parse_tournament_state(self.store.read(TOURNAMENT_STATE_KEY))
            teams = parse_registered_teams(self.store.read(REGISTERED_TEAMS_KEY))
        except StoreLoadError as e:
            logger.error(f'Failed to load tournament data: {e}')
            self.state = None
            self.loaded = False
            self.load_error = 'Could not load tournament data from server.'
            raise

        self.state = state
        self.registered_teams = teams
        self.load_error = None
        self.loaded = True
        logger.debug(f'Loaded tournament state (stage: {state.stage if state else "none"})')
        return state

    def reload(self) -> Optional[TournamentState]:
        """Manual reload after a load failure."""
        return self.load()

    def subscribe(self) -> None:
        """Follow store changes so the snapshot tracks other writers."""
        self._unsubscribers.append(
            self.store.subscribe(TOURNAMENT_STATE_KEY, self._on_state_change)
        )
        self._unsubscribers.append(
            self.store.subscribe(REGISTERED_TEAMS_KEY, self._on_teams_change)
        )

    def unsubscribe(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_state_change(self, raw: Any) -> None:
        try:
            self.state = parse_tournament_state(raw)
        except StoreLoadError as e:
            logger.error(f'Received malformed tournament state: {e}')
            self.state = None
            self.load_error = 'Could not load tournament data from server.'
        else:
            self.load_error = None
            self.loaded = True

    def _on_teams_change(self, raw: Any) -> None:
        try:
            self.registered_teams = parse_registered_teams(raw)
        except StoreLoadError as e:
            logger.error(f'Received malformed registered teams: {e}')
            self.registered_teams = []

    def _require_loaded(self) -> None:
        if self.load_error:
            raise StoreLoadError(self.load_error)

    # ----- admin gate -----

    def login(self, password: str) -> bool:
        """Unlock admin actions for this session."""
        self.admin = check_admin_password(password)
        return self.admin

    def logout(self) -> None:
        self.admin = False

    def _require_admin(self, what: str) -> None:
        if not self.admin:
            raise PermissionDeniedError(f'{what} requires admin access')

    # ----- writes -----

    def _write(self, key: str, value: Any) -> bool:
        try:
            self.store.write(key, value)
        except StoreWriteError as e:
            logger.error(f'Failed to save {key}: {e}')
            self.write_error = 'Could not save tournament data to server.'
            return False
        self.write_error = None
        return True

    def save_state(self) -> bool:
        """Write the whole tournament state. Returns False on a write failure."""
        return self._write(TOURNAMENT_STATE_KEY, dump_state(self.state))

    def save_teams(self) -> bool:
        """Write the registered teams. Returns False on a write failure."""
        return self._write(REGISTERED_TEAMS_KEY, dump_teams(self.registered_teams))

    def retry_save(self) -> bool:
        """Send the in-memory state again after a write failure."""
        return self.save_state() and self.save_teams()

    def dispatch(self, action: Action) -> Optional[TournamentState]:
        """
        Apply an action and persist the resulting state.

        Rejected actions raise and leave both the in-memory and stored state
        unchanged.
        """
        self._require_loaded()
        new_state = reduce(self.state, action, admin=self.admin)
        self.state = new_state
        self.save_state()
        return new_state

    # ----- derived views -----

    @property
    def rankings(self) -> list[RankingData]:
        return compute_rankings(self.state)

    def team_name(self, team_id: Optional[int]) -> str:
        return team_name(self.state, team_id)

    # ----- registered teams -----

    def _set_registered_teams(self, teams: list[Team]) -> list[Team]:
        self.registered_teams = teams
        self.save_teams()
        if self.state is not None:
            self.dispatch(UpdateTeams(teams=tuple(teams)))
        return teams

    def add_team(self, name: str, members: Optional[list[str]] = None) -> list[Team]:
        self._require_loaded()
        self._require_admin('Team management')
        return self._set_registered_teams(add_team(self.registered_teams, name, members))

    def update_team(self, team_id: int, **changes) -> list[Team]:
        self._require_loaded()
        self._require_admin('Team management')
        return self._set_registered_teams(update_team(self.registered_teams, team_id, **changes))

    def remove_team(self, team_id: int) -> list[Team]:
        self._require_loaded()
        self._require_admin('Team management')
        self.registered_teams = remove_team(self.registered_teams, team_id)
        self.save_teams()
        return self.registered_teams

    # ----- backup -----

    def backup(self) -> Backup:
        return make_backup(self.state, self.registered_teams)

    def restore(self, document: dict) -> None:
        """
        Replace state and teams from a backup document.

        Registered teams are only replaced when the backup has at least one.
        """
        self._require_admin('Restoring a backup')
        state, teams = restore_backup(document)
        if state is not None:
            self.state = state
            self.save_state()
        if teams is not None:
            self.registered_teams = teams
            self.save_teams()
        self.load_error = None
        logger.info('Backup restored')


class ScoringSession:
    """
    Scorer view of one match, opened through its direct link.

    Arrows are buffered per side until both sides have ten; ``save_set``
    commits the set through the controller. Closing the session without
    saving discards the buffered arrows.
    """

    def __init__(self, controller: TournamentController, match: Match):
        self.controller = controller
        self.match = match
        self.pending = SetInProgress()
        self.closed = False

    @classmethod
    def open(cls, controller: TournamentController, match_id: int) -> 'ScoringSession':
        """
        Start scoring a match from the controller's current snapshot.

        Raises:
            MatchNotFoundError: If the match does not exist or is already completed
        """
        if controller.state is None:
            raise MatchNotFoundError('Tournament data not found. Please set up a tournament first.')
        match = find_match(controller.state, match_id)
        if match.completed:
            raise MatchNotFoundError(f'Match {match_id} has already been completed.')
        logger.info(f'Scoring session opened for match {match_id}')
        return cls(controller, match)

    @property
    def team_a_name(self) -> str:
        return self.controller.team_name(self.match.team_a_id)

    @property
    def team_b_name(self) -> str:
        return self.controller.team_name(self.match.team_b_id)

    @property
    def status(self) -> str:
        return match_status(self.match)

    def _arrows(self, side: str) -> list:
        if side.upper() == 'A':
            return self.pending.team_a_arrows
        if side.upper() == 'B':
            return self.pending.team_b_arrows
        raise ValueError(f'Side must be A or B, got {side!r}')

    def add_arrow(self, side: str, value) -> None:
        """Enter the next arrow for one side; an eleventh arrow is ignored."""
        arrows = self._arrows(side)
        if len(arrows) < ARROWS_PER_SET:
            arrows.append(parse_arrow(value))

    def remove_last_arrow(self, side: str) -> None:
        arrows = self._arrows(side)
        if arrows:
            arrows.pop()

    def current_totals(self) -> dict[str, int]:
        """Live totals of the set being entered."""
        return {
            'team_a_total': set_total(self.pending.team_a_arrows),
            'team_b_total': set_total(self.pending.team_b_arrows),
            'team_a_x10s': count_x10s(self.pending.team_a_arrows),
            'team_b_x10s': count_x10s(self.pending.team_b_arrows),
        }

    @property
    def set_ready(self) -> bool:
        """Both sides have entered ten arrows."""
        return (
            len(self.pending.team_a_arrows) == ARROWS_PER_SET
            and len(self.pending.team_b_arrows) == ARROWS_PER_SET
        )

    def _refresh(self) -> None:
        self.match = find_match(self.controller.state, self.match.id)

    def save_set(self) -> Match:
        """
        Commit the buffered set.

        Raises:
            TournamentValidationError: If either side has fewer than ten arrows
                or the match cannot take another set
        """
        if not self.set_ready:
            raise TournamentValidationError(
                f'Both teams need {ARROWS_PER_SET} arrows before the set can be saved'
            )
        set_score = build_set(self.pending.team_a_arrows, self.pending.team_b_arrows)
        self.controller.dispatch(AddSet(match_id=self.match.id, set_score=set_score))
        self.pending = SetInProgress()
        self._refresh()
        return self.match

    def record_shoot_off(
        self,
        winner_side: str,
        team_a_arrow_score: Optional[str] = None,
        team_b_arrow_score: Optional[str] = None,
    ) -> Match:
        """Record the shoot-off winner ('A' or 'B') of a match tied 4-4."""
        side = winner_side.upper()
        if side not in ('A', 'B'):
            raise ValueError(f'Winner side must be A or B, got {winner_side!r}')
        winner_id = self.match.team_a_id if side == 'A' else self.match.team_b_id
        self.controller.dispatch(
            RecordShootOff(
                match_id=self.match.id,
                winner_id=winner_id,
                team_a_arrow_score=team_a_arrow_score,
                team_b_arrow_score=team_b_arrow_score,
            )
        )
        self._refresh()
        return self.match

    def cancel(self) -> None:
        """Close the session, discarding arrows that were not saved."""
        if self.pending.team_a_arrows or self.pending.team_b_arrows:
            logger.info(f'Scoring session for match {self.match.id} closed with unsaved arrows')
        self.pending = SetInProgress()
        self.closed = True
