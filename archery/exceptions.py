"""Exceptions raised by the tournament engine and its collaborators."""


class ArcheryError(Exception):
    """Base exception for all tournament manager errors."""


class TournamentValidationError(ArcheryError, ValueError):
    """Raised when a requested action violates a tournament rule.

    The tournament state is left unchanged and the message names the
    constraint that was violated.
    """


class MatchNotFoundError(ArcheryError, LookupError):
    """Raised when a match id does not exist or cannot be opened for scoring."""


class PermissionDeniedError(ArcheryError, PermissionError):
    """Raised when an admin-only action is attempted without admin privilege."""


class StoreLoadError(ArcheryError):
    """Raised when the store is unreachable or returns a malformed payload."""


class StoreWriteError(ArcheryError):
    """Raised when the store rejects a write."""
