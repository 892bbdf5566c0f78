"""Exceptions raised by the scoring engine.

NotFoundError and InvalidStateError are caller-visible and never retried.
Degenerate inputs (zero targets, zero-range goals) are not errors and never
raise; best-effort side effects are logged and suppressed in
services.background_tasks.
"""


class LifeScoreError(Exception):
    """Base class for engine errors."""
    pass


class NotFoundError(LifeScoreError):
    """Referenced habit/goal/system does not exist or belongs to another user."""
    pass


class InvalidStateError(LifeScoreError):
    """The requested operation conflicts with the current state."""
    pass


class OutOfFreezesError(InvalidStateError):
    """Streak freeze requested with no freezes left."""
    pass


class AlreadyLoggedError(InvalidStateError):
    """A check-in already exists for the requested day."""
    pass
