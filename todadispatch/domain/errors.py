"""
Dispatch error taxonomy.

Every rejected request raises one of these *before* touching any state,
so the coordinator is always left as it was.
"""


class DispatchError(Exception):
    """Base class for all coordinator failures."""


class ValidationError(DispatchError):
    """Malformed request (empty origin, zero passengers, bad fare ...)."""


class NotFoundError(DispatchError):
    """Referenced vehicle or trip is not in the expected collection."""


class ConflictError(DispatchError):
    """Request is well-formed but conflicts with the current fleet state."""


class DuplicatePlateError(ConflictError):
    pass


class VehicleBusyError(ConflictError):
    """Vehicle already has an active trip."""


class InvalidStateTransition(ConflictError):
    """Raised when a trip status change violates the state machine."""


class InvariantViolation(DispatchError):
    """Roster / queue / ledger disagree with each other."""


class PersistenceError(DispatchError):
    """Snapshot is unreadable, corrupt or internally inconsistent."""


class ConsistencyWarning(UserWarning):
    """Non-fatal drift, surfaced for audit only."""
