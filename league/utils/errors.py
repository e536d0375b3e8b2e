"""
Error taxonomy for the betting league.

Validation, capacity and authorization errors are recovered locally by the
caller (no mutation happens). Persistence errors come from the ledger store;
durable writes that fail are logged and reported through the write status
instead of being raised to the caller.
"""


class LeagueError(Exception):
    """Base class for all league errors"""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.message}


class ValidationError(LeagueError):
    """A candidate pick failed a schema rule"""


class CapacityError(LeagueError):
    """Both slots for a date are already filled"""

    status_code = 409


class AuthorizationError(LeagueError):
    """Identity may not mutate the target participant's ledger"""

    status_code = 403


class UnknownParticipantError(LeagueError):
    """Name is not part of the configured roster"""

    status_code = 404


class PersistenceError(LeagueError):
    """Reading from or writing to the ledger store failed"""

    status_code = 503


class ConflictError(PersistenceError):
    """Stored ledger version changed since it was last read"""
