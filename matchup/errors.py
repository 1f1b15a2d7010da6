"""Ledger errors. Each carries the HTTP status the API answers with."""


class LedgerError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LedgerError):
    """Tournament, code or player does not exist."""

    status_code = 404


class Conflict(LedgerError):
    """Duplicate registration, full tournament, name taken, creator limit reached."""


class InvalidInput(LedgerError):
    """Rating out of range or malformed field."""


class StateConflict(LedgerError):
    """Operation needs an open tournament."""


class NotCreator(LedgerError):
    status_code = 403


class RatingLookupFailed(LedgerError):
    """Rating service failed for a reason other than a refused key or a missing player."""

    status_code = 502
