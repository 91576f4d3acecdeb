"""
Typed failures raised by the store layer.

Each failure carries the HTTP status the API layer answers with; the message
string is the only detail that leaves the process.
"""


class PartnerDBError(Exception):
    """Base class for every failure the stores raise on purpose."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PartnerDBError):
    """The requested id / value / key does not exist."""
    status_code = 404


class DuplicateKeyError(PartnerDBError):
    """A record with the same identifier (or unique name) already exists."""
    status_code = 409


class DuplicateValueError(PartnerDBError):
    """The value already exists in the target vocabulary."""
    status_code = 409


class ValidationError(PartnerDBError, ValueError):
    """Missing required field, unknown column, or a forbidden transition."""
    status_code = 400


class AuthenticationError(PartnerDBError):
    """Unknown user or wrong password."""
    status_code = 401


class StoreError(PartnerDBError):
    """The database or the object store failed underneath us."""
    status_code = 500
