"""
core/errors.py -- Failure taxonomy shared by the directories and the API layer.

Directories raise these; route handlers catch DirectoryError and translate it
into an HTTP status. Nothing here knows about HTTP.
"""


class DirectoryError(Exception):
    """Base class for every failure a directory reports to its caller."""


class UnauthorizedError(DirectoryError):
    """Bad or missing credentials."""


class ForbiddenError(DirectoryError):
    """The acting user is neither the owner of the record nor an admin."""


class NotFoundError(DirectoryError):
    """No record with the requested id."""


class InvalidInputError(DirectoryError):
    """Malformed input, e.g. a price that is not a number."""


class ConflictError(DirectoryError):
    """A unique field (username) is already taken."""


class StorageError(DirectoryError):
    """The underlying store rejected the write."""
