"""Exception types raised by the storage layer and game services.

The request shell maps these to HTTP status codes; the services never
translate them into default values.
"""


class AlleyError(Exception):
    """Base class for all game errors."""


class NotFound(AlleyError):
    """A lookup by name, id or location yielded no record."""

    def __init__(self, kind: str, key):
        super().__init__(f"{kind} not found: {key!r}")
        self.kind = kind
        self.key = key


class EntityNotFound(NotFound):
    """Ordinal selection fell outside the stored rows (e.g. nothing stored)."""


class StorageError(AlleyError):
    """Persistence failed (connectivity, constraint, driver error)."""


class DuplicateUser(StorageError):
    def __init__(self, name: str):
        super().__init__(f"user already exists: {name!r}")
        self.name = name
