"""
Error hierarchy for jsondb

ValidationError and OperationRefused describe problems the engine recovers
from locally: the operation returns an empty, zero or absent result and logs a
diagnostic. StoreUnavailable propagates to the caller. PersistenceFailure is
only ever handed to a SnapshotWriter error hook.
"""


class JsonDBError(Exception):
    """Base class for jsondb errors."""


class ValidationError(JsonDBError):
    """Malformed query, projection, update or document."""


class OperationRefused(JsonDBError):
    """Well-formed operation that is forbidden by store policy."""


class StoreUnavailable(JsonDBError):
    """Requested database is missing or cannot be read."""


class DatabaseNotFoundError(StoreUnavailable):
    """No snapshot exists for the requested database."""

    def __init__(self, name: str):
        super().__init__("Database not found")
        self.name = name


class DatabaseReadError(StoreUnavailable):
    """Snapshot exists but cannot be read or parsed."""

    def __init__(self, name: str, reason: str = ""):
        super().__init__("Database read failed")
        self.name = name
        self.reason = reason


class DatabaseExistsError(StoreUnavailable):
    """A database with this name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Database already exists: {name}")
        self.name = name


class PersistenceFailure(JsonDBError):
    """Writing a snapshot to disk failed."""

    def __init__(self, filepath: str, stage: str, cause: BaseException):
        super().__init__(f"{stage} failed for {filepath}: {cause}")
        self.filepath = filepath
        self.stage = stage
        self.cause = cause
