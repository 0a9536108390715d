"""
jsondb: an embedded JSON document database
Documents live in memory, are queried and updated through a small operator
language, and are written back to one JSON file per database in the background.
"""

__version__ = "1.0.0"
__author__ = "jsondb Team"

from .collection import Collection, InsertOptions, RemoveOptions, UpdateOptions
from .config import JsonDBConfig, StorageConfig, LoggingConfig
from .registry import DatabaseRegistry
from .api import DatabaseApi, call_db_action
from .storage import SnapshotWriter
from .errors import (
    JsonDBError,
    ValidationError,
    OperationRefused,
    StoreUnavailable,
    DatabaseNotFoundError,
    DatabaseReadError,
    DatabaseExistsError,
    PersistenceFailure,
)

__all__ = [
    'Collection',
    'InsertOptions',
    'RemoveOptions',
    'UpdateOptions',
    'JsonDBConfig',
    'StorageConfig',
    'LoggingConfig',
    'DatabaseRegistry',
    'DatabaseApi',
    'call_db_action',
    'SnapshotWriter',
    'JsonDBError',
    'ValidationError',
    'OperationRefused',
    'StoreUnavailable',
    'DatabaseNotFoundError',
    'DatabaseReadError',
    'DatabaseExistsError',
    'PersistenceFailure',
]
