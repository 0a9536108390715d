"""
File-backed persistence for jsondb: snapshot loading and background writes.
"""

from .snapshot import (
    SnapshotWriter,
    dump_snapshot,
    load_snapshot,
    normalize_db_name,
    snapshot_path,
)

__all__ = [
    "SnapshotWriter",
    "dump_snapshot",
    "load_snapshot",
    "normalize_db_name",
    "snapshot_path",
]
