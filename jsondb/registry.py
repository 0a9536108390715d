"""
Registry of open databases

A DatabaseRegistry owns the in-memory stores for one data directory. A store
is loaded from its snapshot the first time its name is requested and stays
cached until ``close`` evicts it, so later changes to the file on disk are not
observed. Every Collection handed out for the same name shares one store.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .collection import Collection
from .config import JsonDBConfig
from .engine.values import DocMap
from .errors import (
    DatabaseExistsError,
    DatabaseNotFoundError,
    DatabaseReadError,
    StoreUnavailable,
)
from .storage.snapshot import (
    SnapshotWriter,
    load_snapshot,
    normalize_db_name,
    snapshot_path,
)

logger = logging.getLogger(__name__)


class DatabaseRegistry:
    """Open databases of one data directory"""

    def __init__(
        self,
        data_dir: Union[str, Path],
        writer: Optional[SnapshotWriter] = None,
        create_missing: bool = False,
        max_workers: int = 4,
    ):
        self.data_dir = str(data_dir) if data_dir else ""
        self.create_missing = create_missing
        self._owns_writer = writer is None
        self.writer = writer if writer is not None else SnapshotWriter(max_workers=max_workers)
        self._stores: Dict[str, DocMap] = {}

    @classmethod
    def from_config(cls, config: JsonDBConfig) -> "DatabaseRegistry":
        return cls(
            config.storage.data_dir,
            create_missing=config.storage.create_missing,
            max_workers=config.storage.max_workers,
        )

    def __enter__(self) -> "DatabaseRegistry":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close_all()
        self.writer.flush()
        if self._owns_writer:
            self.writer.close()

    def _require_data_dir(self) -> None:
        if not self.data_dir:
            raise StoreUnavailable("Database directory is not set")

    def _collection(self, name: str) -> Collection:
        return Collection(
            name,
            self._stores[name],
            writer=self.writer,
            path=snapshot_path(self.data_dir, name),
        )

    def get(self, name: str) -> Collection:
        """Return the named database, loading it on first reference"""
        self._require_data_dir()
        name = normalize_db_name(name)

        if name not in self._stores:
            path = snapshot_path(self.data_dir, name)
            # a write queued before an earlier close must land before reloading
            self.writer.flush(path=path)
            try:
                store = load_snapshot(path, name)
            except DatabaseNotFoundError:
                if not self.create_missing:
                    logger.error(f'getDb :: Database not found: "{name}"')
                    raise
                logger.info(f"getDb :: Database created: {name}")
                self._stores[name] = {}
                collection = self._collection(name)
                collection.save()
                return collection
            except DatabaseReadError as e:
                logger.error(f"getDb :: {name}: {e.reason}")
                raise

            self._stores[name] = store
            logger.info(f"getDb :: Database loaded: {name}, Records: {len(store)}")

        return self._collection(name)

    def create(self, name: str) -> Collection:
        """Create a new, empty database and write its snapshot"""
        self._require_data_dir()
        name = normalize_db_name(name)

        if name in self._stores or snapshot_path(self.data_dir, name).exists():
            raise DatabaseExistsError(name)

        self._stores[name] = {}
        collection = self._collection(name)
        collection.save()
        logger.info(f"createDb :: Database created: {name}")
        return collection

    def is_open(self, name: str) -> bool:
        return normalize_db_name(name) in self._stores

    def names(self) -> List[str]:
        return list(self._stores)

    def close(self, name: str) -> bool:
        """Evict a database once its pending snapshot write has landed"""
        name = normalize_db_name(name)
        if name not in self._stores:
            logger.error(f"closeDb :: DB does not exist: {name}")
            return False

        del self._stores[name]
        if self.data_dir:
            self.writer.flush(path=snapshot_path(self.data_dir, name))
        return True

    def close_all(self) -> None:
        self._stores.clear()

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for pending snapshot writes"""
        return self.writer.flush(timeout)
