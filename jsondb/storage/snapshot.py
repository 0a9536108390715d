"""
Snapshot persistence for jsondb

Each database lives in one JSON file, ``<data_dir>/<name>.json``, holding an
object that maps document ids to documents.

Reads happen once, when a database is first opened. Writes are fire-and-forget:
SnapshotWriter runs them on a thread pool so the caller never waits. Writes to
the same file are serialized, and a snapshot queued while an earlier one is
still being written replaces any snapshot that has not started yet, so the
file always ends up with the most recent content.
"""

import json
import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..engine.values import DocMap
from ..errors import DatabaseNotFoundError, DatabaseReadError, PersistenceFailure

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".json"

ErrorHook = Callable[[PersistenceFailure], None]


def normalize_db_name(name: str) -> str:
    """Strip a trailing .json so 'users' and 'users.json' name the same database"""
    if name.endswith(SNAPSHOT_SUFFIX):
        return name[: -len(SNAPSHOT_SUFFIX)]
    return name


def snapshot_path(data_dir: Union[str, Path], name: str) -> Path:
    return Path(data_dir) / f"{normalize_db_name(name)}{SNAPSHOT_SUFFIX}"


def dump_snapshot(docs: DocMap) -> str:
    """Serialize a store to snapshot text"""
    return json.dumps(docs, ensure_ascii=False)


def load_snapshot(path: Union[str, Path], name: Optional[str] = None) -> DocMap:
    """Read and parse a snapshot file.

    Raises DatabaseNotFoundError when the file does not exist and
    DatabaseReadError when it cannot be read or is not an object of documents.
    """
    path = Path(path)
    name = name or normalize_db_name(path.name)

    if not path.exists():
        raise DatabaseNotFoundError(name)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise DatabaseReadError(name, str(e)) from e

    if not isinstance(data, dict):
        raise DatabaseReadError(name, "snapshot is not a JSON object")

    for doc_id, document in data.items():
        if not isinstance(document, dict):
            raise DatabaseReadError(name, f"entry {doc_id!r} is not a document")

    return data


def _log_failure(error: PersistenceFailure) -> None:
    logger.error(f"[snapshot-writer] {error.stage} {error.cause} for {error.filepath}")


class SnapshotWriter:
    """Background, per-file serialized snapshot writer"""

    def __init__(self, max_workers: int = 4, error_hook: Optional[ErrorHook] = None):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="jsondb-writer"
        )
        self._lock = threading.Lock()
        self._pending: Dict[str, str] = {}
        self._running: Dict[str, Future] = {}
        self._closed = False
        self.error_hook: ErrorHook = error_hook or _log_failure

    def __enter__(self) -> "SnapshotWriter":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def write_and_forget(self, path: Union[str, Path], content: str) -> None:
        """Queue ``content`` to be written to ``path`` and return immediately"""
        key = str(Path(path))

        with self._lock:
            if self._closed:
                closed_error = PersistenceFailure(key, "submit", RuntimeError("writer is closed"))
            else:
                closed_error = None
                self._pending[key] = content
                if key not in self._running:
                    self._running[key] = self._executor.submit(self._drain, key)

        if closed_error is not None:
            self._report(closed_error)

    def _drain(self, key: str) -> None:
        while True:
            with self._lock:
                content = self._pending.pop(key, None)
                if content is None:
                    del self._running[key]
                    return
            self._write(Path(key), content)

    def _write(self, path: Path, content: str) -> None:
        stage = "mkdir"
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            stage = "write"
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            # Atomic replace
            stage = "replace"
            os.replace(tmp_path, path)
        except Exception as e:
            self._report(PersistenceFailure(str(path), stage, e))

    def _report(self, error: PersistenceFailure) -> None:
        try:
            self.error_hook(error)
        except Exception:
            logger.exception(f"[snapshot-writer] error hook failed for {error.filepath}")

    def pending(self) -> int:
        """Number of files with a write queued or in progress"""
        with self._lock:
            return len(self._running)

    def flush(
        self, timeout: Optional[float] = None, path: Optional[Union[str, Path]] = None
    ) -> bool:
        """Wait for queued writes to finish, or only those for ``path``.

        Returns False on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        key = None if path is None else str(Path(path))

        while True:
            with self._lock:
                if key is None:
                    futures = list(self._running.values())
                else:
                    futures = [self._running[key]] if key in self._running else []
            if not futures:
                return True

            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False

            wait(futures, timeout=remaining)

    def close(self) -> None:
        """Finish queued writes and stop the worker threads"""
        if self._closed:
            return
        self.flush()
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True)
