"""
Shared test fixtures for the jsondb test suite.
"""
import copy
import json
import logging

import pytest

from jsondb.collection import Collection
from jsondb.registry import DatabaseRegistry
from jsondb.storage.snapshot import SnapshotWriter

SAMPLE_DOCS = {
    "1": {"_id": "1", "name": "foo", "val": 1, "vals": [1], "active": True},
    "2": {"_id": "2", "name": "bar", "val": 2, "vals": [1, 2], "active": False},
    "3": {"_id": "3", "name": "Baz", "val": 3, "vals": [], "nested": {"a": 1}},
    "4": {"_id": "4", "name": "qux", "val": "4", "nothing": None},
}


@pytest.fixture
def sample_docs():
    """Fresh copy of the sample documents for each test."""
    return copy.deepcopy(SAMPLE_DOCS)


@pytest.fixture
def collection(sample_docs):
    """In-memory collection with no persistence."""
    return Collection("sample", sample_docs)


@pytest.fixture
def data_dir(tmp_path):
    """Data directory holding a 'sample' database snapshot."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "sample.json").write_text(json.dumps(SAMPLE_DOCS), encoding="utf-8")
    return directory


@pytest.fixture
def writer():
    """Snapshot writer that is shut down after the test."""
    snapshot_writer = SnapshotWriter(max_workers=2)
    yield snapshot_writer
    snapshot_writer.close()


@pytest.fixture
def registry(data_dir):
    """Registry over the sample data directory."""
    db_registry = DatabaseRegistry(data_dir)
    yield db_registry
    db_registry.flush()
    db_registry.writer.close()


@pytest.fixture
def error_log(caplog):
    """Capture ERROR records from jsondb loggers."""
    caplog.set_level(logging.ERROR, logger="jsondb")
    return caplog
