"""
Collection: the public API over one named document store

A Collection wraps the id -> document dict of a database and runs every
operation through the engine: queries are validated, evaluated, and the
matches are projected, updated or deleted. Write operations hand a snapshot
to the SnapshotWriter unless the caller passes ``skip_save``.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .engine.ids import make_id
from .engine.projection import project
from .engine.query import query_ids, query_one_id
from .engine.update import apply_update
from .engine.values import ID_FIELD, DocMap, Document, deep_copy, describe_type, is_value
from .errors import OperationRefused, ValidationError
from .storage.snapshot import SnapshotWriter, dump_snapshot

logger = logging.getLogger(__name__)

Query = Dict[str, Any]
Projection = Dict[str, Any]
Update = Dict[str, Any]


@dataclass
class InsertOptions:
    skip_save: bool = False

    @classmethod
    def from_value(cls, value: Union["InsertOptions", Mapping[str, Any], None]):
        """Build options from an instance, a plain mapping or None"""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if not isinstance(value, Mapping):
            raise ValidationError(f"Options must be an object. Given: {describe_type(value)}")

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, option in value.items():
            name = "skip_save" if key == "skipSave" else key
            if name in known:
                kwargs[name] = bool(option)
        return cls(**kwargs)


@dataclass
class RemoveOptions(InsertOptions):
    multi: bool = False


@dataclass
class UpdateOptions(InsertOptions):
    multi: bool = False


class Collection:
    """Document store bound to a database name"""

    def __init__(
        self,
        name: str,
        docs: Optional[DocMap] = None,
        writer: Optional[SnapshotWriter] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        self.name = name
        self.docs: DocMap = docs if docs is not None else {}
        self.writer = writer
        self.path = Path(path) if path is not None else None

    def __len__(self) -> int:
        return len(self.docs)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self.docs

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, documents={len(self.docs)})"

    # ----- Read -----
    def count(self, query: Query) -> int:
        """Count the documents matching ``query``"""
        return len(query_ids(self.docs, query))

    def find(self, query: Query, projection: Optional[Projection] = None) -> List[Document]:
        """Return projected copies of all matching documents, in store order"""
        projection = {} if projection is None else projection
        results = []
        for doc_id in query_ids(self.docs, query):
            document = project(self.docs[doc_id], projection)
            if document is None:
                return []
            results.append(document)
        return results

    def find_one(
        self, query: Query, projection: Optional[Projection] = None
    ) -> Optional[Document]:
        """Return a projected copy of the first matching document, or None"""
        doc_id = query_one_id(self.docs, query)
        if not doc_id:
            return None
        return project(self.docs[doc_id], {} if projection is None else projection)

    # ----- Insert -----
    def insert(self, doc: Any, options: Any = None) -> str:
        """Insert a copy of ``doc``.

        Returns the id of the new document, or an empty string when the
        document is rejected.
        """
        try:
            opts = InsertOptions.from_value(options)
            doc_id = self._insert_document(doc)
        except (ValidationError, OperationRefused) as e:
            logger.error(f"insert :: {e}")
            return ""

        if not opts.skip_save:
            self.save()

        return doc_id

    def _insert_document(self, doc: Any) -> str:
        if not isinstance(doc, dict):
            raise ValidationError(
                f"The document being inserted is not an object. Given: {describe_type(doc)}"
            )

        bad_keys = [key for key in doc if not isinstance(key, str) or key.startswith("$")]
        if bad_keys:
            raise ValidationError(f"Field names must not start with '$'. Given: {bad_keys}")

        if not is_value(doc):
            raise ValidationError("The document being inserted holds a value that is not JSON")

        doc_id = doc.get(ID_FIELD)
        if isinstance(doc_id, str) and doc_id:
            if doc_id in self.docs:
                raise OperationRefused(f"The _id is not unique. Given: {doc_id}")
            self.docs[doc_id] = deep_copy(doc)
            return doc_id

        doc_id = make_id(self.docs)
        stored = deep_copy(doc)
        stored[ID_FIELD] = doc_id
        self.docs[doc_id] = stored
        return doc_id

    # ----- Remove -----
    def remove(self, query: Query, options: Any = None) -> int:
        """Remove matching documents; more than one requires ``multi``"""
        try:
            opts = RemoveOptions.from_value(options)
            ids = self._ids_for_write(query, opts.multi, "remove")
        except (ValidationError, OperationRefused) as e:
            logger.error(f"remove :: {e}")
            return 0

        if not ids:
            return 0

        for doc_id in ids:
            del self.docs[doc_id]

        if not opts.skip_save:
            self.save()

        return len(ids)

    # ----- Update -----
    def update(self, query: Query, update: Update, options: Any = None) -> int:
        """Apply ``update`` to matching documents; more than one requires ``multi``.

        Returns the number of documents that changed.
        """
        try:
            opts = UpdateOptions.from_value(options)
            ids = self._ids_for_write(query, opts.multi, "update")
        except (ValidationError, OperationRefused) as e:
            logger.error(f"update :: {e}")
            return 0

        num_updated = 0
        for doc_id in ids:
            num_updated += apply_update(self.docs[doc_id], update)

        if num_updated > 0 and not opts.skip_save:
            self.save()

        return num_updated

    def _ids_for_write(self, query: Query, multi: bool, action: str) -> List[str]:
        ids = query_ids(self.docs, query)
        if len(ids) > 1 and not multi:
            raise OperationRefused(f"Cannot {action} multiple docs without: {{multi: true}}")
        return ids

    # ----- Persistence -----
    def save(self) -> None:
        """Hand a snapshot of the store to the writer without waiting for it"""
        if self.writer is None or self.path is None:
            logger.debug(f"save :: no writer configured for {self.name}, skipping")
            return
        try:
            content = dump_snapshot(self.docs)
        except (TypeError, ValueError) as e:
            logger.error(f"save :: {self.name} cannot be serialized: {e}")
            return
        self.writer.write_and_forget(self.path, content)
