"""
Flat-file document store.

A document is one JSON object whose top-level keys name collections (lists of
record dicts). The whole document is read on every load and rewritten on every
save; there is no per-record storage and no cache between calls.

Reads fail open: a missing, unreadable or corrupt file loads as an empty
document. Writes are atomic (temp file + rename) and raise StorageError on
failure.
"""

from __future__ import annotations

import contextlib
import json
import logging
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from depman.core.backup import DEFAULT_KEEP_COUNT, DEFAULT_KEEP_DAYS, safe_write_json
from depman.core.errors import StorageError

logger = logging.getLogger(__name__)

Record = dict[str, Any]

CATALOG_COLLECTIONS = ("categories", "dependencies", "guides")
BLOG_COLLECTIONS = ("posts",)

# One lock per resolved document path, shared by every store in the process.
_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.Lock()
        return _locks[key]


class Document:
    """In-memory view of a loaded document."""

    def __init__(self, data: dict[str, Any], collections: tuple[str, ...]):
        self._data = data
        self.collections = collections

    @classmethod
    def empty(cls, collections: tuple[str, ...]) -> Document:
        return cls({name: [] for name in collections}, collections)

    def collection(self, name: str) -> list[Record]:
        """Return the live record list for *name*.

        Raises:
            KeyError: If *name* is not a collection of this document
        """
        if name not in self.collections:
            raise KeyError(f"Unknown collection: {name}")
        return self._data.setdefault(name, [])

    def find_by_id(self, collection: str, record_id: str) -> Record | None:
        """Return the first record whose id equals *record_id*."""
        for record in self.collection(collection):
            if record.get("id") == record_id:
                return record
        return None

    def filter_by(self, collection: str, predicate: Callable[[Record], bool]) -> list[Record]:
        """Return every matching record, in storage order."""
        return [record for record in self.collection(collection) if predicate(record)]

    def upsert(self, collection: str, record: Record) -> Record:
        """Merge *record* over the one with the same id, or append it.

        The merge is shallow: keys in *record* replace the stored values
        wholesale, other stored keys survive. The merged record keeps its
        position in the collection.

        Raises:
            ValueError: If *record* has no id
        """
        record_id = record.get("id")
        if not record_id:
            raise ValueError("Cannot upsert a record without an id")

        existing = self.find_by_id(collection, record_id)
        if existing is not None:
            existing.update(record)
            return existing

        stored = dict(record)
        self.collection(collection).append(stored)
        return stored

    def __len__(self) -> int:
        return sum(len(self.collection(name)) for name in self.collections)

    def to_dict(self) -> dict[str, Any]:
        return self._data


class DocumentStore:
    """Loads and saves one JSON document with whole-document semantics."""

    def __init__(
        self,
        path: Path,
        collections: tuple[str, ...],
        backup_dir: Path | None = None,
        create_backups: bool = True,
        keep_backups: int = DEFAULT_KEEP_COUNT,
        keep_days: int | None = DEFAULT_KEEP_DAYS,
    ):
        self.path = Path(path)
        self.collections = tuple(collections)
        self.backup_dir = backup_dir
        self.create_backups = create_backups
        self.keep_backups = keep_backups
        self.keep_days = keep_days

    @property
    def name(self) -> str:
        return self.path.stem

    def load(self) -> Document:
        """Read the document fresh from disk.

        Missing, unreadable or malformed files give an empty document.
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.debug("No document at %s, starting empty", self.path)
            return Document.empty(self.collections)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Error reading %s, loading empty document: %s", self.path, e)
            return Document.empty(self.collections)

        if not isinstance(data, dict):
            logger.warning("Document %s is not a JSON object, loading empty document", self.path)
            return Document.empty(self.collections)

        for name in self.collections:
            records = data.get(name)
            if not isinstance(records, list):
                data[name] = []
                continue
            kept = [record for record in records if isinstance(record, dict)]
            if len(kept) != len(records):
                logger.warning(
                    "Dropping %d non-object entries from %s in %s",
                    len(records) - len(kept), name, self.path,
                )
                data[name] = kept

        return Document(data, self.collections)

    def save(self, doc: Document) -> None:
        """Replace the persisted document with *doc*.

        Raises:
            StorageError: If the document cannot be serialized or written
        """
        try:
            safe_write_json(
                self.path,
                doc.to_dict(),
                create_backup_first=self.create_backups,
                backup_dir=self.backup_dir,
                keep_backups=self.keep_backups,
                keep_days=self.keep_days,
            )
        except (OSError, ValueError) as e:
            logger.error("Error writing %s: %s", self.path, e)
            raise StorageError(f"Failed to save {self.name}") from e

        logger.debug("Saved %s (%d records)", self.path, len(doc))

    @contextlib.contextmanager
    def edit(self) -> Iterator[Document]:
        """Load, yield for mutation, then save, holding the path's write lock.

        Nothing is saved if the block raises.
        """
        with _lock_for(self.path):
            doc = self.load()
            yield doc
            self.save(doc)
