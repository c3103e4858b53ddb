"""
Catalog operations over categories, dependencies and guides.

Every call loads the catalog document fresh, works on it in memory and, for
writes, saves it back under the document's write lock. Dangling categoryId
references are tolerated everywhere: filtering by an unknown category gives
an empty list.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from depman.config.commands import store_options
from depman.core.config import SitePaths, get_paths
from depman.core.errors import NotFoundError, ValidationError
from depman.core.models import CategoryEntry
from depman.core.schema import (
    CATEGORY_SCHEMA,
    DEPENDENCY_SCHEMA,
    GUIDE_SCHEMA,
    check_payload,
    require_id,
    require_object,
)
from depman.core.slugs import slugify
from depman.core.store import CATALOG_COLLECTIONS, DocumentStore

Record = dict[str, Any]


def open_catalog(paths: SitePaths | None = None) -> DocumentStore:
    """Return the store for catalog_db.json under the data root."""
    if paths is None:
        paths = get_paths()
    return DocumentStore(
        paths.catalog_db,
        CATALOG_COLLECTIONS,
        backup_dir=paths.catalog_backups,
        **store_options(paths.config_file),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _derive_id(payload: Record, source_field: str) -> str:
    record_id = payload.get("id") or slugify(payload[source_field])
    if not record_id:
        raise ValidationError(f"Cannot derive an id from {source_field} {payload[source_field]!r}")
    return record_id


def _create(
    store: DocumentStore,
    collection: str,
    record_id: str,
    payload: Record,
    defaults: Record,
) -> Record:
    """Upsert a new record; defaults only fill in records that don't exist yet."""
    with store.edit() as doc:
        if doc.find_by_id(collection, record_id) is None:
            record = {"id": record_id, **defaults, **payload}
        else:
            record = dict(payload)
        record["id"] = record_id
        stored = doc.upsert(collection, record)
        return dict(stored)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def list_categories(
    store: DocumentStore,
    category_id: str | None = None,
    query: str | None = None,
    platform: str | None = None,
) -> list[Record]:
    """List categories, optionally narrowed to one id or by search/platform."""
    doc = store.load()
    if category_id:
        category = doc.find_by_id("categories", category_id)
        return [category] if category is not None else []
    return doc.filter_by(
        "categories",
        lambda record: CategoryEntry(record).matches(query=query, platform=platform),
    )


def create_category(store: DocumentStore, payload: Any) -> Record:
    payload = require_object(payload, "Category")
    check_payload(payload, CATEGORY_SCHEMA, "category")
    record_id = _derive_id(payload, "name")
    return _create(store, "categories", record_id, payload, {"description": "", "platform": []})


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def list_dependencies(store: DocumentStore, category_id: str | None = None) -> list[Record]:
    """List dependencies in insertion order, optionally for one category."""
    doc = store.load()
    if category_id:
        return doc.filter_by("dependencies", lambda record: record.get("categoryId") == category_id)
    return list(doc.collection("dependencies"))


def create_dependency(store: DocumentStore, payload: Any) -> Record:
    """Create a dependency; the id defaults to the slug of its name.

    Creating a second dependency whose name slugifies to an existing id
    merges into that record.
    """
    payload = require_object(payload, "Dependency")
    check_payload(payload, DEPENDENCY_SCHEMA, "dependency")
    record_id = _derive_id(payload, "name")
    return _create(
        store,
        "dependencies",
        record_id,
        payload,
        {"platform": "common", "required": False},
    )


def update_dependency(store: DocumentStore, payload: Any) -> Record:
    """Shallow-merge *payload* into the dependency with the same id.

    Raises:
        NotFoundError: If no dependency has that id (nothing is written)
    """
    payload = require_object(payload, "Dependency")
    record_id = require_id(payload, "Dependency")
    check_payload(payload, DEPENDENCY_SCHEMA, "dependency", partial=True)

    with store.edit() as doc:
        if doc.find_by_id("dependencies", record_id) is None:
            raise NotFoundError(f"Dependency not found: {record_id}")
        return dict(doc.upsert("dependencies", payload))


def dependency_counts(store: DocumentStore) -> dict[str, int]:
    """Number of dependencies per categoryId."""
    doc = store.load()
    counts = Counter(
        record.get("categoryId")
        for record in doc.collection("dependencies")
        if record.get("categoryId")
    )
    return dict(counts)


# ---------------------------------------------------------------------------
# Guides
# ---------------------------------------------------------------------------


def list_guides(store: DocumentStore, category_id: str | None = None) -> list[Record]:
    doc = store.load()
    if category_id:
        return doc.filter_by("guides", lambda record: record.get("categoryId") == category_id)
    return list(doc.collection("guides"))


def update_guide(store: DocumentStore, payload: Any) -> Record:
    """Merge *payload* into the guide with the same id.

    A guide that doesn't exist yet is created when the payload names its
    categoryId. Steps are replaced as a whole, never merged step by step.

    Raises:
        NotFoundError: If the guide is missing and no categoryId is given
    """
    payload = require_object(payload, "Guide")
    record_id = require_id(payload, "Guide")
    check_payload(payload, GUIDE_SCHEMA, "guide", partial=True)

    with store.edit() as doc:
        if doc.find_by_id("guides", record_id) is None and not payload.get("categoryId"):
            raise NotFoundError(f"Guide not found: {record_id}")
        return dict(doc.upsert("guides", payload))


def append_guide_step(
    store: DocumentStore,
    guide_id: str,
    step: Record,
    category_id: str | None = None,
    title: str | None = None,
) -> Record:
    """Append *step* to a guide, reading and writing under one lock.

    The guide is created when it doesn't exist and *category_id* is given.

    Raises:
        NotFoundError: If the guide is missing and no category_id is given
    """
    changes: Record = {"id": guide_id}
    if category_id is not None:
        changes["categoryId"] = category_id
    if title is not None:
        changes["title"] = title
    check_payload({**changes, "steps": [step]}, GUIDE_SCHEMA, "guide", partial=True)

    with store.edit() as doc:
        existing = doc.find_by_id("guides", guide_id)
        if existing is None and not category_id:
            raise NotFoundError(f"Guide not found: {guide_id}")
        steps = list(existing.get("steps") or []) if existing is not None else []
        changes["steps"] = [*steps, dict(step)]
        return dict(doc.upsert("guides", changes))
