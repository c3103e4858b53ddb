"""
Blog post operations.

Posts live in their own document (blog_db.json). A post id is always the
slug of its title, and the creation date is stamped once and carried through
later updates.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from depman.config.commands import store_options
from depman.core.config import SitePaths, get_paths
from depman.core.errors import NotFoundError, ValidationError
from depman.core.models import PostEntry, apply_body, body_from_payload
from depman.core.schema import POST_SCHEMA, check_payload, require_id, require_object
from depman.core.slugs import slugify
from depman.core.store import BLOG_COLLECTIONS, DocumentStore

Record = dict[str, Any]

BODY_KEYS = ("content", "pdfUrl")


def open_blog(paths: SitePaths | None = None) -> DocumentStore:
    """Return the store for blog_db.json under the data root."""
    if paths is None:
        paths = get_paths()
    return DocumentStore(
        paths.blog_db,
        BLOG_COLLECTIONS,
        backup_dir=paths.blog_backups,
        **store_options(paths.config_file),
    )


def iso_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision, e.g. 2026-01-05T10:00:00.000Z."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def list_posts(
    store: DocumentStore,
    post_id: str | None = None,
    query: str | None = None,
    tag: str | None = None,
) -> list[Record]:
    """List posts in storage order; with *post_id*, a list of zero or one."""
    doc = store.load()
    if post_id:
        post = doc.find_by_id("posts", post_id)
        return [post] if post is not None else []
    return doc.filter_by("posts", lambda record: PostEntry(record).matches(query=query, tag=tag))


def get_post(store: DocumentStore, post_id: str) -> Record:
    post = store.load().find_by_id("posts", post_id)
    if post is None:
        raise NotFoundError(f"Post not found: {post_id}")
    return post


def create_post(store: DocumentStore, payload: Any, now: datetime | None = None) -> Record:
    """Create a post from *payload*.

    The id is derived from the title (any id in the payload is ignored) and
    the date is stamped now. A title that slugifies to an existing id merges
    into that post.
    """
    payload = require_object(payload, "Post")
    check_payload(payload, POST_SCHEMA, "post")
    body = body_from_payload(payload)

    record_id = slugify(payload["title"])
    if not record_id:
        raise ValidationError(f"Cannot derive an id from title {payload['title']!r}")

    record = {"id": record_id, **payload}
    record["id"] = record_id
    record["date"] = iso_timestamp(now)
    apply_body(record, body)

    with store.edit() as doc:
        existing = doc.find_by_id("posts", record_id)
        if existing is not None and body is not None:
            apply_body(existing, body)
        return dict(doc.upsert("posts", record))


def update_post(store: DocumentStore, payload: Any) -> Record:
    """Shallow-merge *payload* into the post with the same id.

    The stored date is kept unless the payload carries one. Setting either
    body field replaces the whole body, so a post never ends up holding both
    content and pdfUrl.

    Raises:
        NotFoundError: If no post has that id (nothing is written)
    """
    payload = require_object(payload, "Post")
    record_id = require_id(payload, "Post")
    check_payload(payload, POST_SCHEMA, "post", partial=True)

    touches_body = any(key in payload for key in BODY_KEYS)
    body = body_from_payload(payload) if touches_body else None
    update = {key: value for key, value in payload.items() if key not in BODY_KEYS}

    with store.edit() as doc:
        existing = doc.find_by_id("posts", record_id)
        if existing is None:
            raise NotFoundError(f"Post not found: {record_id}")
        if touches_body:
            apply_body(existing, body)
        return dict(doc.upsert("posts", update))
