"""Id generation from free text."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Convert free text to a URL-safe id.

    Lowercase, collapse every run of characters outside ``[a-z0-9]`` into a
    single hyphen, and strip leading/trailing hyphens. Used for every record
    kind, so ``"Ktor Client"`` becomes ``"ktor-client"`` whether it names a
    dependency, a category or a post.
    """
    return _NON_ALNUM.sub("-", text.lower()).strip("-")
