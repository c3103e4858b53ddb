"""
Typed read views over stored records.

Each entry wraps the raw record dict (which stays the unit of storage) and
exposes its fields with defaults, the same way for every collection.
A post's body is either Markdown text or a reference to an uploaded PDF,
never both; PostBody models that as a tagged variant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from depman.core.errors import ValidationError


@dataclass
class CategoryEntry:
    """A catalog category."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return str(self.data.get("id", ""))

    @property
    def name(self) -> str:
        return str(self.data.get("name", self.id))

    @property
    def description(self) -> str:
        return str(self.data.get("description") or "")

    @property
    def icon(self) -> str | None:
        return self.data.get("icon")

    @property
    def color(self) -> str | None:
        return self.data.get("color")

    @property
    def platform(self) -> list[str]:
        return list(self.data.get("platform") or [])

    def matches(self, query: str | None = None, platform: str | None = None) -> bool:
        """Case-insensitive name/description search plus platform filter."""
        if query:
            query_lower = query.lower()
            if query_lower not in self.name.lower() and query_lower not in self.description.lower():
                return False
        if platform and platform != "all" and platform not in self.platform:
            return False
        return True


@dataclass
class DependencyEntry:
    """A library entry inside a category."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return str(self.data.get("id", ""))

    @property
    def category_id(self) -> str | None:
        return self.data.get("categoryId")

    @property
    def name(self) -> str:
        return str(self.data.get("name", self.id))

    @property
    def version(self) -> str | None:
        return self.data.get("version")

    @property
    def module(self) -> str | None:
        return self.data.get("module")

    @property
    def platform(self) -> str:
        return str(self.data.get("platform") or "common")

    @property
    def required(self) -> bool:
        return bool(self.data.get("required", False))

    @property
    def coordinate(self) -> str | None:
        """Module coordinate with the version appended, e.g. ``group:artifact:1.0``."""
        if not self.module:
            return None
        return f"{self.module}:{self.version}" if self.version else self.module


@dataclass(frozen=True)
class GuideStep:
    title: str
    content: str


@dataclass
class GuideEntry:
    """Setup guide for a category."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return str(self.data.get("id", ""))

    @property
    def category_id(self) -> str | None:
        return self.data.get("categoryId")

    @property
    def title(self) -> str:
        return str(self.data.get("title", self.id))

    @property
    def steps(self) -> list[GuideStep]:
        return [
            GuideStep(title=str(step.get("title", "")), content=str(step.get("content", "")))
            for step in self.data.get("steps") or []
        ]


@dataclass(frozen=True)
class MarkdownBody:
    text: str


@dataclass(frozen=True)
class PdfBody:
    url: str


PostBody = Union[MarkdownBody, PdfBody]


def body_from_payload(payload: dict[str, Any]) -> PostBody | None:
    """Read the body variant out of a post payload.

    Empty strings count as absent. Returns None when the payload carries no
    body at all.

    Raises:
        ValidationError: If both content and pdfUrl are set
    """
    content = payload.get("content") or None
    pdf_url = payload.get("pdfUrl") or None

    if content and pdf_url:
        raise ValidationError("A post has either content or pdfUrl, not both")
    if pdf_url:
        return PdfBody(url=pdf_url)
    if content:
        return MarkdownBody(text=content)
    return None


def apply_body(record: dict[str, Any], body: PostBody | None) -> dict[str, Any]:
    """Store *body* on *record*, removing the key of the other variant."""
    record.pop("content", None)
    record.pop("pdfUrl", None)
    if isinstance(body, PdfBody):
        record["pdfUrl"] = body.url
    elif isinstance(body, MarkdownBody):
        record["content"] = body.text
    return record


@dataclass
class PostEntry:
    """A blog post."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return str(self.data.get("id", ""))

    @property
    def title(self) -> str:
        return str(self.data.get("title", self.id))

    @property
    def author(self) -> str | None:
        return self.data.get("author")

    @property
    def excerpt(self) -> str:
        return str(self.data.get("excerpt") or "")

    @property
    def date(self) -> str | None:
        return self.data.get("date")

    @property
    def tags(self) -> list[str]:
        return list(self.data.get("tags") or [])

    @property
    def body(self) -> PostBody | None:
        """The post body; a stored PDF reference wins over stored text."""
        if self.data.get("pdfUrl"):
            return PdfBody(url=self.data["pdfUrl"])
        if self.data.get("content"):
            return MarkdownBody(text=self.data["content"])
        return None

    def matches(self, query: str | None = None, tag: str | None = None) -> bool:
        """Case-insensitive title/excerpt search plus tag filter."""
        if query:
            query_lower = query.lower()
            if query_lower not in self.title.lower() and query_lower not in self.excerpt.lower():
                return False
        if tag and tag not in self.tags:
            return False
        return True
