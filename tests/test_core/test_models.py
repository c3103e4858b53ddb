"""Tests for depman.core.models module."""

import pytest

from depman.core.errors import ValidationError
from depman.core.models import (
    CategoryEntry,
    DependencyEntry,
    GuideEntry,
    GuideStep,
    MarkdownBody,
    PdfBody,
    PostEntry,
    apply_body,
    body_from_payload,
)


class TestCategoryEntry:
    def test_defaults(self):
        entry = CategoryEntry({"id": "ui"})
        assert entry.name == "ui"
        assert entry.description == ""
        assert entry.platform == []
        assert entry.icon is None

    def test_matches_query_in_name_or_description(self, sample_catalog):
        entry = CategoryEntry(sample_catalog["categories"][0])
        assert entry.matches(query="network")
        assert entry.matches(query="HTTP")
        assert not entry.matches(query="database")

    def test_matches_platform(self, sample_catalog):
        entry = CategoryEntry(sample_catalog["categories"][1])
        assert entry.matches(platform="android")
        assert not entry.matches(platform="ios")
        assert entry.matches(platform="all")
        assert entry.matches()


class TestDependencyEntry:
    def test_fields(self, sample_catalog):
        entry = DependencyEntry(sample_catalog["dependencies"][0])
        assert entry.category_id == "networking"
        assert entry.required is True
        assert entry.coordinate == "io.ktor:ktor-client-core:2.3.7"

    def test_defaults(self):
        entry = DependencyEntry({"id": "x", "name": "X"})
        assert entry.platform == "common"
        assert entry.required is False
        assert entry.coordinate is None

    def test_coordinate_without_version(self):
        assert DependencyEntry({"module": "g:a"}).coordinate == "g:a"


class TestGuideEntry:
    def test_steps(self, sample_catalog):
        entry = GuideEntry(sample_catalog["guides"][0])
        assert entry.title == "Networking setup"
        assert entry.steps[0] == GuideStep(
            title="Add the dependency",
            content=sample_catalog["guides"][0]["steps"][0]["content"],
        )

    def test_no_steps(self):
        assert GuideEntry({"id": "g"}).steps == []


class TestPostBody:
    def test_markdown(self):
        assert body_from_payload({"content": "hi"}) == MarkdownBody("hi")

    def test_pdf(self):
        assert body_from_payload({"pdfUrl": "/uploads/1-a.pdf"}) == PdfBody("/uploads/1-a.pdf")

    def test_none(self):
        assert body_from_payload({"title": "x"}) is None

    def test_empty_strings_count_as_absent(self):
        assert body_from_payload({"content": "", "pdfUrl": "/uploads/1-a.pdf"}) == PdfBody("/uploads/1-a.pdf")
        assert body_from_payload({"content": "", "pdfUrl": ""}) is None

    def test_both_set_is_invalid(self):
        with pytest.raises(ValidationError):
            body_from_payload({"content": "hi", "pdfUrl": "/uploads/1-a.pdf"})

    def test_apply_body_removes_other_variant(self):
        record = {"id": "p", "content": "old text"}
        apply_body(record, PdfBody("/uploads/1-a.pdf"))
        assert record == {"id": "p", "pdfUrl": "/uploads/1-a.pdf"}

        apply_body(record, MarkdownBody("new"))
        assert record == {"id": "p", "content": "new"}

        apply_body(record, None)
        assert record == {"id": "p"}


class TestPostEntry:
    def test_body(self, sample_blog):
        assert PostEntry(sample_blog["posts"][0]).body == MarkdownBody(sample_blog["posts"][0]["content"])
        assert PostEntry(sample_blog["posts"][1]).body == PdfBody("/uploads/1700000000000-notes.pdf")
        assert PostEntry({"id": "x"}).body is None

    def test_matches(self, sample_blog):
        entry = PostEntry(sample_blog["posts"][1])
        assert entry.matches(query="release")
        assert entry.matches(query="2.0")
        assert not entry.matches(query="hello")
        assert entry.matches(tag="release")
        assert not entry.matches(tag="intro")
