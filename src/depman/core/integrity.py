"""
Document integrity checker.

The store never enforces id uniqueness or category references; this module
reports where the documents drift from those conventions.
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from depman.core.store import Document, DocumentStore
from depman.uploads import PUBLIC_PREFIX


class IssueType(Enum):
    """Types of integrity issues."""

    MISSING_ID = "missing_id"  # Record without an id
    DUPLICATE_ID = "duplicate_id"  # Same id used twice in a collection
    DANGLING_REFERENCE = "dangling_reference"  # categoryId names no category
    EXTRA_GUIDE = "extra_guide"  # More than one guide for a category
    BODY_CONFLICT = "body_conflict"  # Post holds both content and pdfUrl
    MISSING_UPLOAD = "missing_upload"  # pdfUrl points at a file that isn't there


class IssueSeverity(Enum):
    """Severity levels for integrity issues."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class IntegrityIssue:
    """A single integrity issue."""

    database: str
    collection: str
    entry_id: str
    issue_type: IssueType
    message: str
    severity: IssueSeverity = IssueSeverity.ERROR
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "database": self.database,
            "collection": self.collection,
            "entry_id": self.entry_id,
            "issue_type": self.issue_type.value,
            "message": self.message,
            "severity": self.severity.value,
        }
        if self.extra:
            result["extra"] = self.extra
        return result


@dataclass
class IntegrityResult:
    """Result of an integrity check."""

    issues: list[IntegrityIssue] = field(default_factory=list)
    checked: dict[str, int] = field(default_factory=dict)  # collection -> records checked

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [i.to_dict() for i in self.issues],
            "checked": self.checked,
            "by_severity": self.by_severity(),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for issue in self.issues:
            counts[issue.severity.value] = counts.get(issue.severity.value, 0) + 1
        return counts

    @property
    def has_errors(self) -> bool:
        return any(i.severity == IssueSeverity.ERROR for i in self.issues)

    def errors(self) -> list[IntegrityIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    def warnings(self) -> list[IntegrityIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]


class IntegrityChecker:
    """Checks the catalog and blog documents."""

    DATABASES = ["catalog_db", "blog_db"]

    def __init__(self, catalog: DocumentStore, blog: DocumentStore, uploads_dir: Path):
        self.catalog = catalog
        self.blog = blog
        self.uploads_dir = Path(uploads_dir)

    def check_all(self) -> IntegrityResult:
        result = IntegrityResult()
        self._check_catalog(result)
        self._check_blog(result)
        return result

    def check_database(self, db_name: str) -> IntegrityResult:
        """Check one document by name (catalog_db or blog_db).

        Raises:
            ValueError: For an unknown database name
        """
        checkers = {
            "catalog_db": self._check_catalog,
            "blog_db": self._check_blog,
        }
        if db_name not in checkers:
            raise ValueError(f"Unknown database: {db_name}")
        result = IntegrityResult()
        checkers[db_name](result)
        return result

    def _check_ids(self, doc: Document, database: str, collection: str, result: IntegrityResult) -> None:
        records = doc.collection(collection)
        result.checked[collection] = len(records)

        for index, record in enumerate(records):
            if not record.get("id"):
                result.issues.append(
                    IntegrityIssue(
                        database=database,
                        collection=collection,
                        entry_id=f"#{index}",
                        issue_type=IssueType.MISSING_ID,
                        message=f"Record #{index} in {collection} has no id",
                    )
                )

        counts = Counter(record.get("id") for record in records if record.get("id"))
        for record_id, count in counts.items():
            if count > 1:
                result.issues.append(
                    IntegrityIssue(
                        database=database,
                        collection=collection,
                        entry_id=record_id,
                        issue_type=IssueType.DUPLICATE_ID,
                        message=f"Id '{record_id}' is used by {count} records in {collection}",
                        extra={"count": count},
                    )
                )

    def _check_catalog(self, result: IntegrityResult) -> None:
        doc = self.catalog.load()
        for collection in ("categories", "dependencies", "guides"):
            self._check_ids(doc, "catalog_db", collection, result)

        category_ids = {record.get("id") for record in doc.collection("categories")}

        for collection in ("dependencies", "guides"):
            for record in doc.collection(collection):
                category_id = record.get("categoryId")
                if category_id and category_id not in category_ids:
                    result.issues.append(
                        IntegrityIssue(
                            database="catalog_db",
                            collection=collection,
                            entry_id=str(record.get("id", "")),
                            issue_type=IssueType.DANGLING_REFERENCE,
                            message=f"categoryId '{category_id}' does not match any category",
                            severity=IssueSeverity.WARNING,
                            extra={"categoryId": category_id},
                        )
                    )

        guides_per_category = Counter(
            record.get("categoryId") for record in doc.collection("guides") if record.get("categoryId")
        )
        for category_id, count in guides_per_category.items():
            if count > 1:
                result.issues.append(
                    IntegrityIssue(
                        database="catalog_db",
                        collection="guides",
                        entry_id=category_id,
                        issue_type=IssueType.EXTRA_GUIDE,
                        message=f"Category '{category_id}' has {count} guides",
                        severity=IssueSeverity.WARNING,
                        extra={"count": count},
                    )
                )

    def _check_blog(self, result: IntegrityResult) -> None:
        doc = self.blog.load()
        self._check_ids(doc, "blog_db", "posts", result)

        for record in doc.collection("posts"):
            post_id = str(record.get("id", ""))
            pdf_url = record.get("pdfUrl")

            if record.get("content") and pdf_url:
                result.issues.append(
                    IntegrityIssue(
                        database="blog_db",
                        collection="posts",
                        entry_id=post_id,
                        issue_type=IssueType.BODY_CONFLICT,
                        message="Post has both content and pdfUrl",
                        severity=IssueSeverity.WARNING,
                    )
                )

            if isinstance(pdf_url, str) and pdf_url.startswith(PUBLIC_PREFIX + "/"):
                upload = self.uploads_dir / pdf_url[len(PUBLIC_PREFIX) + 1:]
                if not upload.exists():
                    result.issues.append(
                        IntegrityIssue(
                            database="blog_db",
                            collection="posts",
                            entry_id=post_id,
                            issue_type=IssueType.MISSING_UPLOAD,
                            message=f"Uploaded file for {pdf_url} does not exist",
                            severity=IssueSeverity.WARNING,
                            extra={"path": str(upload)},
                        )
                    )
