"""Shared test fixtures for depman package."""

import json

import pytest


@pytest.fixture
def sample_json_file(tmp_path):
    """Create a sample JSON file for testing."""
    data = {"key": "value", "number": 42}
    file_path = tmp_path / "sample.json"
    file_path.write_text(json.dumps(data))
    return file_path


@pytest.fixture
def sample_catalog():
    """A small catalog document."""
    return {
        "categories": [
            {
                "id": "networking",
                "name": "Networking",
                "description": "HTTP clients and sockets",
                "icon": "N",
                "color": "blue",
                "platform": ["android", "ios"],
            },
            {
                "id": "persistence",
                "name": "Persistence",
                "description": "Local databases",
                "platform": ["android"],
            },
        ],
        "dependencies": [
            {
                "id": "ktor-client",
                "categoryId": "networking",
                "name": "Ktor Client",
                "version": "2.3.7",
                "module": "io.ktor:ktor-client-core",
                "platform": "common",
                "required": True,
            },
            {
                "id": "room",
                "categoryId": "persistence",
                "name": "Room",
                "version": "2.6.1",
                "module": "androidx.room:room-runtime",
                "platform": "android",
                "required": False,
            },
        ],
        "guides": [
            {
                "id": "networking-guide",
                "categoryId": "networking",
                "title": "Networking setup",
                "steps": [
                    {
                        "title": "Add the dependency",
                        "content": "Add this:\n```kotlin\nimplementation(\"io.ktor:ktor-client-core:2.3.7\")\n```",
                    },
                ],
            },
        ],
    }


@pytest.fixture
def sample_blog():
    """A small blog document."""
    return {
        "posts": [
            {
                "id": "hello-world",
                "title": "Hello World",
                "author": "Sam",
                "excerpt": "First post",
                "content": "Hi there\n```python\nprint('hi')\n```",
                "date": "2026-01-05T10:00:00.000Z",
                "tags": ["intro"],
            },
            {
                "id": "release-notes",
                "title": "Release Notes",
                "excerpt": "What changed in 2.0",
                "pdfUrl": "/uploads/1700000000000-notes.pdf",
                "date": "2026-02-01T08:30:00.000Z",
                "tags": ["release"],
            },
        ],
    }


@pytest.fixture
def mock_site_root(tmp_path, monkeypatch):
    """Create a mock data root with a .depman/ directory."""
    data_dir = tmp_path / ".depman"
    data_dir.mkdir()
    (data_dir / "backups" / "catalog").mkdir(parents=True)
    (data_dir / "backups" / "blog").mkdir(parents=True)
    (tmp_path / "public" / "uploads").mkdir(parents=True)

    # Mock get_site_root to return our tmp_path
    from depman.core import config
    # Clear the lru_cache first
    config.get_site_root.cache_clear()
    monkeypatch.setattr(config, "get_site_root", lambda: tmp_path)

    return tmp_path


@pytest.fixture
def paths(mock_site_root):
    from depman.core.config import get_paths

    return get_paths(mock_site_root)


@pytest.fixture
def populated_site(mock_site_root, sample_catalog, sample_blog):
    """Data root with sample catalog and blog documents written."""
    data_dir = mock_site_root / ".depman"
    (data_dir / "catalog_db.json").write_text(json.dumps(sample_catalog, indent=2))
    (data_dir / "blog_db.json").write_text(json.dumps(sample_blog, indent=2))
    return mock_site_root


@pytest.fixture
def read_document(mock_site_root):
    """Read a document back from disk by name (catalog_db or blog_db)."""
    def _read(name):
        return json.loads((mock_site_root / ".depman" / f"{name}.json").read_text())
    return _read
