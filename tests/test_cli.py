"""Tests for the top-level depman CLI."""

import json

import pytest
from click.testing import CliRunner

from depman import __version__
from depman.cli import main


@pytest.fixture
def runner():
    return CliRunner()


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_command_groups(runner):
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    for name in ("init", "serve", "upload", "categories", "deps", "guides", "posts", "backup", "integrity", "config"):
        assert name in result.output


class TestInit:
    @pytest.fixture
    def fresh_dir(self, tmp_path, monkeypatch):
        from depman.core import config

        config.get_site_root.cache_clear()

        def not_found():
            raise FileNotFoundError("no .depman")

        monkeypatch.setattr(config, "get_site_root", not_found)
        monkeypatch.chdir(tmp_path)
        return tmp_path

    def test_creates_layout_and_documents(self, runner, fresh_dir):
        result = runner.invoke(main, ["init"])

        assert result.exit_code == 0
        assert json.loads((fresh_dir / ".depman" / "catalog_db.json").read_text()) == {
            "categories": [],
            "dependencies": [],
            "guides": [],
        }
        assert json.loads((fresh_dir / ".depman" / "blog_db.json").read_text()) == {"posts": []}
        assert (fresh_dir / ".depman" / "backups" / "catalog").is_dir()
        assert (fresh_dir / ".depman" / "backups" / "blog").is_dir()
        assert (fresh_dir / "public" / "uploads").is_dir()

    def test_dry_run_creates_nothing(self, runner, fresh_dir):
        result = runner.invoke(main, ["-n", "init"])

        assert result.exit_code == 0
        assert "DRY RUN" in result.output
        assert not (fresh_dir / ".depman").exists()

    def test_existing_directory_is_left_alone(self, runner, populated_site, read_document):
        result = runner.invoke(main, ["init"])

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert len(read_document("catalog_db")["categories"]) == 2

    def test_force_resets_documents(self, runner, populated_site, read_document):
        result = runner.invoke(main, ["init", "--force"])

        assert result.exit_code == 0
        assert read_document("catalog_db")["categories"] == []
        assert read_document("blog_db") == {"posts": []}


class TestUpload:
    def test_copies_file(self, runner, mock_site_root, tmp_path):
        source = tmp_path / "release notes.pdf"
        source.write_bytes(b"%PDF")

        result = runner.invoke(main, ["upload", str(source)])

        assert result.exit_code == 0
        assert "/uploads/" in result.output
        (stored,) = (mock_site_root / "public" / "uploads").iterdir()
        assert stored.name.endswith("-release_notes.pdf")
        assert stored.read_bytes() == b"%PDF"

    def test_dry_run(self, runner, mock_site_root, tmp_path):
        source = tmp_path / "a.pdf"
        source.write_bytes(b"%PDF")

        result = runner.invoke(main, ["-n", "upload", str(source)])

        assert result.exit_code == 0
        assert list((mock_site_root / "public" / "uploads").iterdir()) == []

    def test_missing_file(self, runner, mock_site_root, tmp_path):
        result = runner.invoke(main, ["upload", str(tmp_path / "nope.pdf")])
        assert result.exit_code == 2


def test_serve_builds_app_from_settings(runner, mock_site_root, monkeypatch):
    from flask import Flask

    calls = {}

    def fake_run(self, host=None, port=None, debug=None, **kwargs):
        calls.update(host=host, port=port, debug=debug)

    monkeypatch.setattr(Flask, "run", fake_run)
    (mock_site_root / ".depman" / "config.yaml").write_text("server:\n  port: 8080\n")

    result = runner.invoke(main, ["serve"])

    assert result.exit_code == 0
    assert calls == {"host": "127.0.0.1", "port": 8080, "debug": False}
