"""Tests for depman.backup.commands CLI module."""

import json
from datetime import datetime, timedelta

import pytest
from click.testing import CliRunner

from depman.backup.commands import _format_age, backup


@pytest.fixture
def runner():
    return CliRunner()


def _ctx(dry_run=False):
    return type("Ctx", (), {"dry_run": dry_run})()


@pytest.fixture
def backup_site(populated_site):
    """Data root with three catalog backups (1 hour, 10 days and 40 days old)."""
    backups_dir = populated_site / ".depman" / "backups" / "catalog"
    now = datetime.now()
    for i, days in enumerate((0, 10, 40)):
        ts = (now - timedelta(days=days, hours=1)).strftime("%Y%m%d_%H%M%S")
        (backups_dir / f"catalog_db_{ts}.json").write_text(
            json.dumps({"categories": [{"id": f"backup-{i}", "name": "B"}], "dependencies": [], "guides": []})
        )
    return populated_site


def test_format_age():
    assert _format_age(0.01).endswith("m ago")
    assert _format_age(0.2).endswith("h ago")
    assert _format_age(3) == "3d ago"
    assert _format_age(65) == "2mo ago"


class TestListCommand:
    def test_lists_backups(self, runner, backup_site):
        result = runner.invoke(backup, ["list"])

        assert result.exit_code == 0
        assert "catalog_db" in result.output
        assert "3 backups" in result.output
        assert "No backups found for blog_db" in result.output

    def test_limit(self, runner, backup_site):
        result = runner.invoke(backup, ["list", "--db", "catalog_db", "-n", "1"])

        assert result.exit_code == 0
        assert "2 older backups" in result.output


class TestCleanCommand:
    def test_removes_only_old_backups_past_keep(self, runner, backup_site):
        result = runner.invoke(backup, ["clean", "--keep", "1", "--days", "30", "-f"], obj=_ctx())

        assert result.exit_code == 0
        assert "Deleted 1 backup(s)" in result.output
        remaining = list((backup_site / ".depman" / "backups" / "catalog").glob("*.json"))
        assert len(remaining) == 2

    def test_uses_configured_retention(self, runner, backup_site):
        (backup_site / ".depman" / "config.yaml").write_text("backup:\n  keep_count: 5\n")

        result = runner.invoke(backup, ["clean", "-f"], obj=_ctx())

        assert result.exit_code == 0
        assert "No old backups" in result.output

    def test_dry_run(self, runner, backup_site):
        result = runner.invoke(backup, ["clean", "--keep", "0", "--days", "5"], obj=_ctx(dry_run=True))

        assert result.exit_code == 0
        assert "DRY RUN" in result.output
        assert len(list((backup_site / ".depman" / "backups" / "catalog").glob("*.json"))) == 3


class TestRollbackCommand:
    def test_restores_most_recent(self, runner, backup_site, read_document):
        result = runner.invoke(backup, ["rollback", "catalog_db", "-f"], obj=_ctx())

        assert result.exit_code == 0
        assert read_document("catalog_db")["categories"] == [{"id": "backup-0", "name": "B"}]

    def test_restores_by_index(self, runner, backup_site, read_document):
        result = runner.invoke(backup, ["rollback", "catalog_db", "-i", "2", "-f"], obj=_ctx())

        assert result.exit_code == 0
        assert read_document("catalog_db")["categories"][0]["id"] == "backup-2"

    def test_no_backups(self, runner, backup_site):
        result = runner.invoke(backup, ["rollback", "blog_db", "-f"], obj=_ctx())
        assert result.exit_code == 1
        assert "No backups found" in result.output

    def test_index_out_of_range(self, runner, backup_site):
        result = runner.invoke(backup, ["rollback", "catalog_db", "-i", "9", "-f"], obj=_ctx())
        assert result.exit_code == 1

    def test_cancelled(self, runner, backup_site, read_document):
        result = runner.invoke(backup, ["rollback", "catalog_db"], obj=_ctx(), input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert len(read_document("catalog_db")["categories"]) == 2
