"""Tests for depman.config.commands module."""

import pytest
import yaml
from click.testing import CliRunner

from depman.config.commands import (
    CONFIG_SCHEMA,
    config,
    get_config_value,
    get_setting,
    load_config,
    save_config,
    set_config_value,
    store_options,
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_path(mock_site_root):
    return mock_site_root / ".depman" / "config.yaml"


class TestConfigHelpers:
    def test_load_without_file(self, mock_site_root):
        assert load_config() == {}

    def test_load_empty_or_non_mapping(self, config_path):
        config_path.write_text("")
        assert load_config() == {}
        config_path.write_text("- a\n")
        assert load_config() == {}

    def test_save_and_load(self, config_path):
        save_config({"server": {"port": 9000}})
        assert yaml.safe_load(config_path.read_text()) == {"server": {"port": 9000}}
        assert load_config() == {"server": {"port": 9000}}

    def test_dotted_get_and_set(self, mock_site_root):
        set_config_value("backup.keep_days", 7)
        set_config_value("backup.enabled", False)

        assert get_config_value("backup.keep_days") == 7
        assert get_config_value("backup.missing", "fallback") == "fallback"
        assert load_config() == {"backup": {"keep_days": 7, "enabled": False}}

    def test_explicit_config_path(self, tmp_path):
        path = tmp_path / "elsewhere.yaml"
        set_config_value("server.host", "0.0.0.0", path)
        assert get_config_value("server.host", config_path=path) == "0.0.0.0"

    def test_get_setting_falls_back_to_default(self, mock_site_root):
        assert get_setting("server.port") == CONFIG_SCHEMA["server.port"]["default"]

    def test_store_options(self, config_path):
        config_path.write_text("backup:\n  enabled: false\n  keep_count: 3\n")
        assert store_options() == {"create_backups": False, "keep_backups": 3, "keep_days": 30}


class TestConfigCommands:
    def test_show_defaults_only(self, runner, mock_site_root):
        result = runner.invoke(config, ["show"])
        assert result.exit_code == 0
        assert "Using defaults" in result.output

    def test_show_all(self, runner, mock_site_root):
        result = runner.invoke(config, ["show", "--all"])
        assert result.exit_code == 0
        assert "Configuration" in result.output
        assert "Config file" in result.output

    def test_set_and_get(self, runner, mock_site_root):
        result = runner.invoke(config, ["set", "server.port", "8080"])
        assert result.exit_code == 0
        assert get_config_value("server.port") == 8080

        result = runner.invoke(config, ["get", "server.port"])
        assert "server.port = 8080" in result.output

    def test_set_bool(self, runner, mock_site_root):
        runner.invoke(config, ["set", "backup.enabled", "false"])
        assert get_config_value("backup.enabled") is False

    def test_get_default(self, runner, mock_site_root):
        result = runner.invoke(config, ["get", "backup.keep_count"])
        assert "(default)" in result.output

    def test_set_bad_int(self, runner, mock_site_root):
        result = runner.invoke(config, ["set", "server.port", "high"])
        assert "Invalid value type" in result.output
        assert get_config_value("server.port") is None

    def test_unknown_key(self, runner, mock_site_root):
        result = runner.invoke(config, ["get", "nope.key"])
        assert "Unknown setting" in result.output

    def test_path(self, runner, mock_site_root):
        result = runner.invoke(config, ["path"])
        assert "config.yaml" in result.output
