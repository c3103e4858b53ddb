"""
Configuration management CLI commands.

Manages depman settings stored in .depman/config.yaml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from depman.core.backup import DEFAULT_KEEP_COUNT, DEFAULT_KEEP_DAYS
from depman.core.config import get_paths

console = Console()


def get_config_path() -> Path:
    """Get path to config file."""
    return get_paths().config_file


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from file."""
    if config_path is None:
        config_path = get_config_path()
    if not config_path.exists():
        return {}

    content = config_path.read_text(encoding="utf-8")
    if not content.strip():
        return {}

    loaded = yaml.safe_load(content)
    if isinstance(loaded, dict):
        return loaded
    return {}


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to file (YAML format)."""
    if config_path is None:
        config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.dump(config, default_flow_style=False, sort_keys=False), encoding="utf-8"
    )


def get_config_value(key: str, default: Any = None, config_path: Path | None = None) -> Any:
    """Get a configuration value by dotted key."""
    current: Any = load_config(config_path)
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return current


def get_setting(key: str, config_path: Path | None = None) -> Any:
    """Get a configuration value, falling back to the schema default."""
    return get_config_value(key, CONFIG_SCHEMA[key]["default"], config_path)


def store_options(config_path: Path | None = None) -> dict[str, Any]:
    """DocumentStore keyword arguments derived from the backup settings."""
    return {
        "create_backups": bool(get_setting("backup.enabled", config_path)),
        "keep_backups": int(get_setting("backup.keep_count", config_path)),
        "keep_days": int(get_setting("backup.keep_days", config_path)),
    }


def set_config_value(key: str, value: Any, config_path: Path | None = None) -> None:
    """Set a configuration value by dotted key."""
    config = load_config(config_path)
    parts = key.split(".")

    current = config
    for part in parts[:-1]:
        if part not in current:
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value
    save_config(config, config_path)


CONFIG_SCHEMA: dict[str, dict[str, Any]] = {
    "backup.enabled": {
        "default": True,
        "type": bool,
        "description": "Back up documents before every write",
    },
    "backup.keep_days": {
        "default": DEFAULT_KEEP_DAYS,
        "type": int,
        "description": "Maximum age of backups in days",
    },
    "backup.keep_count": {
        "default": DEFAULT_KEEP_COUNT,
        "type": int,
        "description": "Minimum number of backups to keep",
    },
    "server.host": {
        "default": "127.0.0.1",
        "type": str,
        "description": "Address the HTTP server binds to",
    },
    "server.port": {
        "default": 3001,
        "type": int,
        "description": "Port the HTTP server listens on",
    },
    "uploads.max_bytes": {
        "default": 16 * 1024 * 1024,
        "type": int,
        "description": "Largest accepted upload in bytes",
    },
}


def _print_unknown(key: str) -> None:
    console.print(f"[red]Unknown setting: {key}[/red]")
    console.print("\nAvailable settings:")
    for k in CONFIG_SCHEMA:
        console.print(f"  - {k}")


@click.group()
def config():
    """Manage depman configuration.

    Settings are stored in .depman/config.yaml.
    """
    pass


@config.command(name="show")
@click.option("--all", "show_all", is_flag=True, help="Show all settings including defaults")
def show_cmd(show_all: bool):
    """Show current configuration.

    Without --all, only shows settings that differ from defaults.
    """
    current_config = load_config()
    config_path = get_config_path()

    if not current_config and not show_all:
        console.print("[dim]No custom configuration set. Using defaults.[/dim]")
        console.print(f"[dim]Config file: {config_path}[/dim]")
        return

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value", style="green")
    table.add_column("Default", style="dim")
    table.add_column("Description", style="dim")

    for key, schema in CONFIG_SCHEMA.items():
        current = get_config_value(key)
        default = schema["default"]
        is_custom = current is not None and current != default

        if show_all or is_custom:
            display_value = str(current) if current is not None else f"[dim]{default}[/dim]"
            table.add_row(key, display_value, str(default), schema["description"])

    console.print(table)
    console.print(f"\n[dim]Config file: {config_path}[/dim]")


@config.command(name="get")
@click.argument("key")
def get_cmd(key: str):
    """Get a configuration value.

    Examples:
        depman config get server.port
    """
    if key not in CONFIG_SCHEMA:
        _print_unknown(key)
        return

    value = get_config_value(key)
    if value is None:
        console.print(f"{key} = {CONFIG_SCHEMA[key]['default']} [dim](default)[/dim]")
    else:
        console.print(f"{key} = {value}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
def set_cmd(key: str, value: str):
    """Set a configuration value.

    Examples:
        depman config set server.port 8080
        depman config set backup.enabled false
    """
    if key not in CONFIG_SCHEMA:
        _print_unknown(key)
        return

    schema = CONFIG_SCHEMA[key]

    typed_value: int | bool | str
    try:
        if schema["type"] is int:
            typed_value = int(value)
        elif schema["type"] is bool:
            typed_value = value.lower() in ("true", "1", "yes")
        else:
            typed_value = value
    except ValueError:
        console.print(f"[red]Invalid value type. Expected {schema['type'].__name__}[/red]")
        return

    set_config_value(key, typed_value)
    console.print(f"[green]Set {key} = {typed_value}[/green]")


@config.command(name="path")
def path_cmd():
    """Show path to config file."""
    console.print(str(get_config_path()))
