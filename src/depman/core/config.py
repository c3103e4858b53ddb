"""
Data root discovery and standard paths.

The catalog and blog documents live in a .depman/ directory at the data root,
next to the public/ directory that holds uploaded files.

Resolution order for the data root:
  1. DEPMAN_ROOT environment variable (highest priority)
  2. Walk up from cwd looking for .depman/ directory
  3. Global config file (~/.config/depman/config.yaml) site_root key
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

DATA_DIR_NAME = ".depman"


@dataclass(frozen=True)
class SitePaths:
    """Standard paths for depman data."""

    root: Path
    data_dir: Path

    # Documents (in .depman/)
    catalog_db: Path
    blog_db: Path
    config_file: Path

    # Backup directories (in .depman/)
    catalog_backups: Path
    blog_backups: Path

    # Public files
    public: Path
    uploads: Path


def get_global_config_path() -> Path:
    """Return the path to the global depman config file.

    Respects XDG_CONFIG_HOME if set, otherwise defaults to
    ~/.config/depman/config.yaml.
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home)
    else:
        base = Path.home() / ".config"
    return base / "depman" / "config.yaml"


def load_global_config() -> dict:
    """Load the global configuration.

    Returns:
        Configuration dict, or empty dict if file is missing or invalid.
    """
    config_path = get_global_config_path()
    if not config_path.is_file():
        return {}
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _walk_up_for_data_dir(start_path: Path) -> Path | None:
    current = start_path.resolve()
    while current != current.parent:
        if (current / DATA_DIR_NAME).is_dir():
            return current
        current = current.parent
    return None


def find_data_root(start_path: Path | None = None) -> Path:
    """Find the data root using 3-tier resolution.

    Args:
        start_path: Starting path for the .depman/ walk (defaults to cwd)

    Returns:
        Path to the data root

    Raises:
        FileNotFoundError: If no .depman/ directory is found by any method
    """
    env_root = os.environ.get("DEPMAN_ROOT")
    if env_root:
        env_path = Path(env_root).resolve()
        if (env_path / DATA_DIR_NAME).is_dir():
            return env_path
        raise FileNotFoundError(
            f"DEPMAN_ROOT={env_root} does not contain a {DATA_DIR_NAME}/ directory."
        )

    if start_path is None:
        start_path = Path.cwd()
    result = _walk_up_for_data_dir(Path(start_path))
    if result is not None:
        return result

    site_root_str = load_global_config().get("site_root")
    if site_root_str:
        global_path = Path(site_root_str).expanduser().resolve()
        if (global_path / DATA_DIR_NAME).is_dir():
            return global_path
        raise FileNotFoundError(
            f"Global config site_root={site_root_str} does not contain a "
            f"{DATA_DIR_NAME}/ directory."
        )

    raise FileNotFoundError(
        f"Could not find {DATA_DIR_NAME}/ directory starting from {start_path}. "
        f"Run 'depman init' to initialize, set DEPMAN_ROOT, or configure "
        f"site_root in {get_global_config_path()}."
    )


@lru_cache(maxsize=1)
def get_site_root() -> Path:
    """Get the cached data root path."""
    return find_data_root()


def get_paths(site_root: Path | None = None) -> SitePaths:
    """Get all standard paths.

    Args:
        site_root: Data root (uses cached default if not provided)
    """
    if site_root is None:
        site_root = get_site_root()

    site_root = Path(site_root)
    data_dir = site_root / DATA_DIR_NAME

    return SitePaths(
        root=site_root,
        data_dir=data_dir,
        catalog_db=data_dir / "catalog_db.json",
        blog_db=data_dir / "blog_db.json",
        config_file=data_dir / "config.yaml",
        catalog_backups=data_dir / "backups" / "catalog",
        blog_backups=data_dir / "backups" / "blog",
        public=site_root / "public",
        uploads=site_root / "public" / "uploads",
    )
