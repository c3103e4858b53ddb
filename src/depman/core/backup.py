"""
Atomic JSON writes and document backups.

Every document write goes through safe_write_json: the previous file is
copied to a timestamped backup, old backups are rotated by count and age,
and the new content lands via a temp file plus rename so readers never see
a half-written document.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_KEEP_COUNT = 10
DEFAULT_KEEP_DAYS = 30
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
TIMESTAMP_PATTERN = re.compile(r"_(\d{8}_\d{6})\.")


@dataclass
class BackupInfo:
    """A backup file found on disk."""

    path: Path
    timestamp: datetime
    size_bytes: int
    db_name: str

    @property
    def age_days(self) -> float:
        return (datetime.now() - self.timestamp).total_seconds() / 86400

    @property
    def size_human(self) -> str:
        if self.size_bytes < 1024:
            return f"{self.size_bytes} B"
        elif self.size_bytes < 1024 * 1024:
            return f"{self.size_bytes / 1024:.1f} KB"
        return f"{self.size_bytes / (1024 * 1024):.1f} MB"


def parse_backup_timestamp(filename: str) -> datetime | None:
    """Extract the timestamp from a name like 'catalog_db_20260101_120000.json'."""
    match = TIMESTAMP_PATTERN.search(filename)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def list_backups(backup_dir: Path, db_name: str | None = None) -> list[BackupInfo]:
    """List backups in a directory, newest first.

    Args:
        backup_dir: Directory containing backups
        db_name: Optional filter by document name (e.g. 'catalog_db')
    """
    backup_dir = Path(backup_dir)
    if not backup_dir.exists():
        return []

    pattern = f"{db_name}_*.json" if db_name else "*_[0-9]*_[0-9]*.json"
    backups = []

    for path in backup_dir.glob(pattern):
        timestamp = parse_backup_timestamp(path.name)
        if timestamp is None:
            continue
        name_match = re.match(r"(.+)_\d{8}_\d{6}\.json$", path.name)
        backups.append(
            BackupInfo(
                path=path,
                timestamp=timestamp,
                size_bytes=path.stat().st_size,
                db_name=name_match.group(1) if name_match else "unknown",
            )
        )

    return sorted(backups, key=lambda b: b.timestamp, reverse=True)


def create_backup(file_path: Path, backup_dir: Path | None = None) -> Path:
    """Copy a file to a timestamped backup.

    Args:
        file_path: File to back up
        backup_dir: Where to put it (defaults to file_path.parent / 'backups')

    Returns:
        Path to the backup

    Raises:
        FileNotFoundError: If file_path doesn't exist
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Cannot backup non-existent file: {file_path}")

    backup_dir = Path(backup_dir) if backup_dir is not None else file_path.parent / "backups"
    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    backup_path = backup_dir / f"{file_path.stem}_{timestamp}{file_path.suffix}"
    shutil.copy2(file_path, backup_path)
    return backup_path


def cleanup_old_backups(
    backup_dir: Path,
    pattern: str = "*_[0-9]*_[0-9]*.*",
    keep_last: int = DEFAULT_KEEP_COUNT,
    keep_days: int | None = None,
) -> list[Path]:
    """Remove old backup files based on count and/or age.

    The newest ``keep_last`` backups always survive. Past that, a backup is
    removed when it is older than ``keep_days``, or unconditionally when
    ``keep_days`` is None.

    Returns:
        List of removed backup file paths
    """
    backup_dir = Path(backup_dir)
    if not backup_dir.exists():
        return []

    backups = sorted(
        backup_dir.glob(pattern),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    cutoff_time = None
    if keep_days is not None:
        cutoff_time = datetime.now() - timedelta(days=keep_days)

    removed = []
    for backup in backups[keep_last:]:
        if cutoff_time is not None:
            timestamp = parse_backup_timestamp(backup.name)
            if timestamp is None or timestamp >= cutoff_time:
                continue
        backup.unlink()
        removed.append(backup)

    if removed:
        logger.debug("Removed %d old backups from %s", len(removed), backup_dir)
    return removed


def rollback_database(db_path: Path, backup_dir: Path, backup_index: int = 0) -> Path:
    """Restore a document from a backup.

    The current file is itself backed up before being replaced.

    Args:
        db_path: Path to current document
        backup_dir: Directory containing backups
        backup_index: 0 = most recent, 1 = second most recent, ...

    Returns:
        Path to the backup that was restored

    Raises:
        FileNotFoundError: If no suitable backup exists
    """
    db_name = db_path.stem
    backups = list_backups(backup_dir, db_name)

    if not backups:
        raise FileNotFoundError(f"No backups found for {db_name}")

    if backup_index >= len(backups):
        raise FileNotFoundError(
            f"Backup index {backup_index} out of range (only {len(backups)} backups)"
        )

    backup = backups[backup_index]

    if db_path.exists():
        create_backup(db_path, backup_dir)

    shutil.copy2(backup.path, db_path)
    return backup.path


def safe_write_json(
    file_path: Path,
    data: dict[str, Any],
    create_backup_first: bool = True,
    backup_dir: Path | None = None,
    indent: int = 2,
    keep_backups: int = DEFAULT_KEEP_COUNT,
    keep_days: int | None = DEFAULT_KEEP_DAYS,
) -> Path | None:
    """Write JSON atomically, backing up the previous file first.

    Args:
        file_path: Path to JSON file to write
        data: Data to write
        create_backup_first: Create timestamped backup before writing
        backup_dir: Custom backup directory (defaults to file_path.parent / 'backups')
        indent: JSON indentation
        keep_backups: Number of most recent backups to always keep
        keep_days: Remove backups older than this (None = no age limit)

    Returns:
        Path to backup file if created, None otherwise

    Raises:
        ValueError: If data cannot be serialized to JSON
        OSError: If file operations fail
    """
    file_path = Path(file_path)

    try:
        json_str = json.dumps(data, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot serialize data to JSON: {e}") from e

    backup_path = None
    if create_backup_first and file_path.exists():
        backup_path = create_backup(file_path, backup_dir)
        cleanup_old_backups(
            backup_dir or (file_path.parent / "backups"),
            f"{file_path.stem}_*.json",
            keep_backups,
            keep_days,
        )

    file_path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(
        suffix=".json",
        prefix=f".{file_path.name}.",
        dir=file_path.parent,
        text=True,
    )

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            f.write(json_str)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())

        Path(temp_path).replace(file_path)

    except Exception as e:
        with contextlib.suppress(OSError):
            Path(temp_path).unlink()
        raise OSError(f"Failed to write {file_path}: {e}") from e

    return backup_path
