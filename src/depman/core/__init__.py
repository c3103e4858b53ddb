"""Core utilities for depman."""

from depman.core.backup import (
    DEFAULT_KEEP_COUNT,
    DEFAULT_KEEP_DAYS,
    BackupInfo,
    cleanup_old_backups,
    create_backup,
    list_backups,
    rollback_database,
    safe_write_json,
)
from depman.core.config import SitePaths, get_paths, get_site_root
from depman.core.errors import DepmanError, NotFoundError, StorageError, UploadError, ValidationError
from depman.core.slugs import slugify
from depman.core.store import Document, DocumentStore

__all__ = [
    # Backup
    "create_backup",
    "safe_write_json",
    "cleanup_old_backups",
    "list_backups",
    "rollback_database",
    "BackupInfo",
    "DEFAULT_KEEP_COUNT",
    "DEFAULT_KEEP_DAYS",
    # Config
    "SitePaths",
    "get_site_root",
    "get_paths",
    # Errors
    "DepmanError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "UploadError",
    # Store
    "Document",
    "DocumentStore",
    "slugify",
]
