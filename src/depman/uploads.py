"""
Uploaded file storage.

Files land in the public uploads directory under a name prefixed with the
upload time in epoch milliseconds, so two uploads of the same file don't
collide (best effort: same-millisecond uploads of one name still can).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath

from depman.core.errors import UploadError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


@dataclass(frozen=True)
class UploadResult:
    url: str
    path: Path

    def to_dict(self) -> dict:
        return {"url": self.url, "success": True}


def _basename(filename: str) -> str:
    # Browsers on Windows may send a full path.
    return PurePosixPath(PureWindowsPath(filename).name).name


def upload_name(filename: str, now_ms: int | None = None) -> str:
    """Build the stored name: ``<millis>-<basename with spaces as underscores>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    basename = _basename(filename)
    return f"{now_ms}-{basename.replace(' ', '_')}"


def save_upload(
    filename: str | None,
    data: bytes | None,
    upload_dir: Path,
    now_ms: int | None = None,
) -> UploadResult:
    """Write an uploaded payload and return its public path.

    Raises:
        UploadError: 400 when no file was sent, 500 when it cannot be written
    """
    if not filename or data is None or _basename(filename) in ("", ".", ".."):
        raise UploadError("No file received.")

    name = upload_name(filename, now_ms)

    upload_dir = Path(upload_dir)
    target = upload_dir / name
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as e:
        logger.error("Upload to %s failed: %s", target, e)
        raise UploadError("Error uploading file.", status_code=500) from e

    logger.debug("Stored upload %s (%d bytes)", target, len(data))
    return UploadResult(url=f"{PUBLIC_PREFIX}/{name}", path=target)
