from __future__ import annotations

import logging
import shutil
import stat
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..errors import ProvisionError

logger = logging.getLogger(__name__)


def backup_path_for(path: Path, *, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    candidate = path.with_name(f"{path.name}.backup.{stamp}")
    n = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.backup.{stamp}_{n}")
        n += 1
    return candidate


def backup_file(path: Path, *, now: Optional[datetime] = None, dry_run: bool = False) -> Path:
    """Copy path to a timestamped sibling; raise rather than risk losing it."""

    dest = backup_path_for(path, now=now)
    if dry_run:
        logger.info("Would back up %s -> %s", path, dest)
        return dest
    try:
        shutil.copy2(path, dest)
    except OSError as e:
        raise ProvisionError(f"Failed to back up {path}: {e}") from e
    logger.info("Backed up %s -> %s", path, dest)
    return dest


def same_content(path: Path, data: bytes) -> bool:
    try:
        return path.is_file() and path.read_bytes() == data
    except OSError:
        return False


def write_asset(
    target: Path,
    data: bytes,
    *,
    backup: bool = False,
    executable: bool = False,
    dry_run: bool = False,
) -> Optional[Path]:
    """Write data to target, backing up a pre-existing file first when asked.

    Returns the backup path, if one was made.
    """

    backup_path: Optional[Path] = None
    if backup and target.exists():
        backup_path = backup_file(target, dry_run=dry_run)

    if dry_run:
        logger.info("Would write %s (%d bytes)", target, len(data))
        return backup_path

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    if executable:
        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.info("Installed %s", target)
    return backup_path


def move_aside(path: Path, *, dry_run: bool = False) -> Path:
    """Rename an incomplete install out of the way as <path>.backup.<epoch>."""

    dest = path.with_name(f"{path.name}.backup.{int(datetime.now().timestamp())}")
    if dry_run:
        logger.info("Would move %s -> %s", path, dest)
        return dest
    try:
        path.rename(dest)
    except OSError as e:
        raise ProvisionError(f"Failed to move aside corrupted installation {path}: {e}") from e
    logger.info("Moved %s -> %s", path, dest)
    return dest
