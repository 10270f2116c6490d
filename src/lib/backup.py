"""
Backups of updated files

Before a file is overwritten, its original bytes are copied under a
directory named after the time of the run:

    <backup_root>/readmix-backup-2027-06-05-04-03-02-010200/docs/README.md

Absolute paths lose their root so they nest under the run directory.
"""

import errno
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..config import AppSettings, appsettings
from .log import LOG


BackupCallback = Callable[[str, bytes], None]


def backupTarget_make(backup_dir: Path, original_path: str) -> Path:
    """
    Compute where the backup of `original_path` goes.

    Example:
        >>> backupTarget_make(Path("/tmp/b"), "/home/me/README.md")
        PosixPath('/tmp/b/home/me/README.md')
    """
    path = Path(original_path)
    if path.is_absolute():
        path = Path(*path.parts[1:])
    return backup_dir / path


def backupCallback_make(
    backup_root: str,
    when: Optional[datetime] = None,
    settings: Optional[AppSettings] = None,
) -> BackupCallback:
    """
    Build the callback writing backups for one pipeline.

    Args:
        backup_root: Directory receiving the per-run directories
        when: Time of the run, defaults to now (UTC)
        settings: Settings providing the directory stamp format

    Returns:
        Callable (original_path, original_bytes) -> None

    Raises (from the callback):
        FileExistsError: If a backup of that path already exists for the run
        OSError: On any other write failure
    """
    settings = settings or appsettings
    when = when or datetime.now(timezone.utc)
    backup_dir = Path(backup_root) / settings.backupStamp_make(when)

    def backup_write(original_path: str, content: bytes) -> None:
        target = backupTarget_make(backup_dir, original_path)
        if target.exists():
            raise FileExistsError(
                errno.EEXIST, f"cannot backup {original_path}, file exists", str(target)
            )
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        LOG(f"Wrote backup of {original_path} in {target}", level=1)

    return backup_write


def backup_skip(original_path: str, content: bytes) -> None:
    """Backup callback used when backups are disabled"""
    LOG(f"Backup disabled, not saving {original_path}", level=3)
