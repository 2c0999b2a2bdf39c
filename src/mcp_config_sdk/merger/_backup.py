"""Timestamped byte-for-byte backups of config files."""

from __future__ import annotations

import glob
import logging
import re
import shutil
from typing import TYPE_CHECKING

from ..errors import IOFailureError, MissingEntryError

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

_BACKUP_SUFFIX = re.compile(r"\.backup-(\d{8}-\d{6})(?:-(\d+))?$")


def backup_path_for(path: Path, now: datetime) -> Path:
    """Return ``<path>.backup-<YYYYMMDD-HHMMSS>`` for the given local time."""
    return path.with_name(f"{path.name}.backup-{now.strftime(BACKUP_TIMESTAMP_FORMAT)}")


def create_backup(path: Path, now: datetime) -> Path:
    """Copy ``path`` byte-for-byte next to itself and return the backup path.

    The backup gets the same permission bits as the original.

    Never overwrites an earlier backup: a second backup within the same second
    gets a ``-1``, ``-2``, ... counter after the timestamp.
    """
    base = backup_path_for(path, now)
    candidate = base
    counter = 0
    while True:
        try:
            with path.open("rb") as src, candidate.open("xb") as dst:
                shutil.copymode(path, candidate)
                shutil.copyfileobj(src, dst)
        except FileExistsError:
            counter += 1
            candidate = base.with_name(f"{base.name}-{counter}")
            continue
        except OSError as e:
            raise IOFailureError(f"Cannot back up {path}: {e}", path=path) from e
        break
    logger.info("Backed up %s to %s", path, candidate)
    return candidate


def list_backups(path: Path) -> list[Path]:
    """Return the backups of ``path``, newest first."""
    if not path.parent.is_dir():
        return []
    found = []
    for candidate in path.parent.glob(f"{glob.escape(path.name)}.backup-*"):
        key = _sort_key(path, candidate)
        if key is not None:
            found.append((key, candidate))
    found.sort(reverse=True)
    return [p for _, p in found]


def restore_backup(path: Path, now: datetime, backup: Path | None = None) -> tuple[Path, Path | None]:
    """Copy a backup over ``path``.

    Restores ``backup`` or, if not given, the newest backup of ``path``. The
    current file is backed up first so a restore can itself be undone.

    Returns:
        (restored_from, backup_of_current_file_or_None)

    Raises:
        MissingEntryError: If there is no backup to restore.
    """
    if backup is None:
        backups = list_backups(path)
        if not backups:
            raise MissingEntryError(f"backup of {path.name}", path=path.parent)
        backup = backups[0]
    elif not backup.is_file():
        raise MissingEntryError(backup.name, path=backup.parent)

    safety = create_backup(path, now) if path.exists() else None

    target = path.resolve()
    tmp = target.with_name(target.name + ".tmp")
    try:
        with backup.open("rb") as src, tmp.open("wb") as dst:
            shutil.copymode(backup, tmp)
            shutil.copyfileobj(src, dst)
        tmp.replace(target)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise IOFailureError(f"Cannot restore {path} from {backup}: {e}", path=path) from e
    logger.info("Restored %s from %s", path, backup)
    return backup, safety


def _sort_key(path: Path, candidate: Path) -> tuple[str, int] | None:
    if not candidate.name.startswith(path.name):
        return None
    match = _BACKUP_SUFFIX.fullmatch(candidate.name[len(path.name) :])
    if match is None:
        return None
    return match.group(1), int(match.group(2) or 0)
