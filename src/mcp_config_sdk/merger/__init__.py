"""Config editing API: upserts, project fixes, removals, backups."""

from __future__ import annotations

from pathlib import Path

from ..models.mcp import DIALECTS, Dialect
from ._backup import (
    BACKUP_TIMESTAMP_FORMAT,
    backup_path_for,
    create_backup,
    list_backups,
    restore_backup,
)
from ._merger import ConfigMerger, MergeResult, apply_upserts
from ._presets import (
    FETCH,
    MEMORY,
    PRESET_NAMES,
    SEQUENTIAL_THINKING,
    ServerFix,
    filesystem_fix,
    get_preset,
    project_fixes,
)


def default_config_path(dialect: Dialect = "claude", home: Path | None = None) -> Path:
    """Where each dialect's config file lives.

    claude: ~/.claude.json
    cursor: ~/.cursor/mcp.json
    """
    home = home or Path.home()
    if dialect == "claude":
        return home / ".claude.json"
    if dialect == "cursor":
        return home / ".cursor" / "mcp.json"
    raise ValueError(f"Unknown dialect: {dialect!r} (choose from {', '.join(DIALECTS)})")


def make_config_merger(dialect: Dialect = "claude", path: Path | None = None) -> ConfigMerger:
    """Build a ConfigMerger for the dialect's default file, or for ``path`` if given."""
    path = Path(path) if path is not None else default_config_path(dialect)
    return ConfigMerger(path, dialect=dialect)


__all__ = [
    "BACKUP_TIMESTAMP_FORMAT",
    "FETCH",
    "MEMORY",
    "PRESET_NAMES",
    "SEQUENTIAL_THINKING",
    "ConfigMerger",
    "MergeResult",
    "ServerFix",
    "apply_upserts",
    "backup_path_for",
    "create_backup",
    "default_config_path",
    "filesystem_fix",
    "get_preset",
    "list_backups",
    "make_config_merger",
    "project_fixes",
    "restore_backup",
]
