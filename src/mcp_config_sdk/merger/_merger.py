"""ConfigMerger: backup-then-rewrite edits of the mcpServers map in a config file."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from ..errors import IOFailureError, MalformedDocumentError, MissingEntryError
from ..loaders.document import load_document, write_document
from ..models.mcp import CursorServerEntry, ServerEntry
from ._backup import create_backup, list_backups, restore_backup
from ._presets import project_fixes

if TYPE_CHECKING:
    from ..models.mcp import AnyServerEntry, Dialect
    from ._presets import ServerFix

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Outcome of one rewrite of a config file.

    Attributes:
        path: The config file that was rewritten.
        backup: Backup of the previous content, or None if the file did not exist.
        changed: Names (or "<project>:<name>" keys) whose stored value changed.
    """

    path: Path
    backup: Path | None
    changed: list[str] = field(default_factory=list)


class ConfigMerger:
    """Applies server-entry edits to one config file.

    Every write follows the same steps: back up the existing file, load it,
    mutate it in memory, then replace the file in one rename. A failure after
    the backup leaves the original file untouched.

        merger = ConfigMerger(Path.home() / ".claude.json")
        merger.apply_upserts({"memory": ServerEntry(command="mcp-server-memory")})
    """

    def __init__(
        self,
        path: Path,
        dialect: Dialect = "claude",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = Path(path)
        self._dialect = dialect
        self._clock = clock or datetime.now

    @property
    def path(self) -> Path:
        return self._path

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    # --- writes ---

    def apply_upserts(self, entries: Mapping[str, AnyServerEntry | Mapping[str, Any]]) -> MergeResult:
        """Insert or fully replace top-level servers by name.

        A missing file is created as ``{"mcpServers": {...}}``. Existing entries
        are replaced whole; their fields are not merged with the new ones.
        """
        updates = {name: self._to_config(name, entry) for name, entry in entries.items()}
        data, backup = self._begin(missing_ok=True)
        servers = _servers_of(data, self._path, create=True)

        changed = [name for name, entry in updates.items() if servers.get(name) != entry]
        servers.update(updates)

        write_document(self._path, data)
        logger.info("Upserted %d server(s) into %s (%d changed)", len(updates), self._path, len(changed))
        return MergeResult(path=self._path, backup=backup, changed=changed)

    def fix_project_servers(
        self,
        fixes: Iterable[ServerFix] | None = None,
        root: str | Path | None = None,
    ) -> MergeResult:
        """Rewrite command/args of matching servers under every ``projects.*.mcpServers``.

        An entry matches a fix when its name contains one of the fix's substrings;
        the first matching fix wins. Other fields and non-matching entries are
        left as they are, and no entries are created.
        """
        fixes = list(fixes) if fixes is not None else project_fixes(root)
        data, backup = self._begin(missing_ok=False)

        projects = data.get("projects", {})
        if not isinstance(projects, dict):
            raise MalformedDocumentError(f'"projects" in {self._path} is not an object', path=self._path)

        changed: list[str] = []
        for project, scoped in projects.items():
            if not isinstance(scoped, dict):
                logger.debug("Skipping project %s: not an object", project)
                continue
            servers = scoped.get("mcpServers")
            if not isinstance(servers, dict):
                if servers is not None:
                    logger.debug("Skipping project %s: mcpServers is not an object", project)
                continue
            for name, entry in servers.items():
                if not isinstance(entry, dict):
                    continue
                fix = next((f for f in fixes if f.matches(name)), None)
                if fix is not None and fix.apply_to(entry):
                    changed.append(f"{project}:{name}")

        write_document(self._path, data)
        logger.info("Fixed %d project server(s) in %s", len(changed), self._path)
        return MergeResult(path=self._path, backup=backup, changed=changed)

    def remove_servers(self, names: Iterable[str]) -> MergeResult:
        """Delete top-level servers. Raises MissingEntryError before writing if any is absent."""
        names = list(names)
        if not self._path.exists():
            raise MissingEntryError(names[0] if names else "mcpServers", path=self._path)
        data, backup = self._begin(missing_ok=False)
        servers = _servers_of(data, self._path, create=False)
        for name in names:
            if name not in servers:
                raise MissingEntryError(name, path=self._path)
        for name in names:
            del servers[name]

        write_document(self._path, data)
        logger.info("Removed %s from %s", ", ".join(names), self._path)
        return MergeResult(path=self._path, backup=backup, changed=names)

    def restore(self, backup: Path | None = None) -> tuple[Path, Path | None]:
        """Restore a backup (default: the newest). See restore_backup."""
        return restore_backup(self._path, self._clock(), backup=backup)

    # --- reads ---

    def list_servers(self) -> dict[str, Any]:
        """Return the top-level mcpServers map ({} if the file does not exist)."""
        data = load_document(self._path, missing_ok=True)
        return _servers_of(data, self._path, create=False)

    def list_backups(self) -> list[Path]:
        return list_backups(self._path)

    # --- internal helpers ---

    def _begin(self, missing_ok: bool) -> tuple[dict[str, Any], Path | None]:
        backup = None
        if self._path.exists():
            backup = create_backup(self._path, self._clock())
        elif not missing_ok:
            raise IOFailureError(f"Config file not found: {self._path}", path=self._path)
        return load_document(self._path, missing_ok=missing_ok), backup

    def _to_config(self, name: str, entry: AnyServerEntry | Mapping[str, Any]) -> dict[str, Any]:
        if isinstance(entry, (ServerEntry, CursorServerEntry)):
            expected = ServerEntry if self._dialect == "claude" else CursorServerEntry
            if not isinstance(entry, expected):
                logger.warning(
                    "Server %s is a %s but %s is a %s config",
                    name,
                    type(entry).__name__,
                    self._path,
                    self._dialect,
                )
            return entry.to_config_dict()
        if isinstance(entry, Mapping):
            return copy.deepcopy(dict(entry))
        raise TypeError(f"Server {name}: expected a server entry or mapping, got {type(entry).__name__}")


def apply_upserts(
    path: Path,
    entries: Mapping[str, AnyServerEntry | Mapping[str, Any]],
    dialect: Dialect = "claude",
) -> MergeResult:
    """One-shot form of ConfigMerger(path, dialect).apply_upserts(entries)."""
    return ConfigMerger(path, dialect=dialect).apply_upserts(entries)


def _servers_of(data: dict[str, Any], path: Path, create: bool) -> dict[str, Any]:
    servers = data.setdefault("mcpServers", {}) if create else data.get("mcpServers", {})
    if not isinstance(servers, dict):
        raise MalformedDocumentError(f'"mcpServers" in {path} is not an object', path=path)
    return servers
