"""Known-good entries for the MCP servers most often found misconfigured."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..models.mcp import make_entry

if TYPE_CHECKING:
    from ..models.mcp import AnyServerEntry, Dialect


@dataclass(frozen=True)
class ServerFix:
    """A launch command for one MCP server, plus the name fragments it repairs.

    Attributes:
        name: Server name used when the fix is upserted at the top level.
        match: Substrings; an existing entry whose name contains any of them
            is considered an instance of this server.
        command: Executable to launch.
        args: Arguments passed to the command.
        env: Environment for claude entries (ignored for cursor).
    """

    name: str
    match: tuple[str, ...]
    command: str
    args: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict, hash=False)

    def matches(self, server_name: str) -> bool:
        return any(fragment in server_name for fragment in self.match)

    def entry(self, dialect: Dialect = "claude") -> AnyServerEntry:
        return make_entry(dialect, self.command, list(self.args), self.env)

    def apply_to(self, entry: dict[str, Any]) -> bool:
        """Overwrite command/args of an existing entry in place. Returns True if changed."""
        args = list(self.args)
        if entry.get("command") == self.command and entry.get("args") == args:
            return False
        entry["command"] = self.command
        entry["args"] = args
        return True


def filesystem_fix(root: str | Path | None = None) -> ServerFix:
    root = str(root if root is not None else Path.home())
    return ServerFix(
        name="filesystem",
        match=("filesystem",),
        command="npx",
        args=("@modelcontextprotocol/server-filesystem", root),
    )


SEQUENTIAL_THINKING = ServerFix(
    name="sequential-thinking",
    match=("thinking", "sequential"),
    command="npx",
    args=("@modelcontextprotocol/server-sequential-thinking",),
)

FETCH = ServerFix(
    name="fetch",
    match=("fetch",),
    command="uvx",
    args=("mcp-server-fetch",),
)

MEMORY = ServerFix(
    name="memory",
    match=("memory",),
    command="npx",
    args=("@modelcontextprotocol/server-memory",),
)

PRESET_NAMES = ("filesystem", "sequential-thinking", "fetch", "memory")


def get_preset(name: str, root: str | Path | None = None) -> ServerFix:
    """Return the built-in fix called ``name``. Raises KeyError for unknown names."""
    if name == "filesystem":
        return filesystem_fix(root)
    presets = {p.name: p for p in (SEQUENTIAL_THINKING, FETCH, MEMORY)}
    try:
        return presets[name]
    except KeyError:
        raise KeyError(f"Unknown preset: {name} (choose from {', '.join(PRESET_NAMES)})") from None


def project_fixes(root: str | Path | None = None) -> list[ServerFix]:
    """Fixes applied to project-scoped servers by ConfigMerger.fix_project_servers."""
    return [filesystem_fix(root), SEQUENTIAL_THINKING]
