from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# "claude" is ~/.claude.json (Dialect A), "cursor" is ~/.cursor/mcp.json (Dialect B)
Dialect = Literal["claude", "cursor"]

DIALECTS: tuple[Dialect, ...] = ("claude", "cursor")


class ServerEntry(BaseModel):
    """A stdio MCP server as written to ~/.claude.json (type, command, args, env)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    type: str = "stdio"
    command: str
    args: list[str] = []
    env: dict[str, str] = {}

    def to_config_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CursorServerEntry(BaseModel):
    """A stdio MCP server as written to ~/.cursor/mcp.json (command, args only)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    command: str
    args: list[str] = []

    def to_config_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


AnyServerEntry = ServerEntry | CursorServerEntry


def entry_model(dialect: Dialect) -> type[ServerEntry] | type[CursorServerEntry]:
    """Return the entry model used by the given config file dialect."""
    if dialect == "claude":
        return ServerEntry
    if dialect == "cursor":
        return CursorServerEntry
    raise ValueError(f"Unknown dialect: {dialect!r}")


def make_entry(
    dialect: Dialect,
    command: str,
    args: list[str] | None = None,
    env: dict[str, str] | None = None,
) -> AnyServerEntry:
    """Build an entry for the dialect. env is dropped for cursor entries."""
    if dialect == "cursor":
        return CursorServerEntry(command=command, args=list(args or []))
    if dialect == "claude":
        return ServerEntry(command=command, args=list(args or []), env=dict(env or {}))
    raise ValueError(f"Unknown dialect: {dialect!r}")


class ProjectConfig(BaseModel):
    """A project-scoped block under "projects" in ~/.claude.json."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    mcp_servers: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="mcpServers")


class ConfigDocument(BaseModel):
    """Typed, read-only view of a config file. Unknown keys are kept as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    mcp_servers: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="mcpServers")
    projects: dict[str, ProjectConfig] = {}

    def server(self, name: str, dialect: Dialect = "claude") -> AnyServerEntry:
        """Validate and return a top-level server entry. Raises KeyError if absent."""
        return entry_model(dialect).model_validate(self.mcp_servers[name])
