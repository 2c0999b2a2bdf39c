from __future__ import annotations

import shutil
from typing import TYPE_CHECKING, Any, Callable

from ._result import ValidationResult

if TYPE_CHECKING:
    from ..models.mcp import Dialect

Which = Callable[[str], "str | None"]


def validate_document(
    data: dict[str, Any],
    dialect: Dialect = "claude",
    which: Which | None = shutil.which,
) -> ValidationResult:
    """Check every server entry in a loaded config document.

    ``which`` resolves commands on PATH; pass None to skip that check.
    """
    result = ValidationResult()

    servers = data.get("mcpServers")
    if servers is None:
        result.add("warning", "mcpServers", "No mcpServers defined")
    else:
        _check_servers(servers, "mcpServers", dialect, which, result)

    projects = data.get("projects")
    if projects is not None:
        if dialect == "cursor":
            result.add("warning", "projects", "projects is only read from ~/.claude.json")
        if not isinstance(projects, dict):
            result.add("error", "projects", "projects must be an object")
        else:
            for project, scoped in projects.items():
                if not isinstance(scoped, dict) or "mcpServers" not in scoped:
                    continue
                _check_servers(
                    scoped["mcpServers"], f"projects[{project}].mcpServers", dialect, which, result
                )

    return result


def _check_servers(
    servers: Any,
    prefix: str,
    dialect: Dialect,
    which: Which | None,
    result: ValidationResult,
) -> None:
    if not isinstance(servers, dict):
        result.add("error", prefix, f"{prefix} must be an object")
        return
    for name, entry in servers.items():
        _check_entry(name, entry, f"{prefix}.{name}", dialect, which, result)


def _check_entry(
    name: str,
    entry: Any,
    path: str,
    dialect: Dialect,
    which: Which | None,
    result: ValidationResult,
) -> None:
    def add(level, where, message):
        result.add(level, where, message, server=name)

    if not isinstance(entry, dict):
        add("error", path, "Server entry must be an object")
        return

    # Remote (url-based) servers have no command to check
    if "url" in entry and "command" not in entry:
        return

    command = entry.get("command")
    if not isinstance(command, str) or not command.strip():
        add("error", f"{path}.command", "command: Required")
    elif which is not None and which(command) is None:
        add("warning", f"{path}.command", f'Command "{command}" not found on PATH')

    args = entry.get("args", [])
    if not isinstance(args, list):
        add("error", f"{path}.args", "args must be a list of strings")
    else:
        for i, arg in enumerate(args):
            if not isinstance(arg, str):
                add("error", f"{path}.args[{i}]", "args must be a list of strings")

    env = entry.get("env")
    if env is not None:
        if not isinstance(env, dict):
            add("error", f"{path}.env", "env must be an object")
        else:
            for key, value in env.items():
                if not isinstance(value, str):
                    add("error", f"{path}.env.{key}", "env values must be strings")

    if dialect == "claude" and "type" not in entry:
        add("warning", f"{path}.type", 'Missing type (expected "stdio")')
    if dialect == "cursor":
        for key in ("type", "env"):
            if key in entry:
                add("warning", f"{path}.{key}", f"{key} is not part of the cursor entry format")
