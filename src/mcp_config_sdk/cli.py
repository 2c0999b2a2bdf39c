"""
mcp-config: edit MCP server entries in ~/.claude.json and ~/.cursor/mcp.json.

Usage:
    mcp-config list                          # servers in ~/.claude.json
    mcp-config -d cursor list --json         # servers in ~/.cursor/mcp.json
    mcp-config add                           # prompts for name, command, args
    mcp-config add github --command npx -a @modelcontextprotocol/server-github -e GITHUB_TOKEN=...
    mcp-config fix filesystem --root ~/code  # rewrite a known server entry
    mcp-config fix-projects                  # repair project-scoped entries
    mcp-config doctor                        # diagnose the config file
    mcp-config backups / restore [BACKUP]
"""

from __future__ import annotations

import json
import logging
import shlex
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .errors import IOFailureError, MalformedDocumentError, MissingEntryError
from .merger import PRESET_NAMES, ConfigMerger, get_preset, make_config_merger
from .models.mcp import make_entry
from .validation import validate_file

if TYPE_CHECKING:
    from .merger import MergeResult

console = Console()
err_console = Console(stderr=True)

_T = TypeVar("_T")


class DialectChoice(str, Enum):
    claude = "claude"
    cursor = "cursor"


app = typer.Typer(
    help="Edit MCP server entries in Claude and Cursor config files, with backups.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        typer.echo(f"mcp-config {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    dialect: DialectChoice = typer.Option(
        DialectChoice.claude,
        "--dialect",
        "-d",
        help="Config file format: claude (~/.claude.json) or cursor (~/.cursor/mcp.json)",
    ),
    path: Path | None = typer.Option(
        None,
        "--path",
        "-p",
        envvar="MCP_CONFIG_PATH",
        help="Config file to edit (defaults to the dialect's standard location)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every step"),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """mcp-config: backed-up edits of MCP server entries."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    ctx.obj = make_config_merger(dialect.value, path.expanduser() if path else None)


# --- helpers ---


def print_cli_error(message: str, hint: str | None = None) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    if hint:
        err_console.print(f"  [dim]{escape(hint)}[/dim]")


def _run(merger: ConfigMerger, step: str, action: Callable[[], _T]) -> _T:
    """Run one merger operation, turning its errors into a message and exit code 1.

    The backup hint only names a backup this operation created before failing.
    """
    before = set(merger.list_backups())
    try:
        return action()
    except (MalformedDocumentError, IOFailureError, MissingEntryError) as e:
        fresh = [b for b in merger.list_backups() if b not in before]
        hint = f"Latest backup: {fresh[0]}" if fresh else None
        print_cli_error(f"{step} failed: {e}", hint=hint)
        raise typer.Exit(1) from e


def _print_result(result: MergeResult, verb: str) -> None:
    if result.backup is not None:
        console.print(f"[dim]Backup:[/dim] {result.backup}")
    if result.changed:
        for key in result.changed:
            console.print(f"  [green]✓[/green] {verb} {escape(key)}")
    else:
        console.print("  [dim]Nothing changed[/dim]")
    console.print(f"[dim]Wrote[/dim] {result.path}")


def parse_env(pairs: list[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--env")
        env[key] = value
    return env


# --- commands ---


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Server name (prompted if omitted)"),
    command: str | None = typer.Option(None, "--command", "-c", help="Executable to launch"),
    args: list[str] | None = typer.Option(None, "--arg", "-a", help="Argument (repeatable)"),
    env: list[str] | None = typer.Option(None, "--env", "-e", help="KEY=VALUE (repeatable)"),
):
    """Add a server, or replace the existing server with the same name."""
    merger: ConfigMerger = ctx.obj
    if env and merger.dialect == "cursor":
        raise typer.BadParameter("cursor entries have no env field", param_hint="--env")
    if name is None:
        name = typer.prompt("Server name").strip()
    if command is None:
        command = typer.prompt("Command").strip()
        if not args:
            args = shlex.split(typer.prompt("Arguments", default="", show_default=False))
    entry = make_entry(merger.dialect, command, args or [], parse_env(env or []))
    result = _run(merger, "Upsert", lambda: merger.apply_upserts({name: entry}))
    _print_result(result, "set")


@app.command("fix")
def fix_cmd(
    ctx: typer.Context,
    preset: str = typer.Argument(..., help=f"One of: {', '.join(PRESET_NAMES)}"),
    root: Path | None = typer.Option(
        None, "--root", help="Directory the filesystem server may access (default: home)"
    ),
):
    """Write the known-good entry for a common server."""
    merger: ConfigMerger = ctx.obj
    try:
        fix = get_preset(preset, root)
    except KeyError as e:
        raise typer.BadParameter(e.args[0], param_hint="PRESET") from e
    result = _run(merger, "Upsert", lambda: merger.apply_upserts({fix.name: fix.entry(merger.dialect)}))
    _print_result(result, "set")


@app.command("fix-projects")
def fix_projects_cmd(
    ctx: typer.Context,
    root: Path | None = typer.Option(
        None, "--root", help="Directory the filesystem server may access (default: home)"
    ),
):
    """Repair filesystem and sequential-thinking servers inside every project."""
    merger: ConfigMerger = ctx.obj
    result = _run(merger, "Project fix", lambda: merger.fix_project_servers(root=root))
    _print_result(result, "fixed")


@app.command("remove")
def remove_cmd(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="Server names to delete"),
):
    """Delete servers by name."""
    merger: ConfigMerger = ctx.obj
    result = _run(merger, "Remove", lambda: merger.remove_servers(names))
    _print_result(result, "removed")


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List configured servers."""
    merger: ConfigMerger = ctx.obj
    servers = _run(merger, "Read", merger.list_servers)

    if output_json:
        typer.echo(json.dumps(servers, indent=2, ensure_ascii=False))
        return
    if not servers:
        console.print(f"[dim]No servers in {merger.path}[/dim]")
        return

    table = Table(title=str(merger.path))
    table.add_column("Name", style="bold")
    table.add_column("Command")
    table.add_column("Args", style="dim")
    for name, entry in servers.items():
        if not isinstance(entry, dict):
            table.add_row(escape(name), "[red]invalid[/red]", "")
            continue
        table.add_row(
            escape(name),
            escape(str(entry.get("command", entry.get("url", "")))),
            escape(" ".join(str(a) for a in entry.get("args", []) or [])),
        )
    console.print(table)


@app.command("doctor")
def doctor_cmd(ctx: typer.Context):
    """Diagnose the config file and every server entry in it."""
    merger: ConfigMerger = ctx.obj
    result = _run(merger, "Read", lambda: validate_file(merger.path, merger.dialect))

    for issue in result.issues:
        color = "red" if issue.level == "error" else "yellow"
        console.print(f"  [{color}]{issue.level}[/{color}] {escape(issue.path)}: {escape(issue.message)}")
    if result.valid:
        console.print(f"[green]✓[/green] {merger.path} looks good ({result.summary()})", soft_wrap=True)
        return
    console.print(f"[red]✗[/red] {result.summary()} in {merger.path}", soft_wrap=True)
    broken = result.servers_with_errors()
    if broken:
        console.print(f"  [dim]Broken servers: {escape(', '.join(broken))}[/dim]")
    raise typer.Exit(1)


@app.command("backups")
def backups_cmd(ctx: typer.Context):
    """List backups of the config file, newest first."""
    merger: ConfigMerger = ctx.obj
    backups = merger.list_backups()
    if not backups:
        console.print(f"[dim]No backups of {merger.path}[/dim]")
        return
    for backup in backups:
        typer.echo(str(backup))


@app.command("restore")
def restore_cmd(
    ctx: typer.Context,
    backup: Path | None = typer.Argument(None, help="Backup file (default: newest)"),
):
    """Restore the config file from a backup."""
    merger: ConfigMerger = ctx.obj
    restored, safety = _run(merger, "Restore", lambda: merger.restore(backup))
    if safety is not None:
        console.print(f"[dim]Backup:[/dim] {safety}")
    console.print(f"[green]✓[/green] Restored {merger.path} from {restored}")


def main():
    app()


if __name__ == "__main__":
    main()
