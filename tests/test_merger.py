"""Tests for ConfigMerger upserts, removals and the failure guarantees around them."""

import json
import os
from pathlib import Path

import pytest

from mcp_config_sdk import (
    ConfigMerger,
    CursorServerEntry,
    IOFailureError,
    MalformedDocumentError,
    MissingEntryError,
    ServerEntry,
    apply_upserts,
    default_config_path,
    make_config_merger,
)

MEMORY = {"command": "mcp-server-memory", "args": [], "env": {}}


def _backups(path: Path) -> list[Path]:
    return sorted(path.parent.glob(f"{path.name}.backup-*"))


# --- apply_upserts ---


def test_upsert_into_missing_file(tmp_path):
    path = tmp_path / ".claude.json"
    result = apply_upserts(path, {"memory": MEMORY})
    assert json.loads(path.read_text()) == {"mcpServers": {"memory": MEMORY}}
    assert result.backup is None
    assert result.changed == ["memory"]
    assert _backups(path) == []


def test_upsert_stores_entry_exactly(claude_config, clock):
    entry = {"command": "npx", "args": ["-y", "pkg"], "env": {"A": "1"}, "custom": [1, 2]}
    ConfigMerger(claude_config, clock=clock).apply_upserts({"custom": entry})
    assert json.loads(claude_config.read_text())["mcpServers"]["custom"] == entry


def test_upsert_replaces_whole_entry_in_place(claude_config, clock):
    new = {"command": "npx", "args": ["@modelcontextprotocol/server-filesystem", "/srv"]}
    ConfigMerger(claude_config, clock=clock).apply_upserts({"filesystem": new})

    servers = json.loads(claude_config.read_text())["mcpServers"]
    assert servers["filesystem"] == new  # type/env are dropped, not merged
    assert list(servers) == ["fetch", "filesystem"]


def test_upsert_preserves_unrelated_keys(claude_config, clock):
    before = json.loads(claude_config.read_text())
    ConfigMerger(claude_config, clock=clock).apply_upserts({"memory": MEMORY})
    after = json.loads(claude_config.read_text())
    assert list(after) == list(before)
    assert after["projects"] == before["projects"]
    assert after["numStartups"] == 42


def test_upsert_creates_missing_mcp_servers(tmp_path, clock):
    path = tmp_path / "settings.json"
    path.write_text('{"theme": "light"}')
    ConfigMerger(path, clock=clock).apply_upserts({"memory": MEMORY})
    assert json.loads(path.read_text()) == {"theme": "light", "mcpServers": {"memory": MEMORY}}


def test_upsert_model_entries_use_dialect_shape(cursor_config, clock):
    merger = ConfigMerger(cursor_config, dialect="cursor", clock=clock)
    merger.apply_upserts({"fetch": CursorServerEntry(command="uvx", args=["mcp-server-fetch"])})
    servers = json.loads(cursor_config.read_text())["mcpServers"]
    assert servers["fetch"] == {"command": "uvx", "args": ["mcp-server-fetch"]}


def test_upsert_claude_model_entry(tmp_path):
    path = tmp_path / ".claude.json"
    apply_upserts(path, {"memory": ServerEntry(command="mcp-server-memory")})
    assert json.loads(path.read_text())["mcpServers"]["memory"] == {
        "type": "stdio",
        "command": "mcp-server-memory",
        "args": [],
        "env": {},
    }


def test_upsert_does_not_alias_caller_dict(tmp_path):
    path = tmp_path / ".claude.json"
    entry = {"command": "x", "args": ["a"]}
    merger = ConfigMerger(path)
    merger.apply_upserts({"x": entry})
    entry["args"].append("b")
    assert merger.list_servers()["x"]["args"] == ["a"]


def test_upsert_rejects_non_mapping_entry(tmp_path):
    with pytest.raises(TypeError):
        apply_upserts(tmp_path / "c.json", {"bad": ["npx"]})  # type: ignore[dict-item]
    assert not (tmp_path / "c.json").exists()


def test_upsert_reports_only_changed_names(claude_config, clock):
    fetch = json.loads(claude_config.read_text())["mcpServers"]["fetch"]
    result = ConfigMerger(claude_config, clock=clock).apply_upserts({"fetch": fetch, "memory": MEMORY})
    assert result.changed == ["memory"]


def test_upsert_is_idempotent(tmp_path):
    path = tmp_path / ".claude.json"
    path.write_text('{"theme":"dark","mcpServers":{"a":{"command":"x"}}}')
    merger = ConfigMerger(path)
    merger.apply_upserts({"memory": MEMORY})
    once = path.read_bytes()
    merger.apply_upserts({"memory": MEMORY})
    assert path.read_bytes() == once


def test_upsert_output_is_two_space_indented(tmp_path):
    path = tmp_path / ".claude.json"
    apply_upserts(path, {"memory": MEMORY})
    assert path.read_text().startswith('{\n  "mcpServers": {\n    "memory": {')


# --- backups ---


def test_successful_write_makes_one_backup_of_old_content(claude_config, clock):
    original = claude_config.read_bytes()
    result = ConfigMerger(claude_config, clock=clock).apply_upserts({"memory": MEMORY})
    assert _backups(claude_config) == [result.backup]
    assert result.backup.name == ".claude.json.backup-20261018-093015"
    assert result.backup.read_bytes() == original


def test_each_write_adds_exactly_one_backup(claude_config, clock):
    merger = ConfigMerger(claude_config, clock=clock)
    merger.apply_upserts({"memory": MEMORY})
    second_input = claude_config.read_bytes()
    result = merger.apply_upserts({"memory": MEMORY})
    assert len(_backups(claude_config)) == 2
    assert result.backup.read_bytes() == second_input


def test_malformed_document_is_backed_up_and_untouched(tmp_path, clock):
    path = tmp_path / ".claude.json"
    path.write_text("{ broken")
    with pytest.raises(MalformedDocumentError):
        ConfigMerger(path, clock=clock).apply_upserts({"memory": MEMORY})
    assert path.read_text() == "{ broken"
    backups = _backups(path)
    assert len(backups) == 1
    assert backups[0].read_text() == "{ broken"


def test_non_object_root_is_malformed(tmp_path):
    path = tmp_path / ".claude.json"
    path.write_text('["not", "an", "object"]')
    with pytest.raises(MalformedDocumentError):
        apply_upserts(path, {"memory": MEMORY})
    assert json.loads(path.read_text()) == ["not", "an", "object"]


def test_non_object_mcp_servers_is_malformed(tmp_path):
    path = tmp_path / ".claude.json"
    path.write_text('{"mcpServers": []}')
    with pytest.raises(MalformedDocumentError):
        apply_upserts(path, {"memory": MEMORY})
    assert path.read_text() == '{"mcpServers": []}'
    assert len(_backups(path)) == 1


def test_missing_parent_directory_is_io_failure(tmp_path):
    path = tmp_path / ".cursor" / "mcp.json"
    with pytest.raises(IOFailureError):
        apply_upserts(path, {"memory": MEMORY}, dialect="cursor")
    assert not path.exists()


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
def test_read_only_directory_is_io_failure(tmp_path):
    path = tmp_path / "mcp.json"
    path.write_text('{"mcpServers": {}}')
    tmp_path.chmod(0o500)
    try:
        with pytest.raises(IOFailureError):
            apply_upserts(path, {"memory": MEMORY})
    finally:
        tmp_path.chmod(0o700)
    assert path.read_text() == '{"mcpServers": {}}'


@pytest.mark.skipif(os.name != "posix", reason="needs POSIX permission bits")
def test_private_config_stays_private(claude_config, clock):
    claude_config.chmod(0o600)
    result = ConfigMerger(claude_config, clock=clock).apply_upserts({"memory": MEMORY})
    assert claude_config.stat().st_mode & 0o777 == 0o600
    assert result.backup.stat().st_mode & 0o777 == 0o600


def test_symlinked_config_is_updated_in_place(tmp_path, clock):
    real = tmp_path / "dotfiles" / "claude.json"
    real.parent.mkdir()
    real.write_text('{"mcpServers": {}}')
    link = tmp_path / ".claude.json"
    link.symlink_to(real)

    result = ConfigMerger(link, clock=clock).apply_upserts({"memory": MEMORY})

    assert link.is_symlink()
    assert link.resolve() == real.resolve()
    assert json.loads(real.read_text()) == {"mcpServers": {"memory": MEMORY}}
    assert result.backup.read_text() == '{"mcpServers": {}}'


# --- remove_servers ---


def test_remove_servers(claude_config, clock):
    result = ConfigMerger(claude_config, clock=clock).remove_servers(["fetch"])
    assert list(json.loads(claude_config.read_text())["mcpServers"]) == ["filesystem"]
    assert result.changed == ["fetch"]
    assert result.backup is not None


def test_remove_unknown_server_writes_nothing(claude_config, clock):
    original = claude_config.read_bytes()
    with pytest.raises(MissingEntryError) as exc:
        ConfigMerger(claude_config, clock=clock).remove_servers(["fetch", "nope"])
    assert exc.value.name == "nope"
    assert claude_config.read_bytes() == original


def test_remove_from_missing_file(tmp_path):
    with pytest.raises(MissingEntryError):
        ConfigMerger(tmp_path / "nope.json").remove_servers(["fetch"])


# --- reads and factory ---


def test_list_servers(cursor_config):
    servers = ConfigMerger(cursor_config, dialect="cursor").list_servers()
    assert list(servers) == ["memory"]


def test_list_servers_missing_file(tmp_path):
    assert ConfigMerger(tmp_path / "nope.json").list_servers() == {}


def test_restore_undoes_upsert(claude_config, clock):
    original = claude_config.read_bytes()
    merger = ConfigMerger(claude_config, clock=clock)
    merger.apply_upserts({"memory": MEMORY})
    merger.restore()
    assert claude_config.read_bytes() == original


def test_default_config_paths(tmp_path):
    assert default_config_path("claude", home=tmp_path) == tmp_path / ".claude.json"
    assert default_config_path("cursor", home=tmp_path) == tmp_path / ".cursor" / "mcp.json"
    with pytest.raises(ValueError):
        default_config_path("vscode", home=tmp_path)  # type: ignore[arg-type]


def test_make_config_merger_explicit_path(tmp_path):
    merger = make_config_merger("cursor", tmp_path / "mcp.json")
    assert merger.path == tmp_path / "mcp.json"
    assert merger.dialect == "cursor"
