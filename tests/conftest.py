import shutil
from datetime import datetime
from pathlib import Path

import pytest

FIXTURE_ROOT = Path("tests/fixtures")

FROZEN_NOW = datetime(2026, 10, 18, 9, 30, 15)


@pytest.fixture
def clock():
    return lambda: FROZEN_NOW


@pytest.fixture
def claude_config(tmp_path):
    """A copy of the claude.json fixture that tests may modify."""
    path = tmp_path / ".claude.json"
    shutil.copyfile(FIXTURE_ROOT / "claude.json", path)
    return path


@pytest.fixture
def cursor_config(tmp_path):
    path = tmp_path / ".cursor" / "mcp.json"
    path.parent.mkdir()
    shutil.copyfile(FIXTURE_ROOT / "cursor-mcp.json", path)
    return path
