from __future__ import annotations

import json
import logging
import shutil
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ..errors import IOFailureError, MalformedDocumentError
from ..models.mcp import ConfigDocument

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def empty_document() -> dict[str, Any]:
    return {"mcpServers": {}}


def load_document(path: Path, missing_ok: bool = False) -> dict[str, Any]:
    """Read a config file into an insertion-ordered dict.

    If ``missing_ok`` is set, a file that does not exist loads as
    ``{"mcpServers": {}}``. Raises MalformedDocumentError when the content is not
    JSON or its root is not an object, IOFailureError for any OS-level failure.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        if missing_ok:
            logger.debug("Config %s does not exist, starting from an empty document", path)
            return empty_document()
        raise IOFailureError(f"Config file not found: {path}", path=path) from e
    except OSError as e:
        raise IOFailureError(f"Cannot read {path}: {e}", path=path) from e
    return parse_document(raw, path)


def parse_document(raw: bytes | str, path: Path | None = None) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedDocumentError(f"Invalid JSON in {path}: {e}", path=path) from e
    if not isinstance(data, dict):
        raise MalformedDocumentError(
            f"Expected a JSON object at the root of {path}, got {type(data).__name__}",
            path=path,
        )
    return data


def load_config(path: Path) -> ConfigDocument:
    """Load a config file as a typed ConfigDocument (missing file -> empty document)."""
    data = load_document(path, missing_ok=True)
    try:
        return ConfigDocument.model_validate(data)
    except ValidationError as e:
        raise MalformedDocumentError(f"Unexpected structure in {path}: {e}", path=path) from e


def dump_document(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_document(path: Path, data: dict[str, Any]) -> None:
    """Replace the file at ``path`` with ``data`` in one step.

    The document is written to a temp file beside the real target and renamed
    over it, so readers see either the old or the new content. A symlinked
    config keeps its link (the file it points to is replaced), and an existing
    file keeps its permission bits. The parent directory must already exist.
    """
    text = dump_document(data)
    target = path.resolve()
    tmp = target.with_name(target.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as fh:
            if target.exists():
                shutil.copymode(target, tmp)
            fh.write(text)
        tmp.replace(target)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise IOFailureError(f"Cannot write {path}: {e}", path=path) from e
    logger.info("Wrote %s", target)
