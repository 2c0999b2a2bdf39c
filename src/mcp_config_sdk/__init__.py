"""Safe, backed-up edits of MCP server entries in Claude and Cursor config files."""

from .errors import IOFailureError, MalformedDocumentError, MissingEntryError
from .loaders import dump_document, load_config, load_document, write_document
from .merger import (
    ConfigMerger,
    MergeResult,
    ServerFix,
    apply_upserts,
    default_config_path,
    get_preset,
    list_backups,
    make_config_merger,
    project_fixes,
    restore_backup,
)
from .models import ConfigDocument, CursorServerEntry, Dialect, ServerEntry, make_entry
from .validation import ValidationIssue, ValidationResult, validate_document, validate_file

__version__ = "0.1.0"

__all__ = [
    "ConfigDocument",
    "ConfigMerger",
    "CursorServerEntry",
    "Dialect",
    "IOFailureError",
    "MalformedDocumentError",
    "MergeResult",
    "MissingEntryError",
    "ServerEntry",
    "ServerFix",
    "ValidationIssue",
    "ValidationResult",
    "__version__",
    "apply_upserts",
    "default_config_path",
    "dump_document",
    "get_preset",
    "list_backups",
    "load_config",
    "load_document",
    "make_config_merger",
    "make_entry",
    "project_fixes",
    "restore_backup",
    "validate_document",
    "validate_file",
    "write_document",
]
