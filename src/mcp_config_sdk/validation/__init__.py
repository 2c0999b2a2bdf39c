from __future__ import annotations

from typing import TYPE_CHECKING

from ..loaders.document import load_document
from ._document import validate_document
from ._result import ValidationIssue, ValidationResult

if TYPE_CHECKING:
    from pathlib import Path

    from ..models.mcp import Dialect


def validate_file(path: Path, dialect: Dialect = "claude") -> ValidationResult:
    """Load and diagnose a config file from disk.

    Raises the loader's errors (IOFailureError, MalformedDocumentError) when the
    file itself cannot be read.
    """
    return validate_document(load_document(path), dialect)


__all__ = [
    "ValidationIssue",
    "ValidationResult",
    "validate_document",
    "validate_file",
]
