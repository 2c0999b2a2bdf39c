from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class MalformedDocumentError(Exception):
    """Raised when a config file is not valid JSON or has an unexpected shape.

    Attributes:
        path: The config file that could not be parsed, if applicable.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class IOFailureError(Exception):
    """Raised when a config or backup file cannot be read or written.

    Attributes:
        path: The file the failed operation was acting on, if applicable.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class MissingEntryError(Exception):
    """Raised when a named server (or a backup) does not exist."""

    def __init__(self, name: str, path: Path | None = None) -> None:
        self.name = name
        self.path = path
        msg = f"Entry not found: {name}"
        if path is not None:
            msg += f" (in {path})"
        super().__init__(msg)
