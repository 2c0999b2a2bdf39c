from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Level = Literal["error", "warning"]


@dataclass(frozen=True)
class ValidationIssue:
    """One doctor finding.

    Attributes:
        level: "error" makes the config unusable, "warning" is worth a look.
        path: Location in the document, e.g. "projects[/home/x].mcpServers.fs.args[1]".
        message: Human-readable description.
        server: Name of the server entry the finding is about, if any.
    """

    level: Level
    path: str
    message: str
    server: str | None = None

    def __str__(self) -> str:
        return f"{self.level}: {self.path}: {self.message}"


@dataclass
class ValidationResult:
    """All findings for one config document, in discovery order."""

    issues: list[ValidationIssue] = field(default_factory=list)

    def add(self, level: Level, path: str, message: str, server: str | None = None) -> None:
        self.issues.append(ValidationIssue(level, path, message, server))

    @property
    def valid(self) -> bool:
        """True when nothing would stop a server from launching (warnings allowed)."""
        return not self.errors

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.level == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.level == "warning"]

    def for_server(self, name: str) -> list[ValidationIssue]:
        return [i for i in self.issues if i.server == name]

    def servers_with_errors(self) -> list[str]:
        names: list[str] = []
        for issue in self.errors:
            if issue.server is not None and issue.server not in names:
                names.append(issue.server)
        return names

    def summary(self) -> str:
        """E.g. "2 errors, 1 warning" or "no issues"."""
        if not self.issues:
            return "no issues"
        parts = []
        for label, count in (("error", len(self.errors)), ("warning", len(self.warnings))):
            if count:
                parts.append(f"{count} {label}{'' if count == 1 else 's'}")
        return ", ".join(parts)
