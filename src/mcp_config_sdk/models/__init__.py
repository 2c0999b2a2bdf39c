from .mcp import (
    DIALECTS,
    AnyServerEntry,
    ConfigDocument,
    CursorServerEntry,
    Dialect,
    ProjectConfig,
    ServerEntry,
    entry_model,
    make_entry,
)

__all__ = [
    "DIALECTS",
    "AnyServerEntry",
    "ConfigDocument",
    "CursorServerEntry",
    "Dialect",
    "ProjectConfig",
    "ServerEntry",
    "entry_model",
    "make_entry",
]
