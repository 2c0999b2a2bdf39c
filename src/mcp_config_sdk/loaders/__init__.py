from .document import (
    dump_document,
    empty_document,
    load_config,
    load_document,
    parse_document,
    write_document,
)

__all__ = [
    "dump_document",
    "empty_document",
    "load_config",
    "load_document",
    "parse_document",
    "write_document",
]
