"""Error codes, their display metadata and the registry that maps them."""

from .registry import (
    ENCODING,
    INTERNAL,
    IO,
    UNCATEGORIZED,
    USER,
    Code,
    CodeRange,
    CodeRegistry,
    Metadata,
    RegistryFrozenError,
    StdCode,
    category_of,
    default_registry,
)

__all__ = [
    "Code", "StdCode", "CodeRange", "category_of", "UNCATEGORIZED",
    "INTERNAL", "IO", "ENCODING", "USER",
    "Metadata", "CodeRegistry", "RegistryFrozenError", "default_registry",
]
