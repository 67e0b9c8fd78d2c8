"""Error codes and their display metadata.

A code is a small int. Its metadata (user-safe text, log text, HTTP status)
lives in a `CodeRegistry` that is built explicitly at startup, optionally
frozen, and read without locking afterwards.

Example:
    >>> registry = CodeRegistry()
    >>> registry.register(101, external="Bad input", internal="read: end of input", http_status=400)
    >>> registry.freeze().lookup(101).http_status
    400
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Annotated, Self, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from errchain.runtime.observability.logging import get_logger

Code: TypeAlias = int

log = get_logger("errchain.codes")


class StdCode(IntEnum):
    """Built-in codes. UNSPECIFIED and UNKNOWN both mean "no category"."""
    UNSPECIFIED = 0
    UNKNOWN = 1
    FATAL = 2


@dataclass(frozen=True, slots=True)
class CodeRange:
    """Reserved code range by convention, inclusive. `last=None` is open-ended."""

    first: int
    last: int | None = None

    def __contains__(self, code: object) -> bool:
        return isinstance(code, int) and code >= self.first and (self.last is None or code <= self.last)


INTERNAL = CodeRange(0, 99)
IO = CodeRange(100, 199)
ENCODING = CodeRange(200, 299)
USER = CodeRange(300)

_RANGES: tuple[tuple[str, CodeRange], ...] = (
    ("internal", INTERNAL), ("io", IO), ("encoding", ENCODING), ("user", USER),
)

# Codes that carry no category: the message is shown verbatim
UNCATEGORIZED: frozenset[int] = frozenset({StdCode.UNSPECIFIED, StdCode.UNKNOWN})


def category_of(code: Code) -> str:
    """Name of the reserved range a code falls in ("internal", "io", "encoding", "user")."""
    for name, rng in _RANGES:
        if code in rng:
            return name
    raise ValueError(f"Invalid error code: {code}")


class RegistryFrozenError(RuntimeError):
    """Raised when registering into a frozen CodeRegistry."""


# ═══════════════════════════════════════════════════════════════════════════════
# Metadata
# ═══════════════════════════════════════════════════════════════════════════════


class Metadata(BaseModel):
    """Display metadata for a code. `external` is the only text safe for untrusted consumers."""

    model_config = ConfigDict(
        frozen=True, str_strip_whitespace=True, extra="forbid",
        json_schema_extra={"examples": [{"external": "Bad Request", "internal": "invalid json", "http_status": 400}]},
    )

    external: str = Field(default="", description="User-facing error text")
    internal: str = Field(default="", description="Log-only error text")
    http_status: Annotated[int, Field(ge=100, le=599)] = 200


_BUILTINS: dict[int, Metadata] = {
    StdCode.UNKNOWN: Metadata(
        external="An unknown error occurred", internal="An unknown error occurred", http_status=500,
    ),
    StdCode.FATAL: Metadata(
        external="Internal Server Error", internal="A fatal error occurred", http_status=500,
    ),
}


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════


class CodeRegistry:
    """Mapping of codes to Metadata. Populate at startup, then freeze().

    The UNKNOWN and FATAL built-ins are always present; resolve() falls back to
    UNKNOWN for codes without an entry.
    """

    __slots__ = ("_entries", "_frozen")

    def __init__(self, entries: Mapping[int, Metadata] | None = None) -> None:
        self._entries: dict[int, Metadata] = dict(_BUILTINS)
        self._frozen = False
        for code, meta in (entries or {}).items():
            self.register(code, meta)

    def register(
        self,
        code: Code,
        metadata: Metadata | None = None,
        *,
        external: str = "",
        internal: str = "",
        http_status: int = 200,
    ) -> None:
        """Insert or overwrite the entry for code."""
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register code {code}: registry is frozen")
        if code < 0:
            raise ValueError(f"Invalid error code: {code}")
        meta = metadata or Metadata(external=external, internal=internal, http_status=http_status)
        if code in self._entries and self._entries[code] != meta:
            log.warning("error code overwritten", code=int(code), previous=self._entries[code].internal)
        self._entries[int(code)] = meta
        log.debug("error code registered", code=int(code), http_status=meta.http_status)

    def freeze(self) -> Self:
        """Make the registry read-only. Returns self for chaining."""
        if not self._frozen:
            self._frozen = True
            log.debug("code registry frozen", codes=len(self._entries))
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, code: Code) -> Metadata | None:
        """Metadata registered for code, or None."""
        return self._entries.get(code)

    def resolve(self, code: Code) -> Metadata:
        """Metadata for code, falling back to the UNKNOWN built-in."""
        return self._entries.get(code) or self._entries[StdCode.UNKNOWN]

    def external_text(self, code: Code) -> str | None:
        """User-safe text for a categorized code, None when the message should be used."""
        if code in UNCATEGORIZED or (meta := self._entries.get(code)) is None:
            return None
        return meta.external or None

    def __contains__(self, code: object) -> bool:
        return code in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def __repr__(self) -> str:
        return f"CodeRegistry(codes={len(self._entries)}, frozen={self._frozen})"


_DEFAULT = CodeRegistry().freeze()


def default_registry() -> CodeRegistry:
    """Frozen registry holding only the built-ins."""
    return _DEFAULT
