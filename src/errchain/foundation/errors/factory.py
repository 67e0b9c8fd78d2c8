"""Construction surface: New, From, Wrap, With, Add, Track.

An `ErrorFactory` binds a `CodeRegistry` to the operations so that code
metadata is injected explicitly instead of read from import-time globals.
The module-level functions use a registry-less factory: extended chains keep
their own registry, fresh ones get the frozen built-ins.

Every operation accepts None, a Chain, a Node or any foreign exception and
never raises for them.

Example:
    >>> registry = CodeRegistry()
    >>> registry.register(ERR_EOF, external="Bad Request", http_status=400)
    >>> errors = ErrorFactory(registry.freeze())
    >>> err = errors.wrap(read(), "could not decode %s", path, code=ERR_JSON)
"""

from __future__ import annotations

from errchain.foundation.caller import boundary, capture_frame
from errchain.foundation.codes import Code, CodeRegistry, StdCode

from .chain import Chain, as_chain, capture_node, coerce_nodes, interpolate


class ErrorFactory:
    """Chain constructors bound to one code registry.

    Chains returned by a factory carry its registry, which decides their
    user-safe text and HTTP status. A factory without a registry keeps the
    registry of the chain it extends and uses the built-ins for fresh chains.
    """

    __slots__ = ("registry",)

    def __init__(self, registry: CodeRegistry | None = None) -> None:
        self.registry = registry

    @boundary
    def new(self, message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
        """Single-node chain for message, located at the caller."""
        return Chain((capture_node(interpolate(message, args), code=code),), self.registry)

    errorf = new

    @boundary
    def from_error(self, err: object, code: Code | None = None) -> Chain:
        """Chain for err.

        An existing chain keeps its nodes and has its outermost code replaced when
        code is given. It is rebound to this factory's registry when the factory
        has one, with or without a code. A foreign error becomes one node located
        at the caller; None becomes an empty-message chain.
        """
        if err is None:
            return self.new("", code=StdCode.UNKNOWN if code is None else code)
        if (chain := as_chain(err)) is not None:
            if code is not None:
                return chain._recode_head(code, self.registry)
            if self.registry is None or chain.registry is self.registry:
                return chain
            return Chain(chain.nodes, self.registry)
        nodes = coerce_nodes(err)
        if code is not None:
            nodes = (nodes[0].with_code(code), *nodes[1:])
        return Chain(nodes, self.registry)

    @boundary
    def wrap(self, err: object, message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
        """Chain for err with one new outermost node built from message. None err constructs fresh."""
        if err is None:
            return self.new(message, *args, code=code)
        return self.from_error(err)._prepend(capture_node(interpolate(message, args), code=code), self.registry)

    @boundary
    def with_(self, chain: object, err: object) -> Chain | None:
        """Insert err directly behind chain's outermost node.

        A None err returns chain unchanged; a None chain makes err the sole cause.
        """
        if err is None:
            return None if chain is None else self.from_error(chain)
        if chain is None:
            return self.from_error(err)
        return self.from_error(chain)._insert_behind_head(coerce_nodes(err), self.registry)

    @boundary
    def add(self, err: object, message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
        """Insert a new message node directly behind err's outermost node. None err constructs fresh."""
        if err is None:
            return self.new(message, *args, code=code)
        node = capture_node(interpolate(message, args), code=code)
        return self.from_error(err)._insert_behind_head((node,), self.registry)

    @boundary
    def track(self, err: object) -> Chain | None:
        """Re-locate err's outermost node at the caller without adding a message. None stays None."""
        if err is None:
            return None
        if (chain := as_chain(err)) is None:
            return self.from_error(err)
        return chain._relocate_head(capture_frame(), self.registry)

    def __repr__(self) -> str:
        return f"ErrorFactory({self.registry!r})"


# ═══════════════════════════════════════════════════════════════════════════════
# Module-level surface
# ═══════════════════════════════════════════════════════════════════════════════

_DEFAULT = ErrorFactory()


def default_factory() -> ErrorFactory:
    """Registry-less factory behind the module-level functions."""
    return _DEFAULT


@boundary
def new(message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
    """Single-node chain for message."""
    return _DEFAULT.new(message, *args, code=code)


errorf = new


@boundary
def from_error(err: object, code: Code | None = None) -> Chain:
    """Chain for err; see ErrorFactory.from_error."""
    return _DEFAULT.from_error(err, code)


@boundary
def wrap(err: object, message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
    """Wrap err in a new outermost node."""
    return _DEFAULT.wrap(err, message, *args, code=code)


@boundary
def with_(chain: object, err: object) -> Chain | None:
    """Insert err behind chain's outermost node."""
    return _DEFAULT.with_(chain, err)


@boundary
def add(err: object, message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
    """Insert a message node behind err's outermost node."""
    return _DEFAULT.add(err, message, *args, code=code)


@boundary
def track(err: object) -> Chain | None:
    """Re-locate err's outermost node at the caller."""
    return _DEFAULT.track(err)
