"""Error chain: the ordered causal history of one error.

Index 0 holds the outermost (most recent) node, the last index holds the root
cause. A Chain never changes after construction; every extending operation
copies the node tuple under the chain's lock and returns a new Chain, so two
call sites extending the same value never see each other's nodes.

Example:
    >>> err = Chain((Node.create("read: end of input"),))
    >>> err = err.wrap("could not decode %s", "config")
    >>> str(err), len(err)
    ('could not decode config', 2)
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

from errchain.foundation.caller import Frame, boundary, capture_frame
from errchain.foundation.codes import UNCATEGORIZED, Code, CodeRegistry, StdCode, default_registry

from .node import Node

NodeTuple = tuple[Node, ...]


@runtime_checkable
class SupportsChain(Protocol):
    """Capability check for error-like values that can present themselves as a Chain."""

    def as_chain(self) -> Chain | None: ...


def as_chain(err: object) -> Chain | None:
    """Return err as a Chain if it is one or exposes as_chain(), else None."""
    if isinstance(err, Chain):
        return err
    if isinstance(err, SupportsChain) and not isinstance(err, type):
        return err.as_chain()
    return None


def interpolate(message: object, args: tuple[object, ...]) -> str:
    """%-style interpolation, applied only when args are given (like logging).

    A single mapping argument feeds `%(name)s` placeholders. A message that does
    not fit its arguments is kept verbatim with the arguments appended, so
    building an error never raises.
    """
    text = message if isinstance(message, str) else str(message)
    if not args:
        return text
    values = args[0] if len(args) == 1 and isinstance(args[0], Mapping) and args[0] else args
    try:
        return text % values
    except (TypeError, ValueError, KeyError):
        return f"{text} {args!r}"


@boundary
def capture_node(message: str = "", error: BaseException | None = None,
                 code: Code = StdCode.UNKNOWN) -> Node:
    """New node located at the nearest user frame."""
    return Node.create(message, error, code, capture_frame())


@boundary
def coerce_nodes(err: object) -> NodeTuple:
    """Node tuple for any error-like value. Foreign values are absorbed into one new node."""
    if (chain := as_chain(err)) is not None:
        return chain.nodes
    if isinstance(err, Node):
        return (err,)
    if isinstance(err, BaseException):
        return (capture_node(error=err),)
    return (capture_node(message=str(err)),)


class Chain(Exception):
    """Ordered, immutable sequence of nodes representing one error's causal history."""

    def __init__(self, nodes: Iterable[Node], registry: CodeRegistry | None = None) -> None:
        nodes = tuple(nodes)
        if not nodes:
            raise ValueError("Chain requires at least one node")
        super().__init__(nodes[0].text)
        self._nodes: NodeTuple = nodes
        self._registry = registry or default_registry()
        self._lock = threading.Lock()

    # ─── Derivation ─────────────────────────────────────────────────────

    def _derive(self, build: Callable[[NodeTuple], NodeTuple], registry: CodeRegistry | None = None) -> Chain:
        """Copy-on-write: build a new node tuple from ours under the lock."""
        with self._lock:
            nodes = build(self._nodes)
        return Chain(nodes, registry or self._registry)

    def _prepend(self, node: Node, registry: CodeRegistry | None = None) -> Chain:
        return self._derive(lambda nodes: (node, *nodes), registry)

    def _insert_behind_head(self, inserted: NodeTuple, registry: CodeRegistry | None = None) -> Chain:
        return self._derive(lambda nodes: (nodes[0], *inserted, *nodes[1:]), registry)

    def _relocate_head(self, frame: Frame, registry: CodeRegistry | None = None) -> Chain:
        return self._derive(lambda nodes: (nodes[0].tracked(frame), *nodes[1:]), registry)

    def _recode_head(self, code: Code, registry: CodeRegistry | None = None) -> Chain:
        return self._derive(lambda nodes: (nodes[0].with_code(code), *nodes[1:]), registry)

    # ─── Extension ──────────────────────────────────────────────────────

    @boundary
    def wrap(self, message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
        """New chain led by message; this chain becomes its cause."""
        return self._prepend(capture_node(interpolate(message, args), code=code))

    @boundary
    def with_(self, err: object) -> Chain:
        """Insert err directly behind the outermost node. None is a no-op."""
        if err is None:
            return self
        return self._insert_behind_head(coerce_nodes(err))

    @boundary
    def add(self, message: str, *args: object, code: Code = StdCode.UNKNOWN) -> Chain:
        """Insert a new message node directly behind the outermost node."""
        return self._insert_behind_head((capture_node(interpolate(message, args), code=code),))

    @boundary
    def track(self) -> Chain:
        """Re-locate the outermost node at the current call site, keeping its old frame in the trail."""
        return self._relocate_head(capture_frame())

    def with_code(self, code: Code) -> Chain:
        """Copy with the outermost node's code replaced."""
        return self._recode_head(code)

    # ─── Inspection ─────────────────────────────────────────────────────

    @property
    def nodes(self) -> NodeTuple:
        return self._nodes

    @property
    def head(self) -> Node:
        """Outermost node."""
        return self._nodes[0]

    @property
    def cause(self) -> Node:
        """Root cause: the oldest node."""
        return self._nodes[-1]

    @property
    def code(self) -> Code:
        return self._nodes[0].code

    @property
    def caller(self) -> Frame:
        return self._nodes[0].frame

    @property
    def registry(self) -> CodeRegistry:
        return self._registry

    @property
    def message(self) -> str:
        """Literal outermost text, regardless of code metadata."""
        return self._nodes[0].text

    @property
    def detail(self) -> str:
        """Internal (log-only) text for categorized codes, else the literal message."""
        if self.code not in UNCATEGORIZED and (meta := self._registry.lookup(self.code)) and meta.internal:
            return meta.internal
        return self.message

    @property
    def http_status(self) -> int:
        return self._registry.resolve(self.code).http_status

    def trace(self) -> tuple[Frame, ...]:
        """Frames of every node, outermost first."""
        return tuple(node.frame for node in self._nodes)

    def unwrap(self) -> Chain | None:
        """This chain without its outermost node, None at the root."""
        if len(self._nodes) == 1:
            return None
        return Chain(self._nodes[1:], self._registry)

    def as_chain(self) -> Chain:
        return self

    def is_(self, test: object) -> bool:
        from .traversal import is_
        return is_(self, test)

    def has(self, test: object) -> bool:
        from .traversal import has
        return has(self, test)

    # ─── Serialization ──────────────────────────────────────────────────

    def to_records(self) -> list[dict[str, str]]:
        """JSON-ready {caller, error} records, outermost first."""
        from errchain.io.format import to_records
        return to_records(self)

    def to_json(self, *, pretty: bool = False) -> str:
        from errchain.io.format import dumps
        return dumps(self, pretty=pretty)

    # ─── Dunder Methods ─────────────────────────────────────────────────

    def __str__(self) -> str:
        """User-safe text: the registry's external text for categorized codes, else the message."""
        return self._registry.external_text(self.code) or self._nodes[0].text

    def __repr__(self) -> str:
        return f"Chain({self._nodes[0].text!r}, code={int(self.code)}, len={len(self._nodes)})"

    def __format__(self, spec: str) -> str:
        from errchain.io.format import format_error, parse_spec
        return format_error(self, *parse_spec(spec))

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __bool__(self) -> bool:
        return True

    def __reduce__(self) -> tuple[Any, ...]:
        return (Chain, (self._nodes, self._registry))
