"""Equality and traversal over chains and foreign exceptions.

- unwrap: one step toward the root (chain minus its head, or a foreign
  exception's `unwrap()` / `__cause__`)
- is_: identity with the outermost node, or a custom `matches()` predicate
  anywhere along the unwrap walk
- has: identity with any node in the chain
- as_: first value in the chain that is an instance of a type
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, TypeVar, runtime_checkable

from errchain.foundation.caller import Frame

from .chain import Chain, as_chain
from .node import Node

E = TypeVar("E")


@runtime_checkable
class Matcher(Protocol):
    """Foreign exceptions may define matches(test) to declare equivalence with another error."""

    def matches(self, test: object) -> bool: ...


def unwrap(err: object) -> BaseException | None:
    """Previous error in the chain, None once the root is reached."""
    if err is None:
        return None
    if (chain := as_chain(err)) is not None:
        return chain.unwrap()
    if callable(step := getattr(err, "unwrap", None)):
        return step()
    return getattr(err, "__cause__", None)


def iter_chain(err: object) -> Iterator[object]:
    """Yield err and every value reached by repeated unwrap(). Stops on cycles."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = unwrap(err)


def _same_head(chain: Chain, test: object) -> bool:
    if chain.head.matches(test):
        return True
    other = as_chain(test)
    return other is not None and chain.head.same_as(other.head)


def _predicate(level: object, test: object) -> bool:
    """Custom matches() on a foreign level, or on the foreign error absorbed by a chain's head."""
    target = chain.head.error if (chain := as_chain(level)) is not None else level
    if target is None or isinstance(target, (Chain, Node)):
        return False
    return isinstance(target, Matcher) and target.matches(test)


def is_(err: object, test: object) -> bool:
    """Whether err is test: identity with the outermost node, or a matches() predicate on any ancestor."""
    if err is None or test is None:
        return False
    if err is test:
        return True
    if (chain := as_chain(err)) is not None and _same_head(chain, test):
        return True
    return any(_predicate(level, test) for level in iter_chain(err))


def _node_has(node: Node, test: object) -> bool:
    if node.matches(test):
        return True
    if (other := as_chain(test)) is not None and node.same_as(other.head):
        return True
    return node.error is not None and has(node.error, test)


def has(err: object, test: object) -> bool:
    """Whether test matches any node anywhere in err's chain."""
    if err is None or test is None:
        return False
    if (chain := as_chain(err)) is not None:
        return err is test or any(_node_has(node, test) for node in chain)
    for level in iter_chain(err):
        if level is test or _predicate(level, test):
            return True
        if (inner := as_chain(level)) is not None:
            return has(inner, test)
    return False


def as_(err: object, target: type[E] | tuple[type[E], ...]) -> E | None:
    """First value in err's chain that is an instance of target, else None."""
    for level in iter_chain(err):
        if isinstance(level, target):
            return level
        if (chain := as_chain(level)) is not None:
            for node in chain:
                if node.error is not None and (found := as_(node.error, target)) is not None:
                    return found
            return None
    return None


def caller(err: object) -> Frame | None:
    """Frame of the outermost node, None for values without one."""
    if (chain := as_chain(err)) is not None:
        return chain.caller
    frame = getattr(err, "caller", None)
    return frame if isinstance(frame, Frame) else None


def cause(err: object) -> object:
    """Root cause: a chain's oldest node, or the last value reached by unwrap()."""
    last: object = None
    for last in iter_chain(err):
        if (chain := as_chain(last)) is not None:
            return chain.cause
    return last
