"""Tests for equality and traversal.

Validates:
- unwrap over chains and foreign exceptions
- is_ vs has semantics
- Custom matches() predicates and the as_chain() capability
- as_, caller, cause helpers
"""

from __future__ import annotations

import pytest

import errchain
from errchain import Chain, Matcher, SupportsChain


class NotFound(Exception):
    """Foreign error equivalent to any other NotFound with the same key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"{key} not found")
        self.key = key

    def matches(self, test: object) -> bool:
        return isinstance(test, NotFound) and test.key == self.key


class Wrapped(Exception):
    """Foreign error that carries a chain and exposes it via as_chain()."""

    def __init__(self, chain: Chain) -> None:
        super().__init__(str(chain))
        self.chain = chain

    def as_chain(self) -> Chain:
        return self.chain


class Stepper(Exception):
    """Foreign error exposing its predecessor through unwrap()."""

    def __init__(self, message: str, previous: BaseException | None = None) -> None:
        super().__init__(message)
        self.previous = previous

    def unwrap(self) -> BaseException | None:
        return self.previous


@pytest.fixture
def chain() -> Chain:
    """Three message nodes: c -> b -> a."""
    return errchain.wrap(errchain.wrap(errchain.new("a"), "b"), "c")


# ═════════════════════════════════════════════════════════════════════════════
# unwrap
# ═════════════════════════════════════════════════════════════════════════════


def test_unwrap_chain_drops_outermost(chain: Chain) -> None:
    previous = errchain.unwrap(chain)

    assert isinstance(previous, Chain)
    assert str(previous) == "b"
    assert previous.nodes == chain.nodes[1:]


def test_unwrap_foreign_uses_cause() -> None:
    root = KeyError("k")
    try:
        try:
            raise root
        except KeyError as exc:
            raise RuntimeError("lookup failed") from exc
    except RuntimeError as outer:
        assert errchain.unwrap(outer) is root
        assert errchain.unwrap(root) is None


def test_unwrap_foreign_method() -> None:
    root = ValueError("root")
    assert errchain.unwrap(Stepper("outer", root)) is root


def test_unwrap_none() -> None:
    assert errchain.unwrap(None) is None


def test_iter_chain_stops_on_cycles() -> None:
    first, second = Stepper("first"), Stepper("second")
    first.previous, second.previous = second, first

    assert list(errchain.iter_chain(first)) == [first, second]


# ═════════════════════════════════════════════════════════════════════════════
# is_ / has
# ═════════════════════════════════════════════════════════════════════════════


def test_is_matches_only_outermost(chain: Chain) -> None:
    """is_ holds for the outermost node only; has holds for every node."""
    for index, node in enumerate(chain):
        assert errchain.has(chain, node.underlying)
        assert errchain.is_(chain, node.underlying) is (index == 0)


def test_is_and_has_with_foreign_nodes() -> None:
    inner = OSError("disk full")
    outer = ValueError("bad")
    err = errchain.with_(errchain.wrap(inner, "save failed"), outer)

    assert errchain.has(err, inner)
    assert errchain.has(err, outer)
    assert not errchain.is_(err, inner)
    assert not errchain.is_(err, outer)


def test_is_foreign_head() -> None:
    original = ValueError("bad")
    err = errchain.from_error(original)

    assert errchain.is_(err, original)
    assert err.is_(original)


def test_is_self(chain: Chain) -> None:
    assert errchain.is_(chain, chain)
    assert errchain.has(chain, chain)


def test_is_chain_sharing_head(chain: Chain) -> None:
    """A derived chain with the same outermost node is the same error."""
    assert errchain.is_(chain.add("note"), chain)
    assert not errchain.is_(chain.wrap("outer"), chain)
    assert errchain.has(chain.wrap("outer"), chain)


NOT_READY = errchain.new("service not ready")


def test_tracked_error_keeps_identity() -> None:
    """Tracking a shared error re-locates it without turning it into a different error."""
    tracked = errchain.track(NOT_READY)

    assert tracked.caller != NOT_READY.caller
    assert errchain.is_(tracked, NOT_READY)
    assert errchain.has(tracked, NOT_READY)
    assert errchain.has(tracked, NOT_READY.head)
    assert tracked.head.same_as(NOT_READY.head)

    twice = errchain.track(tracked)
    assert errchain.is_(twice, NOT_READY)
    assert errchain.is_(NOT_READY, twice)
    assert errchain.has(errchain.wrap(twice, "startup failed"), NOT_READY)
    assert not errchain.is_(errchain.track(errchain.new("service not ready")), NOT_READY)


def test_recoded_error_keeps_identity() -> None:
    recoded = errchain.from_error(NOT_READY, errchain.StdCode.FATAL)

    assert recoded.code == errchain.StdCode.FATAL
    assert errchain.is_(recoded, NOT_READY)
    assert errchain.has(recoded.wrap("outer"), NOT_READY.head)


def test_none_never_matches(chain: Chain) -> None:
    assert not errchain.is_(None, chain)
    assert not errchain.has(None, chain)
    assert not errchain.is_(chain, None)
    assert not errchain.has(chain, None)


def test_custom_predicate_anywhere_in_chain() -> None:
    """matches() on an absorbed foreign error applies at every level."""
    assert isinstance(NotFound("k"), Matcher)

    err = errchain.wrap(errchain.wrap(NotFound("user:1"), "load profile"), "render page")

    assert errchain.is_(err, NotFound("user:1"))
    assert not errchain.is_(err, NotFound("user:2"))
    assert errchain.has(err, NotFound("user:1"))


def test_custom_predicate_on_foreign_walk() -> None:
    outer = Stepper("outer", NotFound("k"))

    assert errchain.is_(outer, NotFound("k"))
    assert errchain.has(outer, NotFound("k"))
    assert not errchain.has(outer, KeyError("k"))


def test_has_through_foreign_wrapper() -> None:
    """A foreign error whose cause is a chain exposes that chain's nodes."""
    chain = errchain.wrap(errchain.new("root"), "outer")
    outer = Stepper("api error", chain)

    assert errchain.has(outer, chain.cause)
    assert not errchain.has(outer, errchain.new("other"))


def test_has_inside_absorbed_exception() -> None:
    """Nodes absorbing a foreign error search through it."""
    root = KeyError("k")
    try:
        raise RuntimeError("lookup failed") from root
    except RuntimeError as exc:
        err = errchain.wrap(exc, "request failed")

    assert errchain.has(err, root)


# ═════════════════════════════════════════════════════════════════════════════
# Capability
# ═════════════════════════════════════════════════════════════════════════════


def test_as_chain_capability(chain: Chain) -> None:
    """Error-like values exposing as_chain() behave like the chain they carry."""
    wrapper = Wrapped(chain)

    assert isinstance(wrapper, SupportsChain)
    assert errchain.as_chain(wrapper) is chain
    assert errchain.as_chain(chain) is chain
    assert errchain.as_chain(ValueError("x")) is None
    assert errchain.as_chain(Wrapped) is None
    assert errchain.from_error(wrapper) is chain
    assert errchain.has(wrapper, chain.cause)
    assert len(errchain.wrap(wrapper, "outer")) == len(chain) + 1


# ═════════════════════════════════════════════════════════════════════════════
# as_ / caller / cause
# ═════════════════════════════════════════════════════════════════════════════


def test_as_finds_absorbed_exception() -> None:
    original = NotFound("k")
    err = errchain.wrap(errchain.wrap(original, "b"), "c")

    assert errchain.as_(err, NotFound) is original
    assert errchain.as_(err, Chain) is err
    assert errchain.as_(err, KeyError) is None
    assert errchain.as_(None, KeyError) is None


def test_as_on_foreign_walk() -> None:
    root = KeyError("k")
    outer = Stepper("outer", root)

    assert errchain.as_(outer, KeyError) is root
    assert errchain.as_(outer, (KeyError, ValueError)) is root


def test_caller_helper(chain: Chain) -> None:
    assert errchain.caller(chain) == chain.caller
    assert errchain.caller(ValueError("x")) is None


def test_cause_helper(chain: Chain) -> None:
    assert errchain.cause(chain) is chain.cause
    assert errchain.cause(chain).text == "a"

    root = ValueError("root")
    assert errchain.cause(Stepper("outer", root)) is root
    assert errchain.cause(None) is None
