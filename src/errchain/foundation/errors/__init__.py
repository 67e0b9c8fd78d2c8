"""Error chain model.

- Node: one immutable causal step (message or absorbed exception, code, frame)
- Chain: ordered, copy-on-write sequence of nodes, outermost first
- ErrorFactory / new, from_error, wrap, with_, add, track: construction surface
- unwrap, is_, has, as_, caller, cause: traversal and equality
"""

from .chain import Chain, SupportsChain, as_chain
from .factory import (
    ErrorFactory,
    add,
    default_factory,
    errorf,
    from_error,
    new,
    track,
    with_,
    wrap,
)
from .node import Node
from .traversal import Matcher, as_, caller, cause, has, is_, iter_chain, unwrap

__all__ = [
    # Model
    "Node", "Chain", "SupportsChain", "as_chain",
    # Construction
    "ErrorFactory", "default_factory", "new", "errorf", "from_error", "wrap", "with_", "add", "track",
    # Traversal
    "Matcher", "unwrap", "is_", "has", "as_", "caller", "cause", "iter_chain",
]
