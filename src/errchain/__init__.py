"""errchain: annotated error chains.

Attach a message, an optional code and the capturing call site to an error as
it propagates, then render the causal chain for users, logs or APIs.

Quick Start:
    >>> import errchain
    >>> err = errchain.new("read: end of input")
    >>> err = errchain.wrap(err, "could not decode %s", "config.json")
    >>> str(err)
    'could not decode config.json'
    >>> len(err)
    2
    >>> errchain.has(err, err.cause)
    True
    >>> f"{err:#+}"  # JSON trace for logs
    '[{"caller":"app.py:3 (__main__.<module>)","error":"could not decode config.json"},...]'

Codes with user-safe text:
    >>> registry = errchain.CodeRegistry()
    >>> registry.register(500, external="Internal Server Error", http_status=500)
    >>> errors = errchain.ErrorFactory(registry.freeze())
    >>> str(errors.wrap(err, "load failed", code=500))
    'Internal Server Error'
"""

from errchain.foundation.caller import Frame, boundary, capture_frame
from errchain.foundation.codes import (
    Code,
    CodeRange,
    CodeRegistry,
    Metadata,
    RegistryFrozenError,
    StdCode,
    category_of,
    default_registry,
)
from errchain.foundation.config import ErrchainSettings, clear_settings_cache, get_settings
from errchain.foundation.errors import (
    Chain,
    ErrorFactory,
    Matcher,
    Node,
    SupportsChain,
    add,
    as_,
    as_chain,
    caller,
    cause,
    default_factory,
    errorf,
    from_error,
    has,
    is_,
    iter_chain,
    new,
    track,
    unwrap,
    with_,
    wrap,
)
from errchain.io.format import FormatFlags, Verb, dumps, format_error, parse_spec, to_records
from errchain.runtime.observability import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    # Model
    "Chain", "Node", "Frame", "SupportsChain", "as_chain",
    # Construction
    "ErrorFactory", "default_factory", "new", "errorf", "from_error", "wrap", "with_", "add", "track",
    # Traversal
    "Matcher", "unwrap", "is_", "has", "as_", "caller", "cause", "iter_chain",
    # Codes
    "Code", "StdCode", "CodeRange", "category_of", "Metadata", "CodeRegistry", "RegistryFrozenError",
    "default_registry",
    # Rendering
    "Verb", "FormatFlags", "format_error", "parse_spec", "to_records", "dumps",
    # Call-site capture
    "boundary", "capture_frame",
    # Config & logging
    "ErrchainSettings", "get_settings", "clear_settings_cache", "configure_logging", "get_logger",
]
