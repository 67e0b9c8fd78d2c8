"""JSON wire format for error chains.

An array of `{"caller": ..., "error": ...}` objects, outermost node first.
`caller` is `file:line (function)`, or `#<index> n/a` when the frame is
unknown. `error` is omitted for nodes with empty text. Log pipelines parse
this shape, so it must stay stable.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

import orjson

from errchain.foundation.caller import Frame
from errchain.foundation.codes import UNCATEGORIZED, Code, StdCode
from errchain.foundation.config import get_settings
from errchain.foundation.errors import Chain, Node, as_chain, iter_chain

Record = dict[str, str]

_EMPTY_TRAIL: tuple[Frame, ...] = ()


@dataclass(frozen=True, slots=True)
class Entry:
    """One renderable step: display text plus location.

    `internal` is the log-only text of a categorized code (the node text when
    none is registered) and is empty for uncategorized steps.
    """

    text: str
    frame: Frame
    trail: tuple[Frame, ...] = _EMPTY_TRAIL
    code: Code = StdCode.UNKNOWN
    internal: str = ""


def entries(err: object) -> list[Entry]:
    """Renderable steps for err, outermost first.

    Chains contribute their nodes; foreign exceptions contribute one step per
    unwrap() level with an unknown frame.
    """
    out: list[Entry] = []
    for level in iter_chain(err):
        if (chain := as_chain(level)) is not None:
            out.extend(_chain_entry(chain, node) for node in chain)
            break
        out.append(Entry(str(level), Frame.unknown()))
    return out


def _chain_entry(chain: Chain, node: Node) -> Entry:
    internal = ""
    if node.code not in UNCATEGORIZED:
        meta = chain.registry.lookup(node.code)
        internal = meta.internal if meta is not None and meta.internal else node.text
    return Entry(node.text, node.frame, node.trail, node.code, internal)


def caller_field(index: int, frame: Frame, *, full_paths: bool = False) -> str:
    """Caller value for a record."""
    return frame.location(full_paths=full_paths) if frame.ok else f"#{index} n/a"


def record(index: int, entry: Entry, *, with_caller: bool = True, full_paths: bool = False) -> Record:
    data: Record = {}
    if with_caller:
        data["caller"] = caller_field(index, entry.frame, full_paths=full_paths)
    if entry.text:
        data["error"] = entry.text
    return data


def to_records(err: object, *, full_paths: bool | None = None) -> list[Record]:
    """Every step of err as a {caller, error} record, outermost first."""
    full = get_settings().full_paths if full_paths is None else full_paths
    return [record(k, e, full_paths=full) for k, e in enumerate(entries(err))]


def encode(records: list[Record], *, pretty: bool = False, indent: int | None = None) -> str:
    """Serialize records: compact with sorted keys, or indented (4 spaces by default)."""
    if pretty:
        return json.dumps(records, indent=indent or get_settings().json_indent, sort_keys=True, ensure_ascii=False)
    return orjson.dumps(records, option=orjson.OPT_SORT_KEYS).decode()


def dumps(err: object, *, pretty: bool = False, full_paths: bool | None = None) -> str:
    """Serialize err's full chain to the JSON wire format."""
    return encode(to_records(err, full_paths=full_paths), pretty=pretty)
