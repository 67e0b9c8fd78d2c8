"""Text and JSON rendering of error chains under a verb and flags.

Format specs (f-strings, `format()`) read `[flags][verb]`:

    {err}        user-safe text of the outermost node
    {err:s}      same; the plain verb ignores flags
    {err:-}      outermost text - file:line (function)
    {err:+}      every node: text - #k file:line (function), joined by "; "
    {err: +}     every node, one per line (tracked frames listed beneath)
    {err:#}      [{"error": ...}]
    {err:#-}     [{"caller": ..., "error": ...}]
    {err:#+}     every node as JSON
    {err:# +}    every node as JSON, 4-space indent

Unknown frames render as `#k n/a`. Full-trace text appends `{code: internal text}`
for nodes with a categorized code.

Only the plain forms are safe for untrusted consumers; the flagged forms
expose literal messages and file locations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from errchain.foundation.config import get_settings

from .codec import Entry, caller_field, encode, entries, record


class Verb(StrEnum):
    """Rendering verb."""
    PLAIN = "s"
    DETAILED = "v"


@dataclass(frozen=True, slots=True)
class FormatFlags:
    """Independent rendering switches for the detailed verb."""

    json: bool = False
    pretty: bool = False
    with_caller: bool = False
    with_full_trace: bool = False

    @property
    def any(self) -> bool:
        return self.json or self.pretty or self.with_caller or self.with_full_trace


_NO_FLAGS = FormatFlags()

_FLAG_CHARS: dict[str, str] = {"#": "json", " ": "pretty", "-": "with_caller", "+": "with_full_trace"}


def parse_spec(spec: str) -> tuple[Verb, FormatFlags]:
    """Parse a format spec into (verb, flags). Raises ValueError on unknown characters."""
    if not spec:
        return Verb.PLAIN, _NO_FLAGS
    verb, body = Verb.DETAILED, spec
    if spec[-1] in ("s", "v"):
        verb, body = Verb(spec[-1]), spec[:-1]
    flags: dict[str, bool] = {}
    for ch in body:
        if (name := _FLAG_CHARS.get(ch)) is None:
            raise ValueError(f"Invalid format specifier {spec!r} for error chain")
        flags[name] = True
    return verb, FormatFlags(**flags)


def format_error(
    err: object,
    verb: Verb = Verb.PLAIN,
    flags: FormatFlags = _NO_FLAGS,
    *,
    full_paths: bool | None = None,
) -> str:
    """Render err (a Chain or any exception) under verb and flags."""
    if err is None:
        return ""
    if verb is Verb.PLAIN or not flags.any:
        return str(err)

    full = get_settings().full_paths if full_paths is None else full_paths
    steps = entries(err)
    if not flags.with_full_trace:
        steps = steps[:1]

    if flags.json:
        with_caller = flags.with_caller or flags.with_full_trace
        records = [record(k, e, with_caller=with_caller, full_paths=full) for k, e in enumerate(steps)]
        return encode(records, pretty=flags.pretty)

    lines = [_line(k, e, flags, full) for k, e in enumerate(steps)]
    return ("\n" if flags.pretty else "; ").join(lines)


def _line(index: int, entry: Entry, flags: FormatFlags, full_paths: bool) -> str:
    """One text line for an entry."""
    location = caller_field(index, entry.frame, full_paths=full_paths)
    if flags.with_full_trace and entry.frame.ok:
        location = f"#{index} {location}"
    parts = [entry.text] if entry.text else []
    if flags.with_caller or flags.with_full_trace:
        parts.append(location)
    line = " - ".join(parts)
    if not flags.with_full_trace:
        return line
    if entry.internal:
        line += f" {{{int(entry.code):04d}: {entry.internal}}}"
    if flags.pretty and entry.trail:
        line += "".join(f"\n    tracked at {f.location(full_paths=full_paths)}" for f in entry.trail)
    return line
