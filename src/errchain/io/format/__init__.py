"""Rendering: format-spec driven text/JSON output and the JSON wire format."""

from .codec import Entry, caller_field, dumps, encode, entries, record, to_records
from .formatter import FormatFlags, Verb, format_error, parse_spec

__all__ = [
    "Verb", "FormatFlags", "format_error", "parse_spec",
    "Entry", "entries", "record", "caller_field", "to_records", "encode", "dumps",
]
