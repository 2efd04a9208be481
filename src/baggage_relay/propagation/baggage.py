"""Propagation – W3C ``baggage`` header codec.

Wire format::

    key1=value1,key2=value2

Each key and value is percent-encoded on its own (RFC 3986 data escaping), so
neither can contain a raw ``,`` or ``=``.  Decoding is tolerant: a segment
without ``=``, with an empty key, or with a malformed escape is dropped and
the rest of the header is kept.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import quote, unquote_to_bytes

import structlog

logger = structlog.get_logger(__name__)

type BaggageSet = dict[str, str]

ENTRY_SEPARATOR = ","
KEY_VALUE_SEPARATOR = "="

# "%" not followed by two hex digits
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _escape(text: str) -> str:
    return quote(text, safe="")


def _unescape(text: str) -> str | None:
    """Percent-decode *text*; ``None`` on a malformed escape or invalid UTF-8."""
    if _BAD_ESCAPE.search(text):
        return None
    try:
        return unquote_to_bytes(text).decode("utf-8")
    except UnicodeDecodeError:
        return None


def encode(baggage: Mapping[str, str | None]) -> str:
    """Encode *baggage* into a ``baggage`` header value; never raises.

    An empty mapping encodes to ``""``.  A ``None`` value is written as an
    empty value.  Entries with an empty key or with text that has no UTF-8
    encoding (lone surrogates) are dropped.
    """
    entries: list[str] = []
    for key, value in baggage.items():
        if not key:
            logger.debug("baggage.entry_dropped", reason="empty_key")
            continue
        try:
            entries.append(f"{_escape(key)}{KEY_VALUE_SEPARATOR}{_escape(value or '')}")
        except UnicodeEncodeError:
            logger.debug("baggage.entry_dropped", reason="unencodable", key=repr(key))
    return ENTRY_SEPARATOR.join(entries)


def decode(header: str | None) -> BaggageSet:
    """Decode a ``baggage`` header value; never raises.

    Segments are processed left to right and later duplicates overwrite
    earlier ones.  ``None`` and ``""`` decode to an empty set.
    """
    result: BaggageSet = {}
    if not header:
        return result
    for raw_segment in header.split(ENTRY_SEPARATOR):
        segment = raw_segment.strip()
        if not segment:
            continue
        raw_key, sep, raw_value = segment.partition(KEY_VALUE_SEPARATOR)
        if not sep:
            logger.debug("baggage.segment_dropped", reason="missing_separator", segment=segment)
            continue
        key = _unescape(raw_key.strip())
        value = _unescape(raw_value.strip())
        if not key or value is None:
            logger.debug("baggage.segment_dropped", reason="invalid_escape_or_key", segment=segment)
            continue
        result[key] = value
    return result


__all__ = [
    "BaggageSet",
    "ENTRY_SEPARATOR",
    "KEY_VALUE_SEPARATOR",
    "decode",
    "encode",
]
