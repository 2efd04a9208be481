"""Propagation – TextHeaderAdapter (HTTP headers, RPC metadata)."""
from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence

from baggage_relay.propagation.carriers.ports import CarrierAdapter, lookup, require_str, store


class TextHeaderAdapter(CarrierAdapter[Mapping[str, str]]):
    """Pass-through adapter for carriers whose values are already strings.

    Header names are matched case-insensitively.  A repeated header exposed as
    a list of strings is folded into one comma-joined value, the HTTP rule for
    combining field lines.  Any other value type reads as absent.
    """

    def get(self, carrier: Mapping[str, str] | None, name: str) -> str | None:
        value = lookup(carrier, name)
        if isinstance(value, str):
            return value
        if isinstance(value, Sequence) and value and all(isinstance(v, str) for v in value):
            return ",".join(value)
        return None

    def set(self, carrier: MutableMapping[str, str], name: str, value: str) -> None:  # type: ignore[override]
        store(carrier, name, require_str(value))


__all__ = ["TextHeaderAdapter"]
