"""Propagation – TypedPropertyAdapter (object-valued property maps)."""
from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from baggage_relay.propagation.carriers.ports import CarrierAdapter, lookup, require_str, store


class TypedPropertyAdapter(CarrierAdapter[Mapping[str, Any]]):
    """Adapter for structured message metadata such as AMQP header tables.

    Values are arbitrary objects; only ``str`` values are returned by ``get``,
    every other runtime type reads as absent.  ``set`` always stores a ``str``.
    """

    def get(self, carrier: Mapping[str, Any] | None, name: str) -> str | None:
        value = lookup(carrier, name)
        return value if isinstance(value, str) else None

    def set(self, carrier: MutableMapping[str, Any], name: str, value: str) -> None:  # type: ignore[override]
        store(carrier, name, require_str(value))


__all__ = ["TypedPropertyAdapter"]
