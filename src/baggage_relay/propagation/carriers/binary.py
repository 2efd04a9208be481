"""Propagation – BinaryHeaderAdapter (byte-array header maps, e.g. Kafka)."""
from __future__ import annotations

from collections.abc import Mapping, MutableMapping

import structlog

from baggage_relay.propagation.carriers.ports import CarrierAdapter, lookup, require_str, store

logger = structlog.get_logger(__name__)


class BinaryHeaderAdapter(CarrierAdapter[Mapping[str, bytes]]):
    """UTF-8 adapter for carriers that store header values as bytes.

    ``get`` decodes ``bytes``/``bytearray``/``memoryview`` values; anything
    that is not a byte sequence, or is not valid UTF-8, reads as absent.
    """

    def get(self, carrier: Mapping[str, bytes] | None, name: str) -> str | None:
        value = lookup(carrier, name)
        if not isinstance(value, (bytes, bytearray, memoryview)):
            return None
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("carrier.undecodable_header", header=name)
            return None

    def set(self, carrier: MutableMapping[str, bytes], name: str, value: str) -> None:  # type: ignore[override]
        store(carrier, name, require_str(value).encode("utf-8"))


__all__ = ["BinaryHeaderAdapter"]
