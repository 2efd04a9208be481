"""Propagation – CarrierAdapter port."""
from __future__ import annotations

import abc
from collections.abc import Mapping, MutableMapping
from typing import Any, Generic, TypeVar

C = TypeVar("C")


class CarrierAdapter(abc.ABC, Generic[C]):
    """Port: read/write string header values on a transport-owned carrier.

    Implementations normalise the transport's native representation to
    ``str | None`` so the propagator never branches on transport type.
    ``get`` never raises: a missing carrier, a missing header, or a value of
    the wrong shape all read as ``None``.
    """

    @abc.abstractmethod
    def get(self, carrier: C | None, name: str) -> str | None: ...

    @abc.abstractmethod
    def set(self, carrier: C, name: str, value: str) -> None: ...


def lookup(carrier: Any, name: str) -> Any:
    """Case-insensitive raw lookup on a mapping carrier; ``None`` when absent."""
    if not isinstance(carrier, Mapping):
        return None
    if name in carrier:
        return carrier[name]
    lowered = name.lower()
    for key, value in carrier.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def store(carrier: MutableMapping[str, Any], name: str, value: Any) -> None:
    """Overwrite *name* on *carrier*, dropping any differently-cased duplicate."""
    lowered = name.lower()
    for key in [k for k in carrier if isinstance(k, str) and k != name and k.lower() == lowered]:
        del carrier[key]
    carrier[name] = value


def require_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"header value must be str, got {type(value).__name__}")
    return value


__all__ = ["CarrierAdapter", "lookup", "require_str", "store"]
