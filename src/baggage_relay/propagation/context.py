"""Propagation – SpanIdentity, TraceContext and span-id generation.

A :class:`TraceContext` is owned by exactly one executing operation and is
passed to collaborators explicitly; there is no "current context" global.
Children are derived, never mutated into place::

    root = new_root()
    child = new_child(root)
    child.set_baggage("tenant-id", "acme")   # root.baggage is untouched
"""
from __future__ import annotations

import abc
import dataclasses
import hashlib
import random
import re
from collections.abc import Mapping
from typing import Any

from baggage_relay.kernel.errors import ValidationError
from baggage_relay.propagation.baggage import BaggageSet

_TRACE_ID = re.compile(r"^[0-9a-f]{32}$")
_SPAN_ID = re.compile(r"^[0-9a-f]{16}$")
_INVALID_TRACE_ID = "0" * 32
_INVALID_SPAN_ID = "0" * 16

FLAG_SAMPLED = 0x01


def is_valid_trace_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_TRACE_ID.match(value)) and value != _INVALID_TRACE_ID


def is_valid_span_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_SPAN_ID.match(value)) and value != _INVALID_SPAN_ID


# ---------------------------------------------------------------------------
# Id generation
# ---------------------------------------------------------------------------


class IdGenerator(abc.ABC):
    """Port: produce lowercase-hex trace and span ids."""

    @abc.abstractmethod
    def generate_trace_id(self) -> str: ...

    @abc.abstractmethod
    def generate_span_id(self) -> str: ...


class RandomIdGenerator(IdGenerator):
    """Random ids, the default for live (non-replayed) execution."""

    def generate_trace_id(self) -> str:
        while True:
            trace_id = f"{random.getrandbits(128):032x}"
            if trace_id != _INVALID_TRACE_ID:
                return trace_id

    def generate_span_id(self) -> str:
        while True:
            span_id = f"{random.getrandbits(64):016x}"
            if span_id != _INVALID_SPAN_ID:
                return span_id


class DeterministicIdGenerator(IdGenerator):
    """Ids derived from a seed and a call counter.

    Two generators built from the same seed return the same id sequence, which
    is what replayed orchestration code needs.
    """

    def __init__(self, seed: str) -> None:
        self._seed = seed
        self._counter = 0

    def _next(self, nbytes: int) -> str:
        while True:
            digest = hashlib.sha256(f"{self._seed}/{self._counter}".encode()).hexdigest()
            self._counter += 1
            value = digest[: nbytes * 2]
            if value.strip("0"):
                return value

    def generate_trace_id(self) -> str:
        return self._next(16)

    def generate_span_id(self) -> str:
        return self._next(8)


_DEFAULT_ID_GENERATOR = RandomIdGenerator()


# ---------------------------------------------------------------------------
# SpanIdentity / TraceContext
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class SpanIdentity:
    """Immutable identity of one span.

    Raises :class:`~baggage_relay.kernel.errors.ValidationError` when an id is
    not lowercase hex of the right width, is all zeros, or *trace_flags* does
    not fit in one byte.
    """

    trace_id: str
    span_id: str
    parent_span_id: str | None = None
    trace_flags: int = FLAG_SAMPLED
    trace_state: str | None = None

    def __post_init__(self) -> None:
        errors: list[dict[str, Any]] = []
        if not is_valid_trace_id(self.trace_id):
            errors.append({"field": "trace_id", "value": self.trace_id})
        if not is_valid_span_id(self.span_id):
            errors.append({"field": "span_id", "value": self.span_id})
        if self.parent_span_id is not None and not is_valid_span_id(self.parent_span_id):
            errors.append({"field": "parent_span_id", "value": self.parent_span_id})
        if not isinstance(self.trace_flags, int) or not 0 <= self.trace_flags <= 0xFF:
            errors.append({"field": "trace_flags", "value": self.trace_flags})
        if errors:
            raise ValidationError("Invalid span identity", errors=errors)

    @property
    def sampled(self) -> bool:
        return bool(self.trace_flags & FLAG_SAMPLED)


@dataclasses.dataclass
class TraceContext:
    """Active span identity plus the baggage set of one logical operation."""

    span: SpanIdentity
    baggage: BaggageSet = dataclasses.field(default_factory=dict)

    @property
    def trace_id(self) -> str:
        return self.span.trace_id

    @property
    def span_id(self) -> str:
        return self.span.span_id

    @property
    def parent_span_id(self) -> str | None:
        return self.span.parent_span_id

    # ------------------------------------------------------------------
    # Baggage access
    # ------------------------------------------------------------------

    def get_baggage(self, key: str, default: str | None = None) -> str | None:
        return self.baggage.get(key, default)

    def set_baggage(self, key: str, value: str | None) -> None:
        """Set *key*; ``None`` removes it.

        Raises :class:`~baggage_relay.kernel.errors.ValidationError` for an
        empty key, which the header format cannot carry.
        """
        if not key:
            raise ValidationError("Baggage key must not be empty")
        if value is None:
            self.baggage.pop(key, None)
        else:
            self.baggage[key] = value

    def update_baggage(self, entries: Mapping[str, str]) -> None:
        for key, value in entries.items():
            self.set_baggage(key, value)

    def copy(self) -> "TraceContext":
        """Independent copy sharing the (immutable) span identity."""
        return TraceContext(span=self.span, baggage=dict(self.baggage))


def new_root(id_generator: IdGenerator | None = None) -> TraceContext:
    """Start a new trace: fresh trace/span ids, no parent, empty baggage."""
    gen = id_generator or _DEFAULT_ID_GENERATOR
    return TraceContext(
        span=SpanIdentity(trace_id=gen.generate_trace_id(), span_id=gen.generate_span_id())
    )


def new_child(parent: TraceContext, id_generator: IdGenerator | None = None) -> TraceContext:
    """Derive a child span of *parent*.

    Same trace id, flags and trace state; a new span id; ``parent_span_id`` is
    the parent's span id.  Baggage is copied by value.
    """
    gen = id_generator or _DEFAULT_ID_GENERATOR
    span = SpanIdentity(
        trace_id=parent.span.trace_id,
        span_id=gen.generate_span_id(),
        parent_span_id=parent.span.span_id,
        trace_flags=parent.span.trace_flags,
        trace_state=parent.span.trace_state,
    )
    return TraceContext(span=span, baggage=dict(parent.baggage))


__all__ = [
    "DeterministicIdGenerator",
    "FLAG_SAMPLED",
    "IdGenerator",
    "RandomIdGenerator",
    "SpanIdentity",
    "TraceContext",
    "is_valid_span_id",
    "is_valid_trace_id",
    "new_child",
    "new_root",
]
