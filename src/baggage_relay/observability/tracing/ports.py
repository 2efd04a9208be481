"""Observability – Tracer, Span, SpanKind ports.

Spans are started under an explicit parent
:class:`~baggage_relay.propagation.context.TraceContext`; the started span
exposes its own child context as :attr:`Span.context`, which the caller passes
on to whatever runs inside the span.
"""
from __future__ import annotations

import abc
import contextlib
from enum import Enum
from typing import TYPE_CHECKING, Any, AsyncIterator, Iterator

if TYPE_CHECKING:
    from baggage_relay.propagation.context import TraceContext


class SpanKind(str, Enum):
    INTERNAL = "INTERNAL"
    SERVER = "SERVER"
    CLIENT = "CLIENT"
    PRODUCER = "PRODUCER"
    CONSUMER = "CONSUMER"


class Span(abc.ABC):
    """Represents an active trace span."""

    @property
    @abc.abstractmethod
    def context(self) -> "TraceContext":
        """The span's own context (a child of the context it was started under)."""

    @abc.abstractmethod
    def set_attribute(self, key: str, value: Any) -> None: ...

    @abc.abstractmethod
    def set_status_ok(self) -> None: ...

    @abc.abstractmethod
    def record_exception(self, exc: Exception) -> None: ...

    @abc.abstractmethod
    def end(self) -> None: ...

    def __enter__(self) -> "Span":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_val is not None:
            self.record_exception(exc_val)
        else:
            self.set_status_ok()
        self.end()


class Tracer(abc.ABC):
    """Port: create and manage spans under an explicit parent context."""

    @abc.abstractmethod
    @contextlib.contextmanager
    def start_span(
        self,
        name: str,
        parent: "TraceContext",
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: dict[str, Any] | None = None,
    ) -> Iterator[Span]: ...

    @abc.abstractmethod
    @contextlib.asynccontextmanager
    async def start_async_span(
        self,
        name: str,
        parent: "TraceContext",
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: dict[str, Any] | None = None,
    ) -> AsyncIterator[Span]: ...


__all__ = ["Span", "SpanKind", "Tracer"]
