"""Unit tests for the message envelope."""

import dataclasses

import pytest

from baggage_relay.kernel.messaging import Message


class TestMessage:
    def test_defaults(self) -> None:
        msg = Message(topic="orders", payload={"a": 1})
        assert msg.id
        assert msg.occurred_at.tzinfo is not None

    def test_ids_are_unique(self) -> None:
        assert Message().id != Message().id

    def test_is_frozen(self) -> None:
        msg = Message(topic="orders")
        with pytest.raises(dataclasses.FrozenInstanceError):
            msg.topic = "other"  # type: ignore[misc]
