"""Propagation – carrier adapters over transport-native header bags."""
from baggage_relay.propagation.carriers.ports import CarrierAdapter
from baggage_relay.propagation.carriers.text import TextHeaderAdapter
from baggage_relay.propagation.carriers.binary import BinaryHeaderAdapter
from baggage_relay.propagation.carriers.typed import TypedPropertyAdapter

__all__ = ["BinaryHeaderAdapter", "CarrierAdapter", "TextHeaderAdapter", "TypedPropertyAdapter"]
