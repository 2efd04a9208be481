"""
baggage_relay – W3C trace/baggage context propagation across RPC, queues and
replayed durable orchestrations.

Import path convention::

    from baggage_relay.propagation import extract, inject, TextHeaderAdapter
    from baggage_relay.propagation.replay import ReplayBridge
    from baggage_relay.application.orchestration import DurableOrchestrator
    from baggage_relay.adapters.kafka import KafkaProducer
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
