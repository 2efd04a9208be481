"""Kafka adapter – producer and consumer carrying trace context in binary headers."""
from baggage_relay.adapters.kafka.serializer import KafkaMessageSerializer
from baggage_relay.adapters.kafka.producer import KafkaProducer
from baggage_relay.adapters.kafka.consumer import KafkaConsumer

__all__ = ["KafkaConsumer", "KafkaMessageSerializer", "KafkaProducer"]
