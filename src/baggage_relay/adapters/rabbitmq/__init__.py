"""RabbitMQ adapter – aio-pika publisher and consumer carrying trace context in AMQP headers."""
from baggage_relay.adapters.rabbitmq.bus import RabbitMQMessageBus
from baggage_relay.adapters.rabbitmq.consumer import RabbitMQConsumer

__all__ = ["RabbitMQConsumer", "RabbitMQMessageBus"]
