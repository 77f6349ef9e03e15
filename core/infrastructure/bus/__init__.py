"""Message bus infrastructure - Redis Streams integration."""
from .redis_stream_consumer import RedisStreamConsumer, start_event_worker
from .redis_stream_publisher import RedisStreamPublisher

__all__ = [
    "RedisStreamConsumer",
    "RedisStreamPublisher",
    "start_event_worker",
]
