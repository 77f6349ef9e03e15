"""
Redis Streams Publisher for workflow events.

Publishes trigger events to a Redis Stream so any worker in the consumer
group can run them; delivery is at-least-once.
"""
import logging
from typing import Optional

import redis.asyncio as aioredis

from orchestration.events import Event


logger = logging.getLogger(__name__)


class RedisStreamPublisher:
    """
    Publishes events to Redis Streams. Consumption happens in a separate
    worker process through RedisStreamConsumer.

    Stream format: blogforge:events
    Message format: Event.to_message() - name, payload (JSON), event_id,
    job_id, execution_id, timestamp (ISO format)
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "blogforge:events",
        maxlen: int = 10000,
        client: Optional[aioredis.Redis] = None,
    ):
        """
        Initialize Redis Stream Publisher.

        Args:
            redis_url: Redis connection URL
            stream_name: Redis Stream name
            maxlen: Approximate number of entries kept in the stream
            client: Already connected client, mostly for tests
        """
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.maxlen = maxlen
        self._redis_client: Optional[aioredis.Redis] = client

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self._redis_client is None:
            try:
                self._redis_client = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True
                )
                await self._redis_client.ping()
                logger.info(f"✅ Connected to Redis stream {self.stream_name}")
            except Exception as e:
                self._redis_client = None
                logger.error(f"Failed to connect to Redis: {e}")
                raise

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("✅ Disconnected from Redis")

    async def publish(self, event: Event) -> None:
        """Append an event to the stream."""
        await self.publish_event(event)

    async def publish_event(self, event: Event) -> str:
        """
        Append an event to the stream.

        Returns:
            Message ID from Redis Stream
        """
        if self._redis_client is None:
            await self.connect()

        try:
            msg_id = await self._redis_client.xadd(
                self.stream_name,
                event.to_message(),
                maxlen=self.maxlen,
                approximate=True,
            )
        except Exception as e:
            logger.error(f"Failed to publish {event.name} to Redis Stream: {e}", exc_info=True)
            raise

        logger.info(f"✅ Published {event.name} ({event.metadata.event_id}), msg_id={msg_id}")
        return msg_id

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
