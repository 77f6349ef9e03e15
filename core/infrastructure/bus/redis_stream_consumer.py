"""
Redis Streams Consumer for workflow events.

Reads events through a consumer group. Messages are acknowledged by the
EventWorker only after the orchestrator has handled them. Entries left
unacknowledged are picked up again: this consumer's own pending list is
re-read on start-up and then periodically, and entries another consumer
left idle for too long are claimed with XAUTOCLAIM.
"""
import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import redis.asyncio as aioredis

from orchestration.orchestrator import Orchestrator
from orchestration.worker import EventWorker


logger = logging.getLogger(__name__)


class RedisStreamConsumer:
    """
    Consumes events from Redis Streams.

    Stream: blogforge:events
    Consumer Group: blogforge:workers
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "blogforge:events",
        consumer_group: str = "blogforge:workers",
        consumer_name: str = "worker-1",
        claim_idle_ms: int = 60000,
        recover_interval_seconds: float = 30.0,
        client: Optional[aioredis.Redis] = None,
    ):
        """
        Initialize Redis Stream Consumer.

        Args:
            redis_url: Redis connection URL
            stream_name: Redis Stream name
            consumer_group: Consumer group name
            consumer_name: Unique consumer name (for load balancing)
            claim_idle_ms: Idle time after which another consumer's pending entry is claimed
            recover_interval_seconds: How often pending entries are looked at again
            client: Already connected client, mostly for tests
        """
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.consumer_group = consumer_group
        self.consumer_name = consumer_name
        self.claim_idle_ms = claim_idle_ms
        self.recover_interval_seconds = recover_interval_seconds
        self._redis_client: Optional[aioredis.Redis] = client
        self._group_ready = False
        self._last_recovery: Optional[float] = None

    async def connect(self) -> None:
        """Establish Redis connection and create consumer group."""
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

        if not self._group_ready:
            try:
                await self._redis_client.xgroup_create(
                    name=self.stream_name,
                    groupname=self.consumer_group,
                    id="0",
                    mkstream=True
                )
                logger.info(f"✅ Created consumer group: {self.consumer_group}")
            except aioredis.ResponseError as e:
                if "BUSYGROUP" not in str(e):
                    raise
                logger.info(f"Consumer group {self.consumer_group} already exists")
            self._group_ready = True

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            self._group_ready = False
            logger.info("✅ Disconnected from Redis")

    async def consume_messages(
        self,
        batch_size: int = 10,
        block_ms: int = 1000
    ) -> List[Dict[str, Any]]:
        """
        Read messages for this consumer.

        When recovery is due, unacknowledged entries are returned before
        any new ones are read.

        Returns:
            List of message dictionaries with 'id' and 'data' keys
        """
        await self.connect()

        if self._recovery_due():
            recovered = await self.recover_pending(batch_size)
            if recovered:
                return recovered

        try:
            messages = await self._redis_client.xreadgroup(
                groupname=self.consumer_group,
                consumername=self.consumer_name,
                streams={self.stream_name: ">"},
                count=batch_size,
                block=block_ms
            )
        except Exception as e:
            logger.error(f"Failed to read from Redis Stream: {e}")
            raise

        result = []
        for _, stream_messages in messages or []:
            result.extend(await self._to_messages(stream_messages))
        return result

    async def recover_pending(self, batch_size: int = 10) -> List[Dict[str, Any]]:
        """
        Return entries that were delivered before but never acknowledged.

        This consumer's own pending list is read first (id "0"); when it is
        empty, entries idle for longer than ``claim_idle_ms`` are claimed
        from other consumers of the group.
        """
        await self.connect()
        self._last_recovery = time.monotonic()

        own = await self._redis_client.xreadgroup(
            groupname=self.consumer_group,
            consumername=self.consumer_name,
            streams={self.stream_name: "0"},
            count=batch_size,
        )
        result = []
        for _, stream_messages in own or []:
            result.extend(await self._to_messages(stream_messages))
        if result:
            logger.warning(f"Redelivering {len(result)} pending message(s) for {self.consumer_name}")
            return result

        claimed = await self._redis_client.xautoclaim(
            name=self.stream_name,
            groupname=self.consumer_group,
            consumername=self.consumer_name,
            min_idle_time=self.claim_idle_ms,
            start_id="0-0",
            count=batch_size,
        )
        result = await self._to_messages(claimed[1] if claimed else [])
        if result:
            logger.warning(f"Claimed {len(result)} idle message(s) for {self.consumer_name}")
        return result

    def _recovery_due(self) -> bool:
        if self._last_recovery is None:
            return True
        return time.monotonic() - self._last_recovery >= self.recover_interval_seconds

    async def _to_messages(self, entries) -> List[Dict[str, Any]]:
        result = []
        for msg_id, msg_data in entries or []:
            if not msg_data:
                # Trimmed from the stream while pending
                await self.acknowledge_message(msg_id)
                continue
            result.append({"id": msg_id, "data": msg_data})
        return result

    async def acknowledge_message(self, message_id: str) -> None:
        """Acknowledge a handled message so it is not redelivered."""
        await self.connect()

        try:
            await self._redis_client.xack(self.stream_name, self.consumer_group, message_id)
            logger.debug(f"✅ Acknowledged message: {message_id}")
        except Exception as e:
            logger.error(f"Failed to ACK message {message_id}: {e}")
            raise

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


async def start_event_worker(
    orchestrator: Orchestrator,
    consumer: RedisStreamConsumer,
    stop: Optional[asyncio.Event] = None,
    poll_interval: float = 1.0,
) -> None:
    """
    Run the orchestrator against the stream until `stop` is set.
    """
    stop = stop or asyncio.Event()
    worker = EventWorker(orchestrator, consumer, poll_interval=poll_interval)

    logger.info("🚀 Starting event worker...")
    logger.info(f"   Stream: {consumer.stream_name}")
    logger.info(f"   Consumer Group: {consumer.consumer_group}")
    logger.info(f"   Consumer Name: {consumer.consumer_name}")

    try:
        await consumer.connect()
        await worker.run(stop)
    finally:
        await consumer.disconnect()
        logger.info("✅ Event worker stopped")
