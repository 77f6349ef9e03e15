"""Long-running loops: stream event worker and the schedule timer."""

import asyncio
import json
from typing import Any, Protocol

from blogforge_sdk.logging import get_logger

from .bus import EventPublisher
from .events import SCHEDULE_CRON, Event
from .models import Sleep
from .orchestrator import Orchestrator

logger = get_logger("orchestration.worker")


class MessageSource(Protocol):
    """Consumer side of an at-least-once message stream."""

    async def consume_messages(self, batch_size: int = 10, block_ms: int = 1000) -> list[dict[str, Any]]:
        ...

    async def acknowledge_message(self, message_id: str) -> None:
        ...


class EventWorker:
    """Feeds stream messages to the orchestrator.

    A message is acknowledged only after the orchestrator has handled
    it; if handling raises, the message stays pending for redelivery.
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        source: MessageSource,
        batch_size: int = 10,
        block_ms: int = 1000,
        poll_interval: float = 1.0,
    ) -> None:
        self._orchestrator = orchestrator
        self._source = source
        self._batch_size = batch_size
        self._block_ms = block_ms
        self._poll_interval = poll_interval

    async def process_message(self, message: dict[str, Any]) -> None:
        message_id = message["id"]
        try:
            event = Event.from_message(message["data"])
        except (KeyError, ValueError, json.JSONDecodeError) as exc:
            logger.error(f"Dropping malformed message {message_id}: {exc}")
            await self._source.acknowledge_message(message_id)
            return

        await self._orchestrator.handle(event)
        await self._source.acknowledge_message(message_id)

    async def run_once(self) -> int:
        messages = await self._source.consume_messages(
            batch_size=self._batch_size, block_ms=self._block_ms
        )
        for message in messages:
            try:
                await self.process_message(message)
            except Exception as exc:
                logger.error(f"Failed to process message {message['id']}: {exc}", exc_info=True)
        return len(messages)

    async def run(self, stop: asyncio.Event) -> None:
        logger.info("🚀 Event worker started")
        while not stop.is_set():
            try:
                count = await self.run_once()
            except Exception as exc:
                logger.error(f"Worker error: {exc}", exc_info=True)
                count = 0
            if not count:
                await asyncio.sleep(self._poll_interval)
        logger.info("Event worker stopped")


class CronTimer:
    """Publishes `schedule/cron` on a fixed interval."""

    def __init__(
        self,
        event_bus: EventPublisher,
        interval_seconds: float = 300.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._event_bus = event_bus
        self._interval = interval_seconds
        self._sleep = sleep

    async def tick(self) -> Event:
        event = Event.create(SCHEDULE_CRON, {})
        await self._event_bus.publish(event)
        return event

    async def run(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                await self.tick()
            except Exception as exc:
                logger.error(f"Cron tick failed: {exc}", exc_info=True)
            await self._sleep(self._interval)
