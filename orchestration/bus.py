"""Event bus - publisher and subscriber protocols, and InMemoryEventBus."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol

from blogforge_sdk.logging import get_logger

from .events import Event

EventHandler = Callable[[Event], Awaitable[None]]


class EventPublisher(Protocol):
    """Anything events can be published to."""

    async def publish(self, event: Event) -> None:
        """Publish an event.

        Args:
            event: Event to publish
        """
        ...


class EventSubscriber(Protocol):
    """An in-process source that calls handlers by event name."""

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event name.

        Args:
            event_name: Event name to subscribe to
            handler: Async handler function
        """
        ...


class EventBusProtocol(EventPublisher, EventSubscriber, Protocol):
    """Publisher and subscriber in one process."""


class InMemoryEventBus(EventBusProtocol):
    """In-process event bus.

    Handlers run in the publisher's task, or in their own task when
    ``background`` is set so a request handler does not wait on the
    workflow it started.
    """

    def __init__(self, background: bool = False) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._background = background
        self._tasks: set[asyncio.Task] = set()
        self.published: list[Event] = []
        self._logger = get_logger("orchestration.event_bus")

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_name, []).append(handler)

    async def publish(self, event: Event) -> None:
        """Deliver an event to every subscribed handler.

        A failing handler is logged and does not stop delivery to the
        remaining handlers.
        """
        self.published.append(event)
        handlers = self._handlers.get(event.name, [])
        if not handlers:
            self._logger.debug(f"No handlers for {event.name}")
            return

        self._logger.info(
            f"Publishing {event.name} ({event.metadata.event_id}) to {len(handlers)} handler(s)"
        )

        for handler in handlers:
            if self._background:
                task = asyncio.create_task(self._deliver(handler, event))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
            else:
                await self._deliver(handler, event)

    async def _deliver(self, handler: EventHandler, event: Event) -> None:
        try:
            await handler(event)
        except Exception as exc:
            self._logger.error(
                f"Handler {getattr(handler, '__qualname__', handler)} failed for "
                f"{event.name}: {exc}",
                exc_info=True,
            )

    async def drain(self) -> None:
        """Wait for background deliveries, including ones they start."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
