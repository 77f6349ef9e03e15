"""Orchestration layer - event-driven step execution with retries."""

from .bus import EventBusProtocol, EventPublisher, EventSubscriber, InMemoryEventBus
from .events import (
    ARTICLE_GENERATE,
    PRODUCT_ANALYZE,
    PUBLISH_SYNC,
    SCHEDULE_CRON,
    SCHEDULE_TRIGGER_MANUAL,
    SITE_PROVISION,
    Event,
    EventMetadata,
)
from .models import StepContext, StepResult
from .orchestrator import Orchestrator
from .registry import StepRegistry
from .workflow import FailureHook, RetryPolicy, StepFunction, StepRegistration

__all__ = [
    "ARTICLE_GENERATE",
    "PRODUCT_ANALYZE",
    "PUBLISH_SYNC",
    "SCHEDULE_CRON",
    "SCHEDULE_TRIGGER_MANUAL",
    "SITE_PROVISION",
    "Event",
    "EventBusProtocol",
    "EventPublisher",
    "EventSubscriber",
    "EventMetadata",
    "FailureHook",
    "InMemoryEventBus",
    "Orchestrator",
    "RetryPolicy",
    "StepContext",
    "StepFunction",
    "StepRegistration",
    "StepRegistry",
    "StepResult",
]
