"""
FastAPI Dependencies.

Provides dependency injection for the record store, the event bus, the
orchestrator and the services the step functions use.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from blogforge_sdk.llm import ClaudeBatchClient
from blogforge_sdk.vps import SSHClient, WPCLIClient
from blogforge_sdk.wordpress import WordPressClient, WordPressCredentials
from core.application.services import ArticleGenerator, BatchRunner, SiteManager
from core.application.use_cases import CompleteOnboardingUseCase
from core.application.workflows import StepDependencies, build_registry
from core.domain.repositories import RecordStore
from core.infrastructure.adapters.persistence.in_memory_record_store import InMemoryRecordStore
from core.infrastructure.security import CredentialCipher
from core.settings import AppSettings, get_app_settings
from orchestration import InMemoryEventBus, Orchestrator, RetryPolicy
from orchestration.bus import EventPublisher

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_record_store: Optional[RecordStore] = None
_event_bus: Optional[EventPublisher] = None
_cipher: Optional[CredentialCipher] = None
_orchestrator: Optional[Orchestrator] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_settings() -> AppSettings:
    return get_app_settings()


def get_record_store() -> RecordStore:
    global _record_store
    if _record_store is None:
        settings = get_app_settings()
        if settings.orchestration.record_store == "database":
            from core.infrastructure.database.config import get_session_factory
            from core.infrastructure.database.repositories.sqlalchemy_record_store import (
                SqlAlchemyRecordStore,
            )

            _record_store = SqlAlchemyRecordStore(get_session_factory())
            logger.info("Created SqlAlchemyRecordStore instance")
        else:
            _record_store = InMemoryRecordStore()
            logger.info("Using InMemoryRecordStore (records are lost on restart)")
    return _record_store


def get_event_bus() -> EventPublisher:
    global _event_bus
    if _event_bus is None:
        settings = get_app_settings()
        if settings.orchestration.transport == "redis":
            from core.infrastructure.bus import RedisStreamPublisher

            _event_bus = RedisStreamPublisher(
                redis_url=settings.redis.url,
                stream_name=settings.redis.stream_name,
                maxlen=settings.redis.maxlen,
            )
            logger.info(f"Publishing events to Redis stream {settings.redis.stream_name}")
        else:
            _event_bus = InMemoryEventBus(background=True)
            logger.info("Using InMemoryEventBus")
    return _event_bus


def get_cipher() -> CredentialCipher:
    global _cipher
    if _cipher is None:
        key = get_app_settings().security.encryption_key
        if not key:
            logger.warning("ENCRYPTION_KEY is not set; using a temporary key for this process")
            key = CredentialCipher.generate_key()
        _cipher = CredentialCipher(key)
    return _cipher


def build_site_manager(settings: AppSettings) -> SiteManager:
    ssh = SSHClient(settings.vps.to_ssh_config())
    wp_cli = WPCLIClient(ssh, wp_path=settings.wordpress.path, domain=settings.wordpress.domain)
    return SiteManager(
        wp_cli,
        admin_username=settings.wordpress.admin_username,
        app_name_prefix=settings.wordpress.app_name_prefix,
    )


def get_site_manager(settings: AppSettings = Depends(get_settings)) -> SiteManager:
    return build_site_manager(settings)


def build_step_dependencies(settings: AppSettings) -> StepDependencies:
    """
    Raises:
        ValueError: ANTHROPIC_API_KEY is not configured
    """
    batch_client = ClaudeBatchClient(
        api_key=settings.anthropic.api_key,
        default_model=settings.anthropic.model,
        default_max_tokens=settings.anthropic.max_tokens,
    )
    runner = BatchRunner(
        batch_client,
        poll_schedule=settings.orchestration.batch_poll_schedule,
        max_wait_seconds=settings.orchestration.batch_max_wait_seconds,
    )

    def wordpress_client(credentials: WordPressCredentials) -> WordPressClient:
        return WordPressClient(credentials, timeout=settings.wordpress.request_timeout)

    return StepDependencies(
        store=get_record_store(),
        cipher=get_cipher(),
        site_manager_factory=lambda: build_site_manager(settings),
        batch_runner=runner,
        wordpress_client_factory=wordpress_client,
        article_generator=ArticleGenerator(max_tokens=settings.anthropic.article_max_tokens),
        fact_check=settings.anthropic.fact_check,
    )


def get_orchestrator() -> Orchestrator:
    global _orchestrator
    if _orchestrator is None:
        settings = get_app_settings()
        registry = build_registry(
            build_step_dependencies(settings),
            RetryPolicy(
                max_attempts=settings.orchestration.max_attempts,
                backoff_seconds=settings.orchestration.backoff_schedule,
            ),
        )
        bus = get_event_bus()
        _orchestrator = Orchestrator(registry, get_record_store().jobs, bus)
        if isinstance(bus, InMemoryEventBus):
            _orchestrator.subscribe_to(bus)
        logger.info(f"Created Orchestrator with {len(registry)} trigger event(s)")
    return _orchestrator


def get_onboarding_use_case(
    store: RecordStore = Depends(get_record_store),
    event_bus: EventPublisher = Depends(get_event_bus),
    settings: AppSettings = Depends(get_settings),
) -> CompleteOnboardingUseCase:
    return CompleteOnboardingUseCase(store=store, event_bus=event_bus, domain=settings.wordpress.domain)


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _record_store, _event_bus, _cipher, _orchestrator

    _record_store = None
    _event_bus = None
    _cipher = None
    _orchestrator = None

    logger.info("Dependencies reset")
