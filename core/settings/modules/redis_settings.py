from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base import BlogForgeBaseSettings


class RedisSettings(BlogForgeBaseSettings):
    """Redis Streams transport for workflow events."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="REDIS_",
    )

    url: str = "redis://localhost:6379/0"
    stream_name: str = "blogforge:events"
    consumer_group: str = "blogforge:workers"
    consumer_name: str = "worker-1"
    maxlen: int = 10000
    # Unacknowledged entries idle this long are claimed from other consumers
    claim_idle_ms: int = 60000
    recover_interval_seconds: float = 30.0
