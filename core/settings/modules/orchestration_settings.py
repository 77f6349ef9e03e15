from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base import BlogForgeBaseSettings


def _seconds(value: str) -> tuple[float, ...]:
    return tuple(float(part) for part in value.split(",") if part.strip())


class OrchestrationSettings(BlogForgeBaseSettings):
    """
    Retry envelope, batch polling and timers.
    Backoff and poll schedules are comma-separated seconds.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="ORCHESTRATION_",
    )

    max_attempts: int = 3
    backoff_seconds: str = "60,300,900"
    batch_poll_seconds: str = "30,60,120,300"
    batch_max_wait_seconds: float = 24 * 60 * 60
    cron_interval_seconds: float = 300.0
    transport: str = "memory"  # memory | redis
    record_store: str = "memory"  # memory | database

    @property
    def backoff_schedule(self) -> tuple[float, ...]:
        return _seconds(self.backoff_seconds)

    @property
    def batch_poll_schedule(self) -> tuple[float, ...]:
        return _seconds(self.batch_poll_seconds)
