from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.modules.anthropic_settings import AnthropicSettings
from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.orchestration_settings import OrchestrationSettings
from core.settings.modules.redis_settings import RedisSettings
from core.settings.modules.security_settings import SecuritySettings
from core.settings.modules.vps_settings import VpsSettings
from core.settings.modules.wordpress_settings import WordPressSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    vps: VpsSettings
    wordpress: WordPressSettings
    anthropic: AnthropicSettings
    security: SecuritySettings
    orchestration: OrchestrationSettings
    redis: RedisSettings
    database: DatabaseSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        vps=VpsSettings(),
        wordpress=WordPressSettings(),
        anthropic=AnthropicSettings(),
        security=SecuritySettings(),
        orchestration=OrchestrationSettings(),
        redis=RedisSettings(),
        database=DatabaseSettings(),
    )
