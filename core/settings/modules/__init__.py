# Settings modules
from .anthropic_settings import AnthropicSettings
from .app_settings import AppSettings, get_app_settings
from .database_settings import DatabaseSettings
from .orchestration_settings import OrchestrationSettings
from .redis_settings import RedisSettings
from .security_settings import SecuritySettings
from .vps_settings import VpsSettings
from .wordpress_settings import WordPressSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "AnthropicSettings",
    "DatabaseSettings",
    "OrchestrationSettings",
    "RedisSettings",
    "SecuritySettings",
    "VpsSettings",
    "WordPressSettings",
]
