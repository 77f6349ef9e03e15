from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base import BlogForgeBaseSettings


class WordPressSettings(BlogForgeBaseSettings):
    """Multisite network layout on the VPS (WP_PATH, WP_DOMAIN, ...)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="WP_",
    )

    path: str = "/var/www/wordpress"
    domain: str = "example.app"
    admin_username: str = "admin"
    app_name_prefix: str = "blogforge"
    request_timeout: int = 30
