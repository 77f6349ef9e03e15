from __future__ import annotations

from pydantic import Field

from core.settings.base import BlogForgeBaseSettings


class SecuritySettings(BlogForgeBaseSettings):
    """Fernet key used to encrypt site credentials at rest."""

    encryption_key: str | None = Field(None, alias="ENCRYPTION_KEY", repr=False)
