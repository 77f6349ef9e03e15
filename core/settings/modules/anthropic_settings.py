from __future__ import annotations

from pydantic import Field

from core.settings.base import BlogForgeBaseSettings


class AnthropicSettings(BlogForgeBaseSettings):
    """Claude batch API settings."""

    api_key: str | None = Field(None, alias="ANTHROPIC_API_KEY", repr=False)
    model: str = Field("claude-haiku-4-5", alias="ANTHROPIC_MODEL")
    max_tokens: int = Field(4096, alias="ANTHROPIC_MAX_TOKENS")
    article_max_tokens: int = Field(8192, alias="ANTHROPIC_ARTICLE_MAX_TOKENS")
    fact_check: bool = Field(True, alias="ANTHROPIC_FACT_CHECK")
