"""WordPress REST API access for hosted sites."""

from .client import (
    WordPressAPIError,
    WordPressClient,
    WordPressCredentials,
    sanitize_filename,
)

__all__ = [
    "WordPressAPIError",
    "WordPressClient",
    "WordPressCredentials",
    "sanitize_filename",
]
