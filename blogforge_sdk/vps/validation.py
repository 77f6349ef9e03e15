"""
Input validation for values interpolated into WP-CLI commands.

Every value is also shell-quoted before use; these checks reject input
that is malformed for WordPress before it reaches the remote host.
"""
import re

SLUG_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)
IDENTIFIER_PATTERN = re.compile(r"^[a-z0-9_-]+$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.@-]+$")
DANGEROUS_CHARS = re.compile(r"[`$\\;|&<>\x00-\x1f\x7f]")
URL_PATTERN = re.compile(r"^https?://[^\s]+$")


class ValidationError(ValueError):
    """Raised when a value is unsafe or malformed for WP-CLI."""


def validate_slug(slug: str) -> str:
    if not slug or len(slug) > 63 or not SLUG_PATTERN.match(slug):
        raise ValidationError(f"Invalid site slug: {slug!r}")
    return slug


def validate_email(email: str) -> str:
    if not email or len(email) > 254 or not EMAIL_PATTERN.match(email):
        raise ValidationError(f"Invalid email address: {email!r}")
    return email


def validate_title(title: str) -> str:
    if not title or len(title) > 200:
        raise ValidationError("Site title must be 1-200 characters")
    if DANGEROUS_CHARS.search(title):
        raise ValidationError("Site title contains forbidden characters")
    return title


def validate_theme(theme: str) -> str:
    if not theme or len(theme) > 100 or not IDENTIFIER_PATTERN.match(theme):
        raise ValidationError(f"Invalid theme name: {theme!r}")
    return theme


def validate_username(username: str) -> str:
    if not username or len(username) > 60 or not USERNAME_PATTERN.match(username):
        raise ValidationError(f"Invalid username: {username!r}")
    return username


def validate_app_name(app_name: str) -> str:
    if not app_name or len(app_name) > 100 or DANGEROUS_CHARS.search(app_name):
        raise ValidationError(f"Invalid application name: {app_name!r}")
    return app_name


def validate_url(url: str) -> str:
    if not url or len(url) > 2048 or not URL_PATTERN.match(url):
        raise ValidationError(f"Invalid site URL: {url!r}")
    return url
