"""
WP-CLI wrapper for the WordPress multisite network on the VPS.

Builds `wp` invocations, runs them on the SSHSession opened by
``connect()`` and parses their textual output. Output that cannot be parsed raises WPCLIError rather
than producing a half-filled result.
"""
from __future__ import annotations

import shlex
from dataclasses import dataclass

from blogforge_sdk.logging import get_logger

from .ssh_client import SSHClient, SSHExecError, SSHExecuteResult, SSHSession
from .validation import (
    ValidationError,
    validate_app_name,
    validate_email,
    validate_slug,
    validate_theme,
    validate_title,
    validate_url,
    validate_username,
)

logger = get_logger("blogforge_sdk.vps.wp_cli")

DEFAULT_WP_PATH = "/var/www/wordpress"
DEFAULT_WP_DOMAIN = "example.app"


class WPCLIError(Exception):
    """WP-CLI ran but failed, or printed output that could not be parsed."""


@dataclass(frozen=True)
class WPSiteCreateResult:
    success: bool
    blog_id: int | None = None
    url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class WPApplicationPassword:
    uuid: str
    password: str
    name: str

    def __repr__(self) -> str:
        return f"WPApplicationPassword(uuid={self.uuid!r}, name={self.name!r}, password=***)"


class WPCLIClient:
    """Site-lifecycle operations on the multisite network.

    Commands run only on the session handed back by ``connect()``; calling
    one without an open session raises SSHExecError.
    """

    def __init__(
        self,
        ssh_client: SSHClient,
        wp_path: str = DEFAULT_WP_PATH,
        domain: str = DEFAULT_WP_DOMAIN,
    ) -> None:
        self._ssh = ssh_client
        self._wp_path = wp_path
        self._domain = domain
        self._session: SSHSession | None = None

    async def connect(self) -> SSHSession:
        self._session = await self._ssh.connect()
        return self._session

    async def disconnect(self) -> None:
        self._session = None
        await self._ssh.disconnect()

    def site_url(self, slug: str) -> str:
        return f"https://{slug}.{self._domain}"

    def build_command(self, *args: str) -> str:
        quoted = " ".join(shlex.quote(arg) for arg in args)
        return f"cd {shlex.quote(self._wp_path)} && wp {quoted} --allow-root"

    async def _wp(self, *args: str) -> SSHExecuteResult:
        session = self._session
        if session is None or session.closed:
            raise SSHExecError("No open SSH session for WP-CLI; call connect() first")
        return await session.execute(self.build_command(*args))

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    async def site_exists(self, slug: str) -> bool:
        validate_slug(slug)
        result = await self._wp("site", "list", f"--url={self.site_url(slug)}", "--format=count")
        if not result.ok:
            raise WPCLIError(f"wp site list failed: {result.stderr.strip() or result.exit_code}")
        try:
            return int(result.stdout.strip()) > 0
        except ValueError as exc:
            raise WPCLIError(f"Unexpected output from wp site list: {result.stdout!r}") from exc

    async def create_site(self, slug: str, title: str, email: str) -> WPSiteCreateResult:
        """Create a network site; `--porcelain` prints only the new blog id."""
        try:
            validate_slug(slug)
            validate_title(title)
            validate_email(email)
        except ValidationError as exc:
            return WPSiteCreateResult(success=False, error=str(exc))

        result = await self._wp(
            "site",
            "create",
            f"--slug={slug}",
            f"--title={title}",
            f"--email={email}",
            "--porcelain",
        )
        if not result.ok:
            return WPSiteCreateResult(
                success=False,
                error=result.stderr.strip() or "Failed to create WordPress site",
            )

        output = result.stdout.strip()
        if not output.isdigit() or int(output) <= 0:
            return WPSiteCreateResult(
                success=False,
                error=f"Unexpected output from wp site create: {output!r}",
            )

        blog_id = int(output)
        logger.info(f"Created site {slug} (blog_id={blog_id})")
        return WPSiteCreateResult(success=True, blog_id=blog_id, url=self.site_url(slug))

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    async def create_application_password(
        self, username: str, app_name: str, site_url: str | None = None
    ) -> WPApplicationPassword | None:
        """Issue an application password; None on failure or unparsable output."""
        validate_username(username)
        validate_app_name(app_name)
        args = ["user", "application-password", "create", username, app_name, "--porcelain"]
        if site_url:
            args.append(f"--url={validate_url(site_url)}")

        result = await self._wp(*args)
        if not result.ok:
            logger.error(f"Failed to create application password for {username}: {result.stderr.strip()}")
            return None

        # Output format: "<uuid> <password>"
        parts = result.stdout.strip().split()
        if len(parts) < 2:
            logger.error("Application password output could not be parsed")
            return None
        return WPApplicationPassword(uuid=parts[0], password=parts[1], name=app_name)

    # ------------------------------------------------------------------
    # Theme and health
    # ------------------------------------------------------------------

    async def activate_theme_for_site(self, theme: str, site_url: str) -> bool:
        validate_theme(theme)
        validate_url(site_url)
        result = await self._wp("theme", "activate", theme, f"--url={site_url}")
        return result.ok

    async def check_wp_cli(self) -> bool:
        """Open a session, run `wp --version` and always disconnect."""
        try:
            await self.connect()
            result = await self._wp("--version")
            return result.ok
        except (ConnectionError, SSHExecError, WPCLIError) as exc:
            logger.warning(f"WP-CLI check failed: {exc}")
            return False
        finally:
            await self.disconnect()
