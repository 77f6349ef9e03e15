"""
Site Provisioning Manager.

Creates one hosted site on the multisite network as a single operation:

1. Connect to the VPS
2. Refuse if the slug already exists (SITE_EXISTS)
3. Create the site (WP_CLI_ERROR with the tool's reason on failure)
4. Issue the site-scoped application password
5. Disconnect, on every path

Expected failures come back as ``Err``; nothing is retried here.
"""
from dataclasses import dataclass
import logging

from blogforge_sdk.vps import SSHExecError, ValidationError, WPCLIClient, WPCLIError
from core.domain.enums import ErrorCode
from core.domain.value_objects import Err, Ok, Result


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteCredentials:
    username: str
    password: str
    app_name: str = ""

    def __repr__(self) -> str:
        return f"SiteCredentials(username={self.username!r}, password=***)"


@dataclass(frozen=True)
class SiteCreated:
    site_id: int
    url: str
    credentials: SiteCredentials


class SiteManager:
    """Owns the connect/disconnect lifecycle of a WPCLIClient."""

    def __init__(
        self,
        wp_cli: WPCLIClient,
        admin_username: str = "admin",
        app_name_prefix: str = "blogforge",
    ):
        self._wp_cli = wp_cli
        self._admin_username = admin_username
        self._app_name_prefix = app_name_prefix

    async def create(self, slug: str, title: str, contact_email: str) -> Result[SiteCreated]:
        """
        Provision a site and its application password.

        Returns:
            Ok(SiteCreated) or Err with SITE_EXISTS, WP_CLI_ERROR,
            SSH_ERROR or UNKNOWN
        """
        try:
            session = await self._wp_cli.connect()
            logger.info(f"Provisioning site {slug} on {session.host}")

            if await self._wp_cli.site_exists(slug):
                logger.info(f"Site {slug} already exists, not creating it again")
                return Err.of(ErrorCode.SITE_EXISTS, f'Site with slug "{slug}" already exists')

            created = await self._wp_cli.create_site(slug, title, contact_email)
            if not created.success or created.blog_id is None or created.url is None:
                return Err.of(ErrorCode.WP_CLI_ERROR, created.error or "Failed to create site")

            app_password = await self._wp_cli.create_application_password(
                self._admin_username,
                f"{self._app_name_prefix}-{slug}",
                created.url,
            )
            if app_password is None:
                # The site exists now but has no credential; it is left as-is.
                logger.error(
                    f"Site {slug} (blog_id={created.blog_id}) created without an application password"
                )
                return Err.of(ErrorCode.WP_CLI_ERROR, "Failed to create application password")

            logger.info(f"✅ Provisioned site {slug} at {created.url}")
            return Ok(
                SiteCreated(
                    site_id=created.blog_id,
                    url=created.url,
                    credentials=SiteCredentials(
                        username=self._admin_username,
                        password=app_password.password,
                        app_name=app_password.name,
                    ),
                )
            )

        except (ConnectionError, SSHExecError) as e:
            logger.error(f"SSH failure while provisioning {slug}: {e}")
            return Err.of(ErrorCode.SSH_ERROR, str(e))
        except (WPCLIError, ValidationError) as e:
            logger.error(f"WP-CLI failure while provisioning {slug}: {e}")
            return Err.of(ErrorCode.WP_CLI_ERROR, str(e))
        except Exception as e:
            logger.error(f"Unexpected error while provisioning {slug}: {e}", exc_info=True)
            return Err.of(ErrorCode.UNKNOWN, str(e) or type(e).__name__)

        finally:
            await self._release()

    async def check_host(self) -> bool:
        """True when the VPS accepts a session and WP-CLI answers."""
        return await self._wp_cli.check_wp_cli()

    async def activate_theme(self, theme: str, site_url: str) -> bool:
        """Activate a theme on a provisioned site."""
        try:
            await self._wp_cli.connect()
            return await self._wp_cli.activate_theme_for_site(theme, site_url)
        finally:
            await self._release()

    async def _release(self) -> None:
        try:
            await self._wp_cli.disconnect()
        except (ConnectionError, SSHExecError, OSError) as e:
            logger.warning(f"Error while closing the VPS session: {e}")
