"""
Provision Site step (``site/provision``).

Flow:
1. Move the site to provisioning
2. Create the WordPress site and its application password
3. Store the password encrypted, one credential per site
4. Mark the site active and activate its theme
"""
import logging
from typing import List

from core.application.services.site_manager import SiteCreated
from core.domain.entities import Credential, Site
from core.domain.enums import ErrorCode, SiteStatus
from core.domain.exceptions import NonRetriableError, RetryableStepError
from core.domain.value_objects import Err
from orchestration.events import Event
from orchestration.models import StepContext

from .dependencies import StepDependencies


logger = logging.getLogger(__name__)


class ProvisionSiteStep:
    name = "provision-site"

    def __init__(self, deps: StepDependencies):
        self._deps = deps
        self._store = deps.store

    async def _load_site(self, ctx: StepContext) -> Site:
        site_id = ctx.require("siteId")
        site = await self._store.sites.get(site_id)
        if site is None:
            raise NonRetriableError(f"Site not found: {site_id}")
        return site

    async def run(self, ctx: StepContext) -> List[Event]:
        site = await self._load_site(ctx)
        if site.status == SiteStatus.ACTIVE:
            logger.info(f"Site {site.slug} is already active, nothing to provision")
            return []

        user = await self._store.users.get(site.user_id)
        if user is None:
            raise NonRetriableError(f"Owner {site.user_id} of site {site.id} not found")

        site.mark_provisioning()
        site = await self._store.sites.update(site)

        manager = self._deps.site_manager_factory()
        result = await manager.create(site.slug, site.title, user.email)
        if isinstance(result, Err):
            message = f"{result.error.code.value}: {result.error.message}"
            if result.error.code == ErrorCode.SITE_EXISTS:
                raise NonRetriableError(message)
            raise RetryableStepError(message)

        created: SiteCreated = result.data
        await self._store.credentials.save(
            Credential(
                site_id=site.id,
                username=created.credentials.username,
                encrypted_password=self._deps.cipher.encrypt(created.credentials.password),
                app_name=created.credentials.app_name,
            )
        )

        site.mark_active(created.site_id, created.url)
        await self._store.sites.update(site)
        logger.info(f"✅ Site {site.slug} active at {created.url} (blog_id={created.site_id})")

        theme = str(ctx.payload.get("theme") or site.theme)
        if self._deps.activate_theme and theme:
            await self._activate_theme(manager, theme, created.url)

        return []

    async def _activate_theme(self, manager, theme: str, url: str) -> None:
        # The site is usable with the network default theme.
        try:
            activated = await manager.activate_theme(theme, url)
        except Exception as e:
            logger.warning(f"Theme {theme} could not be activated on {url}: {e}")
            return
        if not activated:
            logger.warning(f"Theme {theme} was not activated on {url}")

    async def on_failure(self, ctx: StepContext, exc: BaseException) -> None:
        site = await self._store.sites.get(str(ctx.payload.get("siteId") or ""))
        if site is None or site.status == SiteStatus.ACTIVE:
            return
        site.mark_provision_failed()
        await self._store.sites.update(site)
        logger.error(f"❌ Provisioning of site {site.slug} failed: {exc}")
