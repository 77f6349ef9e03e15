"""Sync Publish step (``publish/sync``)."""
import logging
from typing import List

from blogforge_sdk.wordpress import WordPressCredentials
from core.application.services.article_publisher import ArticlePublisher
from core.domain.entities import Article, Site
from core.domain.enums import ArticleStatus, ErrorCode, PublishAction
from core.domain.exceptions import NonRetriableError, RetryableStepError
from core.domain.value_objects import Err
from orchestration.events import Event
from orchestration.models import StepContext

from .dependencies import StepDependencies


logger = logging.getLogger(__name__)


class SyncPublishStep:
    name = "sync-publish"

    def __init__(self, deps: StepDependencies):
        self._deps = deps
        self._store = deps.store

    async def _load(self, ctx: StepContext) -> tuple[Article, Site]:
        article_id = ctx.require("articleId")
        site_id = ctx.require("siteId")
        article = await self._store.articles.get(article_id)
        if article is None:
            raise NonRetriableError(f"Article not found: {article_id}")
        site = await self._store.sites.get(site_id)
        if site is None:
            raise NonRetriableError(f"Site not found: {site_id}")
        return article, site

    async def _credentials(self, site: Site) -> WordPressCredentials:
        if not site.wp_site_url:
            raise NonRetriableError(f"Site {site.slug} has not been provisioned")
        credential = await self._store.credentials.get_for_site(site.id)
        if credential is None:
            raise NonRetriableError(f"Site {site.slug} has no stored credential")
        return WordPressCredentials(
            base_url=site.wp_site_url,
            username=credential.username,
            app_password=self._deps.cipher.safe_decrypt(credential.encrypted_password),
        )

    async def run(self, ctx: StepContext) -> List[Event]:
        try:
            action = PublishAction(str(ctx.payload.get("action") or PublishAction.CREATE.value))
        except ValueError:
            raise NonRetriableError(f"Unknown publish action: {ctx.payload.get('action')}")

        article, site = await self._load(ctx)

        if action == PublishAction.CREATE and article.status == ArticleStatus.PUBLISHED:
            logger.info(f"Article {article.id} is already published as post {article.wp_post_id}")
            return []
        if action != PublishAction.CREATE and article.wp_post_id is None:
            raise NonRetriableError(f"Article {article.id} has no WordPress post to {action.value}")
        if action != PublishAction.DELETE and not article.content:
            raise NonRetriableError(f"Article {article.id} has no content to publish")

        credentials = await self._credentials(site)
        async with self._deps.wordpress_client_factory(credentials) as client:
            publisher = ArticlePublisher(client, post_status=self._deps.post_status)
            if action == PublishAction.CREATE:
                result = await publisher.publish(article)
            elif action == PublishAction.UPDATE:
                result = await publisher.update(article.wp_post_id, article)
            else:
                result = await publisher.delete(article.wp_post_id)

        if isinstance(result, Err):
            message = f"{result.error.code.value}: {result.error.message}"
            if result.error.code == ErrorCode.AUTH_ERROR:
                site.mark_connection_error()
                await self._store.sites.update(site)
                raise NonRetriableError(message)
            raise RetryableStepError(message)

        if action == PublishAction.DELETE:
            article.mark_archived()
        else:
            article.mark_published(result.data.post_id)
        await self._store.articles.update(article)
        logger.info(f"✅ Article {article.id} {action.value} synced to {site.slug}")
        return []

    async def on_failure(self, ctx: StepContext, exc: BaseException) -> None:
        article = await self._store.articles.get(str(ctx.payload.get("articleId") or ""))
        if article is None:
            return
        article.transition(ArticleStatus.FAILED)
        await self._store.articles.update(article)
        logger.error(f"❌ Publishing article {article.id} failed: {exc}")
