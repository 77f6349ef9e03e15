"""
Generate Article step (``article/generate``).

The article is moved to generating before the batch is submitted, and the
batch id is stored on it right after. A redelivered or retried run finds
the id there and resumes polling that batch instead of paying for a
second one. Each finished run leaves an ArticleGenerationLog with token
usage, timing and the fact-check outcome.
"""
import logging
import time
from typing import List

from blogforge_sdk.llm import BatchMappingError
from core.domain.entities import Article, ArticleGenerationLog
from core.domain.enums import ArticleStatus, PublishAction
from core.domain.exceptions import NonRetriableError
from orchestration.events import PUBLISH_SYNC, Event
from orchestration.models import StepContext

from .dependencies import StepDependencies


logger = logging.getLogger(__name__)

DONE_STATUSES = frozenset({ArticleStatus.REVIEW, ArticleStatus.PUBLISHED, ArticleStatus.ARCHIVED})


class GenerateArticleStep:
    name = "generate-article"

    def __init__(self, deps: StepDependencies):
        self._deps = deps
        self._store = deps.store

    async def run(self, ctx: StepContext) -> List[Event]:
        article_id = ctx.require("articleId")
        article = await self._store.articles.get(article_id)
        if article is None:
            raise NonRetriableError(f"Article not found: {article_id}")
        if article.status in DONE_STATUSES:
            logger.info(f"Article {article.id} is already {article.status.value}, skipping")
            return []

        started = time.monotonic()
        product = await self._store.products.get(article.product_id)
        generator = self._deps.article_generator
        runner = self._deps.batch_runner
        request = generator.build_request(article, product)

        if article.batch_id:
            logger.info(f"Resuming batch {article.batch_id} for article {article.id}")
            batch_id = article.batch_id
        else:
            article.transition(ArticleStatus.GENERATING)
            article = await self._store.articles.update(article)
            batch_id = await runner.submit([request])
            article.batch_id = batch_id
            article = await self._store.articles.update(article)
            logger.info(f"Submitted batch {batch_id} for article {article.id}")

        try:
            results = await runner.collect(batch_id, {generator.custom_id(article): article.id}, ctx.sleep)
        except BatchMappingError as e:
            raise NonRetriableError(str(e)) from e

        item = results[article.id]
        if not item.succeeded:
            reason = item.error.message if item.error else item.type
            await self._mark_failed(article)
            raise NonRetriableError(f"Generation {item.type} for article {article.id}: {reason}")

        try:
            generated = generator.parse(item)
        except ValueError as e:
            await self._mark_failed(article)
            raise NonRetriableError(f"Unusable output for article {article.id}: {e}") from e

        fact_check = None
        if self._deps.fact_checker is not None:
            fact_check = await self._deps.fact_checker.check(runner, article, generated.content, ctx.sleep)

        article.apply_generated_content(
            generated.title,
            generated.content,
            generated.meta_description,
            generated.search_intent,
        )
        await self._store.articles.update(article)
        logger.info(f"✅ Article {article.id} generated, awaiting review")

        await self._store.generation_logs.add(
            ArticleGenerationLog(
                article_id=article.id,
                model=runner.model_for(request),
                batch_id=batch_id,
                input_tokens=item.usage.input_tokens if item.usage else 0,
                output_tokens=item.usage.output_tokens if item.usage else 0,
                generation_time_ms=int((time.monotonic() - started) * 1000),
                fact_check_passed=fact_check.passed if fact_check else None,
                fact_check_issues=list(fact_check.issues) if fact_check else [],
            )
        )

        if ctx.payload.get("autoPublish") and product is not None:
            return [
                Event.create(
                    PUBLISH_SYNC,
                    {
                        "articleId": article.id,
                        "siteId": product.site_id,
                        "action": PublishAction.CREATE.value,
                    },
                )
            ]
        return []

    async def _mark_failed(self, article: Article) -> None:
        article.batch_id = None
        article.transition(ArticleStatus.FAILED)
        await self._store.articles.update(article)

    async def on_failure(self, ctx: StepContext, exc: BaseException) -> None:
        article = await self._store.articles.get(str(ctx.payload.get("articleId") or ""))
        if article is None or article.status in DONE_STATUSES:
            return
        if article.status != ArticleStatus.FAILED:
            await self._mark_failed(article)
        logger.error(f"❌ Generation of article {article.id} failed: {exc}")
