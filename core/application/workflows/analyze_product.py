"""Analyze Product step (``product/analyze``)."""
import logging
from typing import List

from core.domain.entities import Article, ArticleCluster, Product
from core.domain.enums import AnalysisMode, ProductStatus
from core.domain.exceptions import NonRetriableError
from orchestration.events import ARTICLE_GENERATE, Event
from orchestration.models import StepContext

from .dependencies import StepDependencies


logger = logging.getLogger(__name__)


def generate_event(article: Article, auto_publish: bool = False) -> Event:
    payload = {
        "articleId": article.id,
        "productId": article.product_id,
        "targetKeyword": article.target_keyword,
        "clusterId": article.cluster_id,
    }
    if auto_publish:
        payload["autoPublish"] = True
    return Event.create(ARTICLE_GENERATE, payload)


class AnalyzeProductStep:
    name = "analyze-product"

    def __init__(self, deps: StepDependencies):
        self._deps = deps
        self._store = deps.store

    async def run(self, ctx: StepContext) -> List[Event]:
        product_id = ctx.require("productId")
        product = await self._store.products.get(product_id)
        if product is None:
            raise NonRetriableError(f"Product not found: {product_id}")
        if product.status == ProductStatus.COMPLETED:
            logger.info(f"Product {product.id} already analyzed")
            return []

        mode = ctx.payload.get("mode")
        if mode:
            try:
                product.mode = AnalysisMode(str(mode))
            except ValueError:
                raise NonRetriableError(f"Unknown analysis mode: {mode}")
        if ctx.payload.get("url") and not product.url:
            product.url = str(ctx.payload["url"])

        product.transition(ProductStatus.ANALYZING)
        product = await self._store.products.update(product)

        analysis = await self._deps.product_analyzer.analyze(product, ctx.sleep)

        # A redelivered run after a partial write keeps what is already planned
        articles = await self._store.articles.list_for_product(product.id)
        if not articles:
            articles = await self._plan(product, analysis.clusters)

        product.analysis_result = analysis.result
        product.transition(ProductStatus.COMPLETED)
        await self._store.products.update(product)

        logger.info(f"✅ Product {product.id} planned {len(articles)} article(s)")
        return [generate_event(article) for article in articles]

    async def _plan(self, product: Product, clusters) -> List[Article]:
        articles: List[Article] = []
        for priority, planned_cluster in enumerate(clusters):
            cluster = await self._store.clusters.add(
                ArticleCluster(
                    product_id=product.id,
                    pillar_keyword=planned_cluster.pillar_topic,
                    priority=priority,
                )
            )
            for planned in planned_cluster.articles:
                article = await self._store.articles.add(
                    Article(
                        product_id=product.id,
                        cluster_id=cluster.id,
                        title=planned.title,
                        target_keyword=planned.target_keyword,
                        priority=planned.priority,
                    )
                )
                articles.append(article)
        return articles

    async def on_failure(self, ctx: StepContext, exc: BaseException) -> None:
        product = await self._store.products.get(str(ctx.payload.get("productId") or ""))
        if product is None or product.status == ProductStatus.COMPLETED:
            return
        product.transition(ProductStatus.FAILED)
        await self._store.products.update(product)
        logger.error(f"❌ Analysis of product {product.id} failed: {exc}")
