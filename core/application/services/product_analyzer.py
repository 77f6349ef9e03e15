"""
Product Analyzer.

Runs the analysis as three batch rounds so each round can use what the
previous one produced:

    round 1: summary (A)
    round 2: funnel (B), keywords (C), competitors (D)
    round 3: topic clusters with planned articles (E)
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List
import logging

from blogforge_sdk.llm import BatchRequest, BatchResultItem, make_custom_id
from core.domain.entities import Product
from core.domain.exceptions import RetryableStepError

from . import content_prompts as prompts
from .batch_runner import BatchRunner, Sleep


logger = logging.getLogger(__name__)


class ProductAnalysisError(RetryableStepError):
    """A phase returned no usable result."""


@dataclass(frozen=True)
class PlannedArticle:
    title: str
    target_keyword: str
    priority: int = 0


@dataclass(frozen=True)
class PlannedCluster:
    pillar_topic: str
    articles: List[PlannedArticle] = field(default_factory=list)


@dataclass(frozen=True)
class ProductAnalysis:
    result: Dict[str, Any]
    clusters: List[PlannedCluster]

    @property
    def article_count(self) -> int:
        return sum(len(cluster.articles) for cluster in self.clusters)


def parse_clusters(data: Dict[str, Any]) -> List[PlannedCluster]:
    clusters = []
    for raw in data.get("clusters") or []:
        topic = str(raw.get("pillar_topic") or "").strip()
        if not topic:
            continue
        articles = []
        for entry in raw.get("articles") or []:
            title = str(entry.get("title") or "").strip()
            keyword = str(entry.get("target_keyword") or "").strip()
            if not title or not keyword:
                continue
            try:
                priority = int(entry.get("priority") or 0)
            except (TypeError, ValueError):
                priority = 0
            articles.append(PlannedArticle(title=title, target_keyword=keyword, priority=priority))
        clusters.append(PlannedCluster(pillar_topic=topic, articles=articles))
    return clusters


class ProductAnalyzer:
    def __init__(self, runner: BatchRunner):
        self._runner = runner

    def _request(self, product: Product, phase: str, prompt: str) -> BatchRequest:
        return BatchRequest(
            custom_id=make_custom_id(f"analysis-{phase}", product.id),
            system=prompts.ANALYST_SYSTEM,
            messages=[{"role": "user", "content": prompt}],
        )

    async def _round(
        self, product: Product, phases: Dict[str, str], sleep: Sleep
    ) -> Dict[str, Dict[str, Any]]:
        requests = [self._request(product, phase, prompt) for phase, prompt in phases.items()]
        index = {request.custom_id: phase for request, phase in zip(requests, phases)}
        results = await self._runner.run(requests, index, sleep)
        return {phase: self._parse(product, phase, item) for phase, item in results.items()}

    @staticmethod
    def _parse(product: Product, phase: str, item: BatchResultItem) -> Dict[str, Any]:
        if not item.succeeded:
            reason = item.error.message if item.error else item.type
            raise ProductAnalysisError(f"Phase {phase} failed for product {product.id}: {reason}")
        try:
            return prompts.extract_json(item.content or "")
        except ValueError as e:
            raise ProductAnalysisError(
                f"Phase {phase} returned unreadable output for product {product.id}: {e}"
            ) from e

    async def analyze(self, product: Product, sleep: Sleep) -> ProductAnalysis:
        logger.info(f"🚀 Analyzing product {product.id} ({product.name})")

        first = await self._round(product, {"summary": prompts.summary_prompt(product)}, sleep)
        summary = first["summary"]

        second = await self._round(
            product,
            {
                "funnel": prompts.funnel_prompt(product, summary),
                "keywords": prompts.keywords_prompt(product, summary),
                "competitors": prompts.competitors_prompt(product, summary),
            },
            sleep,
        )
        result: Dict[str, Any] = {"summary": summary, **second}

        third = await self._round(
            product, {"clusters": prompts.clusters_prompt(product, result)}, sleep
        )
        clusters = parse_clusters(third["clusters"])
        result["clusters"] = third["clusters"].get("clusters", [])

        analysis = ProductAnalysis(result=result, clusters=clusters)
        logger.info(
            f"✅ Product {product.id} analyzed: {len(clusters)} clusters, "
            f"{analysis.article_count} planned articles"
        )
        return analysis
