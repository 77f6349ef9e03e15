"""Content aggregates - products, keyword clusters and articles."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..enums import AnalysisMode, ArticleStatus, ProductStatus
from ..value_objects import FeaturedImage, new_id
from .job import utc_now


@dataclass
class Product:
    user_id: str
    site_id: str
    name: str
    id: str = field(default_factory=new_id)
    description: Optional[str] = None
    url: Optional[str] = None
    mode: AnalysisMode = AnalysisMode.URL
    status: ProductStatus = ProductStatus.PENDING
    analysis_result: Optional[Dict[str, Any]] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def transition(self, status: ProductStatus) -> None:
        self.status = status
        self.updated_at = utc_now()


@dataclass
class ArticleCluster:
    """Pillar topic grouping planned articles for one product."""

    product_id: str
    pillar_keyword: str
    id: str = field(default_factory=new_id)
    priority: int = 0
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Article:
    """
    Content entity.

    draft -> generating -> review | failed -> published -> archived.
    ``batch_id`` holds the in-flight generation batch so a redelivered
    step resumes it instead of submitting again.
    """

    product_id: str
    title: str
    target_keyword: str
    id: str = field(default_factory=new_id)
    cluster_id: Optional[str] = None
    search_intent: Optional[str] = None
    article_type: str = "article"
    priority: int = 0
    content: Optional[str] = None
    meta_description: Optional[str] = None
    status: ArticleStatus = ArticleStatus.DRAFT
    batch_id: Optional[str] = None
    wp_post_id: Optional[int] = None
    published_at: Optional[datetime] = None
    featured_image: Optional[FeaturedImage] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def transition(self, status: ArticleStatus) -> None:
        self.status = status
        self.updated_at = utc_now()

    def apply_generated_content(
        self,
        title: str,
        content: str,
        meta_description: Optional[str],
        search_intent: Optional[str],
    ) -> None:
        self.title = title or self.title
        self.content = content
        self.meta_description = meta_description
        if search_intent:
            self.search_intent = search_intent
        self.batch_id = None
        self.transition(ArticleStatus.REVIEW)

    def mark_published(self, wp_post_id: int) -> None:
        self.wp_post_id = wp_post_id
        self.published_at = utc_now()
        self.transition(ArticleStatus.PUBLISHED)

    def mark_archived(self) -> None:
        self.wp_post_id = None
        self.transition(ArticleStatus.ARCHIVED)


@dataclass
class ArticleGenerationLog:
    """One generation run: model, token usage, timing and the fact-check outcome."""

    article_id: str
    model: str
    id: str = field(default_factory=new_id)
    batch_id: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    generation_time_ms: int = 0
    # None when the fact check did not produce a verdict
    fact_check_passed: Optional[bool] = None
    fact_check_issues: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
