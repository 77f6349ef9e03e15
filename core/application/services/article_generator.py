"""Article generation through the batch API."""
from dataclasses import dataclass
from typing import Optional

from blogforge_sdk.llm import BatchRequest, BatchResultItem, make_custom_id
from core.domain.entities import Article, Product

from . import content_prompts as prompts


@dataclass(frozen=True)
class GeneratedArticle:
    title: str
    content: str
    meta_description: Optional[str] = None
    search_intent: Optional[str] = None


class ArticleGenerator:
    def __init__(self, max_tokens: int = 8192):
        self._max_tokens = max_tokens

    @staticmethod
    def custom_id(article: Article) -> str:
        return make_custom_id("article", article.id)

    def build_request(self, article: Article, product: Optional[Product]) -> BatchRequest:
        return BatchRequest(
            custom_id=self.custom_id(article),
            system=prompts.WRITER_SYSTEM,
            messages=[{"role": "user", "content": prompts.article_prompt(article, product)}],
            max_tokens=self._max_tokens,
        )

    @staticmethod
    def parse(item: BatchResultItem) -> GeneratedArticle:
        """Turn a succeeded result into article fields.

        Raises:
            ValueError: the output has no content
        """
        data = prompts.extract_json(item.content or "")
        content = str(data.get("content") or "").strip()
        if not content:
            raise ValueError("Generated article has no content")
        meta = data.get("meta_description")
        if meta:
            meta = str(meta)[:160]
        return GeneratedArticle(
            title=str(data.get("title") or "").strip(),
            content=content,
            meta_description=meta or None,
            search_intent=data.get("search_intent") or None,
        )
