"""
Quick fact check of generated article content.

The check is one extra batch request per article. Its outcome is recorded
in the generation log; it never blocks an article from reaching review.
"""
from dataclasses import dataclass, field
import logging
from typing import List, Optional

from blogforge_sdk.llm import BatchError, BatchRequest, BatchResultItem, make_custom_id
from core.domain.entities import Article
from core.domain.exceptions import RetryableStepError

from . import content_prompts as prompts
from .batch_runner import BatchRunner, Sleep


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactCheckResult:
    risk_level: str
    issues: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.risk_level == "low"


class FactChecker:
    def __init__(self, max_tokens: int = 1024, max_chars: int = 4000):
        self._max_tokens = max_tokens
        self._max_chars = max_chars

    @staticmethod
    def custom_id(article: Article) -> str:
        return make_custom_id("factcheck", article.id)

    def build_request(self, article: Article, content: str) -> BatchRequest:
        return BatchRequest(
            custom_id=self.custom_id(article),
            system=prompts.FACT_CHECK_SYSTEM,
            messages=[{"role": "user", "content": prompts.fact_check_prompt(content, self._max_chars)}],
            max_tokens=self._max_tokens,
        )

    @staticmethod
    def parse(item: BatchResultItem) -> FactCheckResult:
        """
        Raises:
            ValueError: the output is not a JSON object
        """
        data = prompts.extract_json(item.content or "")
        risk = str(data.get("risk_level") or data.get("riskLevel") or "unknown").lower()
        issues = [str(issue) for issue in data.get("issues") or [] if issue]
        return FactCheckResult(risk_level=risk, issues=issues)

    async def check(
        self, runner: BatchRunner, article: Article, content: str, sleep: Sleep
    ) -> Optional[FactCheckResult]:
        """Run the check as its own batch.

        Returns None when the check could not produce a verdict.
        """
        try:
            results = await runner.run(
                [self.build_request(article, content)],
                {self.custom_id(article): article.id},
                sleep,
            )
            item = results[article.id]
            if not item.succeeded:
                logger.warning(f"Fact check for article {article.id} returned {item.type}")
                return None
            result = self.parse(item)
        except (BatchError, RetryableStepError, ValueError) as e:
            logger.warning(f"Fact check for article {article.id} did not run: {e}")
            return None

        if not result.passed:
            logger.warning(
                f"Fact check flagged article {article.id} as {result.risk_level} risk "
                f"({len(result.issues)} issue(s))"
            )
        return result
