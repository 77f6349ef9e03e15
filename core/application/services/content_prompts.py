"""
Prompt templates for product analysis and article generation.

Every prompt asks for a single JSON object so results can be parsed
without free-text heuristics.
"""
import json
import re
from typing import Any, Dict, Optional

from core.domain.entities import Article, Product


ANALYST_SYSTEM = (
    "You are a content marketing strategist. Answer with one JSON object only, "
    "without commentary or markdown fences."
)

WRITER_SYSTEM = (
    "You are an SEO copywriter writing long-form blog articles in HTML. "
    "Answer with one JSON object only, without commentary or markdown fences."
)

FACT_CHECK_SYSTEM = (
    "You are a content reviewer checking for factual accuracy issues. "
    "Answer with one JSON object only, without commentary or markdown fences."
)


def _product_brief(product: Product) -> str:
    lines = [f"Product name: {product.name}"]
    if product.url:
        lines.append(f"Product URL: {product.url}")
    if product.description:
        lines.append(f"Description: {product.description}")
    lines.append(f"Input mode: {product.mode.value}")
    return "\n".join(lines)


def summary_prompt(product: Product) -> str:
    return (
        f"{_product_brief(product)}\n\n"
        "Summarise the product. Return JSON: "
        '{"summary": str, "target_audience": str, "value_proposition": str, '
        '"key_features": [str]}'
    )


def funnel_prompt(product: Product, summary: Dict[str, Any]) -> str:
    return (
        f"{_product_brief(product)}\nAnalysis so far: {json.dumps(summary)}\n\n"
        "Describe the purchase funnel. Return JSON: "
        '{"awareness": [str], "consideration": [str], "decision": [str]}'
    )


def keywords_prompt(product: Product, summary: Dict[str, Any]) -> str:
    return (
        f"{_product_brief(product)}\nAnalysis so far: {json.dumps(summary)}\n\n"
        "Propose search keywords. Return JSON: "
        '{"keywords": [{"keyword": str, "intent": str, "difficulty": "low"|"medium"|"high"}]}'
    )


def competitors_prompt(product: Product, summary: Dict[str, Any]) -> str:
    return (
        f"{_product_brief(product)}\nAnalysis so far: {json.dumps(summary)}\n\n"
        "List likely competitors and content gaps. Return JSON: "
        '{"competitors": [{"name": str, "strengths": [str]}], "content_gaps": [str]}'
    )


def clusters_prompt(product: Product, analysis: Dict[str, Any]) -> str:
    return (
        f"{_product_brief(product)}\nResearch: {json.dumps(analysis)}\n\n"
        "Plan topic clusters for a blog. Return JSON: "
        '{"clusters": [{"pillar_topic": str, "articles": '
        '[{"title": str, "target_keyword": str, "priority": int}]}]}'
    )


def article_prompt(article: Article, product: Optional[Product]) -> str:
    brief = _product_brief(product) if product else ""
    return (
        f"{brief}\n\nWrite an article titled \"{article.title}\" targeting the keyword "
        f"\"{article.target_keyword}\".\n"
        "Return JSON: "
        '{"title": str, "content": str (HTML), "meta_description": str (max 160 chars), '
        '"search_intent": "informational"|"commercial"|"transactional"|"navigational"}'
    )


def fact_check_prompt(content: str, max_chars: int = 4000) -> str:
    return (
        "Analyze this article content for obvious factual issues, outdated information, "
        f"or suspicious claims.\n\nContent:\n{content[:max_chars]}\n\n"
        "Return JSON: "
        '{"issues": [str], "risk_level": "low"|"medium"|"high"}'
    )


_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def extract_json(text: str) -> Dict[str, Any]:
    """Parse the JSON object in a model response.

    Raises:
        ValueError: no JSON object could be parsed
    """
    cleaned = _FENCE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("Response contains no JSON object")
        data = json.loads(cleaned[start:end + 1])
    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data
