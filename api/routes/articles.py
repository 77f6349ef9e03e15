"""
Article endpoints.

Generate, publish or unpublish one article.
"""
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from api.dependencies import get_event_bus, get_record_store
from core.domain.enums import PublishAction
from core.domain.repositories import RecordStore
from orchestration.bus import EventPublisher
from orchestration.events import ARTICLE_GENERATE, PUBLISH_SYNC, Event


router = APIRouter()


class ArticleActionRequest(BaseModel):
    action: Literal["generate", "publish", "unpublish"]


@router.post(
    "/{article_id}/actions",
    status_code=status.HTTP_200_OK,
    summary="Run an action on an article",
)
async def article_action(
    article_id: str,
    request: ArticleActionRequest,
    store: RecordStore = Depends(get_record_store),
    bus: EventPublisher = Depends(get_event_bus),
):
    """
    **Actions:**
    - `generate`: write the article with the batch API
    - `publish`: create the WordPress post
    - `unpublish`: delete the WordPress post (article must be published)
    """
    article = await store.articles.get(article_id)
    if article is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Article not found")

    if request.action == "generate":
        await bus.publish(
            Event.create(
                ARTICLE_GENERATE,
                {
                    "articleId": article.id,
                    "productId": article.product_id,
                    "targetKeyword": article.target_keyword,
                    "clusterId": article.cluster_id,
                },
            )
        )
        return {"success": True, "status": "generating"}

    product = await store.products.get(article.product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    if request.action == "publish":
        action, label = PublishAction.CREATE, "publishing"
    else:
        if article.wp_post_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Article is not published"
            )
        action, label = PublishAction.DELETE, "unpublishing"

    await bus.publish(
        Event.create(
            PUBLISH_SYNC,
            {"articleId": article.id, "siteId": product.site_id, "action": action.value},
        )
    )
    return {"success": True, "status": label}
