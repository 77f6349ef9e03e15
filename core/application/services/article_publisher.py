"""
Publishing Manager.

Publishes one article to one site. When the article has a featured image
it is uploaded first, and post creation never happens if that upload
fails.

Error mapping:
    media upload failure            -> UPLOAD_ERROR
    WordPressAPIError with HTTP 401 -> AUTH_ERROR
    any other WordPressAPIError     -> API_ERROR
    anything else                   -> UNKNOWN
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from blogforge_sdk.wordpress import WordPressAPIError, WordPressClient
from core.domain.entities import Article
from core.domain.enums import ErrorCode
from core.domain.value_objects import Err, Ok, Result


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedPost:
    post_id: int
    post_url: Optional[str] = None


def classify_error(exc: BaseException) -> Err:
    if isinstance(exc, WordPressAPIError):
        code = ErrorCode.AUTH_ERROR if exc.status_code == 401 else ErrorCode.API_ERROR
        return Err.of(code, str(exc))
    return Err.of(ErrorCode.UNKNOWN, str(exc) or type(exc).__name__)


class ArticlePublisher:
    """Create, update or delete the WordPress post for an article."""

    def __init__(self, client: WordPressClient, post_status: str = "publish"):
        self._client = client
        self._post_status = post_status

    async def _upload_featured_image(self, article: Article) -> Result[Optional[int]]:
        image = article.featured_image
        if image is None:
            return Ok(None)
        try:
            media = await self._client.upload_media(image.data, image.filename, image.mime_type)
        except Exception as e:
            logger.error(f"Featured image upload failed for article {article.id}: {e}")
            return Err.of(ErrorCode.UPLOAD_ERROR, f"Failed to upload featured image: {e}")

        media_id = media.get("id") if isinstance(media, dict) else None
        if not media_id:
            return Err.of(ErrorCode.UPLOAD_ERROR, "Media upload returned no id")
        return Ok(int(media_id))

    def _post_body(self, article: Article, media_id: Optional[int]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "title": article.title,
            "content": article.content or "",
            "status": self._post_status,
        }
        if media_id is not None:
            body["featured_media"] = media_id
        return body

    async def publish(self, article: Article) -> Result[PublishedPost]:
        uploaded = await self._upload_featured_image(article)
        if isinstance(uploaded, Err):
            return uploaded

        try:
            post = await self._client.create_post(self._post_body(article, uploaded.data))
        except Exception as e:
            logger.error(f"Publishing article {article.id} failed: {e}")
            return classify_error(e)

        logger.info(f"✅ Article {article.id} published as post {post.get('id')}")
        return Ok(PublishedPost(post_id=int(post["id"]), post_url=post.get("link")))

    async def update(self, post_id: int, article: Article) -> Result[PublishedPost]:
        uploaded = await self._upload_featured_image(article)
        if isinstance(uploaded, Err):
            return uploaded

        try:
            post = await self._client.update_post(post_id, self._post_body(article, uploaded.data))
        except Exception as e:
            logger.error(f"Updating post {post_id} for article {article.id} failed: {e}")
            return classify_error(e)

        return Ok(PublishedPost(post_id=int(post.get("id", post_id)), post_url=post.get("link")))

    async def delete(self, post_id: int) -> Result[PublishedPost]:
        try:
            await self._client.delete_post(post_id)
        except Exception as e:
            logger.error(f"Deleting post {post_id} failed: {e}")
            return classify_error(e)

        return Ok(PublishedPost(post_id=post_id))
