"""Tests for ArticlePublisher."""

import pytest

from core.application.services import ArticlePublisher, classify_error
from core.domain.entities import Article
from core.domain.enums import ErrorCode
from core.domain.value_objects import Err, FeaturedImage, Ok

from blogforge_sdk.wordpress import WordPressAPIError


def _article(**kwargs) -> Article:
    values = {
        "product_id": "p-1",
        "title": "Standing Desk Benefits",
        "target_keyword": "standing desk benefits",
        "content": "<p>Stand up.</p>",
    }
    values.update(kwargs)
    return Article(**values)


@pytest.mark.asyncio
async def test_publish_creates_post(wp_client):
    result = await ArticlePublisher(wp_client).publish(_article())

    assert isinstance(result, Ok)
    post = wp_client.posts[result.data.post_id]
    assert post == {"title": "Standing Desk Benefits", "content": "<p>Stand up.</p>", "status": "publish"}
    assert result.data.post_url.endswith(f"?p={result.data.post_id}")
    assert wp_client.uploads == []


@pytest.mark.asyncio
async def test_featured_image_is_uploaded_first(wp_client):
    article = _article(featured_image=FeaturedImage(data=b"png-bytes", filename="hero.png"))

    result = await ArticlePublisher(wp_client, post_status="draft").publish(article)

    assert isinstance(result, Ok)
    assert wp_client.uploads == [("hero.png", "image/png", 9)]
    post = wp_client.posts[result.data.post_id]
    assert post["featured_media"] == 456
    assert post["status"] == "draft"


@pytest.mark.asyncio
async def test_upload_failure_means_no_post(wp_client):
    wp_client.fail_with["upload_media"] = WordPressAPIError("HTTP 413: too large", status_code=413)
    article = _article(featured_image=FeaturedImage(data=b"png", filename="hero.png"))

    result = await ArticlePublisher(wp_client).publish(article)

    assert isinstance(result, Err)
    assert result.error.code == ErrorCode.UPLOAD_ERROR
    assert wp_client.posts == {}


@pytest.mark.asyncio
async def test_unauthorized_maps_to_auth_error(wp_client):
    wp_client.fail_with["create_post"] = WordPressAPIError("HTTP 401: nope", status_code=401)

    result = await ArticlePublisher(wp_client).publish(_article())

    assert result.error.code == ErrorCode.AUTH_ERROR


@pytest.mark.asyncio
async def test_update_and_delete(wp_client):
    publisher = ArticlePublisher(wp_client)

    updated = await publisher.update(77, _article(title="New title"))
    deleted = await publisher.delete(77)

    assert updated.data.post_id == 77
    assert wp_client.posts[77]["title"] == "New title"
    assert deleted.data.post_id == 77
    assert wp_client.deleted == [77]


@pytest.mark.asyncio
async def test_delete_failure_is_api_error(wp_client):
    wp_client.fail_with["delete_post"] = WordPressAPIError("HTTP 500", status_code=500)

    result = await ArticlePublisher(wp_client).delete(77)

    assert result.error.code == ErrorCode.API_ERROR


def test_classify_error():
    assert classify_error(WordPressAPIError("x", status_code=401)).error.code == ErrorCode.AUTH_ERROR
    assert classify_error(WordPressAPIError("x", status_code=403)).error.code == ErrorCode.API_ERROR
    assert classify_error(TimeoutError()).error.code == ErrorCode.UNKNOWN
    assert classify_error(TimeoutError()).error.message == "TimeoutError"
