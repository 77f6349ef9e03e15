"""Tests for WordPressClient against a local aiohttp server."""

import base64

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from blogforge_sdk.wordpress import (
    WordPressAPIError,
    WordPressClient,
    WordPressCredentials,
    sanitize_filename,
)

API = "/wp-json/wp/v2"
GOOD_AUTH = "Basic " + base64.b64encode(b"admin:abcd efgh ijkl").decode()


def _authorized(request: web.Request) -> bool:
    return request.headers.get("Authorization") == GOOD_AUTH


def _unauthorized() -> web.Response:
    return web.json_response(
        {"code": "rest_not_logged_in", "message": "You are not currently logged in."}, status=401
    )


async def create_post(request: web.Request) -> web.Response:
    if not _authorized(request):
        return _unauthorized()
    body = await request.json()
    request.app["posts"].append(body)
    return web.json_response({"id": 11, "link": "https://blog.example.app/?p=11", **body}, status=201)


async def update_post(request: web.Request) -> web.Response:
    if request.match_info["post_id"] == "99":
        return web.Response(text="Bad gateway", status=502)
    body = await request.json()
    return web.json_response({"id": int(request.match_info["post_id"]), **body})


async def delete_post(request: web.Request) -> web.Response:
    request.app["deletes"].append(dict(request.query))
    return web.json_response({"id": int(request.match_info["post_id"]), "status": "trash"})


async def upload_media(request: web.Request) -> web.Response:
    data = await request.read()
    request.app["uploads"].append(
        {
            "size": len(data),
            "type": request.headers.get("Content-Type"),
            "disposition": request.headers.get("Content-Disposition"),
        }
    )
    return web.json_response({"id": 456, "source_url": "https://blog.example.app/img.png"}, status=201)


async def users_me(request: web.Request) -> web.Response:
    if not _authorized(request):
        return _unauthorized()
    return web.json_response({"id": 1, "name": "admin"})


@pytest_asyncio.fixture
async def wp_server():
    app = web.Application()
    app["posts"] = []
    app["deletes"] = []
    app["uploads"] = []
    app.router.add_post(f"{API}/posts", create_post)
    app.router.add_put(f"{API}/posts/{{post_id}}", update_post)
    app.router.add_delete(f"{API}/posts/{{post_id}}", delete_post)
    app.router.add_post(f"{API}/media", upload_media)
    app.router.add_get(f"{API}/users/me", users_me)
    server = test_utils.TestServer(app)
    await server.start_server()
    yield server
    await server.close()


def _credentials(server: test_utils.TestServer, password: str = "abcd efgh ijkl") -> WordPressCredentials:
    return WordPressCredentials(
        base_url=str(server.make_url("/")), username="admin", app_password=password
    )


def test_credentials_build_api_url_and_basic_auth():
    creds = WordPressCredentials("https://blog.example.app/", "admin", "abcd efgh ijkl")

    assert creds.api_url == "https://blog.example.app/wp-json/wp/v2"
    assert creds.auth_header == GOOD_AUTH
    assert "abcd" not in repr(creds)


def test_sanitize_filename():
    assert sanitize_filename('evil"name\r\n.png') == "evil_name.png"
    assert sanitize_filename("") == "upload"


@pytest.mark.asyncio
async def test_create_post_sends_json_with_basic_auth(wp_server):
    async with WordPressClient(_credentials(wp_server)) as client:
        post = await client.create_post({"title": "Hello", "content": "<p>Hi</p>", "status": "publish"})

    assert post["id"] == 11
    assert post["link"] == "https://blog.example.app/?p=11"
    assert wp_server.app["posts"] == [{"title": "Hello", "content": "<p>Hi</p>", "status": "publish"}]


@pytest.mark.asyncio
async def test_unauthorized_raises_with_status_code(wp_server):
    async with WordPressClient(_credentials(wp_server, password="wrong")) as client:
        with pytest.raises(WordPressAPIError) as exc_info:
            await client.create_post({"title": "Hello"})

    assert exc_info.value.status_code == 401
    assert "not currently logged in" in str(exc_info.value)
    assert wp_server.app["posts"] == []


@pytest.mark.asyncio
async def test_non_json_error_body_is_kept(wp_server):
    async with WordPressClient(_credentials(wp_server)) as client:
        with pytest.raises(WordPressAPIError) as exc_info:
            await client.update_post(99, {"title": "New"})

    assert exc_info.value.status_code == 502
    assert exc_info.value.response_body == "Bad gateway"


@pytest.mark.asyncio
async def test_upload_media_sends_raw_bytes(wp_server):
    async with WordPressClient(_credentials(wp_server)) as client:
        media = await client.upload_media(b"\x89PNG" + b"0" * 10, 'hero"1.png', "image/png")

    assert media["id"] == 456
    upload = wp_server.app["uploads"][0]
    assert upload["size"] == 14
    assert upload["type"] == "image/png"
    assert upload["disposition"] == 'attachment; filename="hero_1.png"'


@pytest.mark.asyncio
async def test_update_and_delete_post(wp_server):
    async with WordPressClient(_credentials(wp_server)) as client:
        updated = await client.update_post(11, {"title": "New"})
        deleted = await client.delete_post(11)

    assert updated == {"id": 11, "title": "New"}
    assert deleted["status"] == "trash"
    assert wp_server.app["deletes"] == [{"force": "false"}]


@pytest.mark.asyncio
async def test_check_connection(wp_server):
    async with WordPressClient(_credentials(wp_server)) as good:
        assert await good.check_connection() is True
    async with WordPressClient(_credentials(wp_server, password="wrong")) as bad:
        assert await bad.check_connection() is False


@pytest.mark.asyncio
async def test_close_is_safe_without_session():
    client = WordPressClient(WordPressCredentials("https://blog.example.app", "admin", "pw"))

    await client.close()
    await client.close()
