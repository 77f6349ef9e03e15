"""
WordPress REST API client.

Talks to one hosted site's ``/wp-json/wp/v2`` endpoints with Basic auth
built from an application password. Non-2xx responses raise
WordPressAPIError carrying the status code and body; retrying is left to
the caller.
"""
from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class WordPressAPIError(Exception):
    """Non-2xx response from the WordPress REST API."""

    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


@dataclass(frozen=True)
class WordPressCredentials:
    """Site origin plus the application password issued at provisioning."""

    base_url: str
    username: str
    app_password: str

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/wp-json/wp/v2"

    @property
    def auth_header(self) -> str:
        token = base64.b64encode(f"{self.username}:{self.app_password}".encode()).decode()
        return f"Basic {token}"

    def __repr__(self) -> str:
        return f"WordPressCredentials(base_url={self.base_url!r}, username={self.username!r}, app_password=***)"


def sanitize_filename(filename: str) -> str:
    """Make a filename safe to embed in a Content-Disposition header."""
    cleaned = filename.replace('"', "_").replace("\\", "_")
    for char in ("\r", "\n", "\x00"):
        cleaned = cleaned.replace(char, "")
    return cleaned or "upload"


class WordPressClient:
    """Async client for a single WordPress site."""

    def __init__(self, credentials: WordPressCredentials, timeout: int = DEFAULT_TIMEOUT):
        self.credentials = credentials
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Session management -------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": self.credentials.auth_header,
                    "Accept": "application/json",
                    "User-Agent": "BlogForge/1.0",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -- Core HTTP ------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Optional[Dict[str, Any]] = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        session = await self._get_session()
        url = f"{self.credentials.api_url}/{path.lstrip('/')}"

        kwargs: Dict[str, Any] = {}
        if json_data is not None:
            kwargs["json"] = json_data
        if data is not None:
            kwargs["data"] = data
        if headers is not None:
            kwargs["headers"] = headers
        if params is not None:
            kwargs["params"] = {k: str(v) for k, v in params.items() if v is not None}

        logger.debug("API %s %s", method, url)
        async with session.request(method, url, **kwargs) as resp:
            try:
                body = await resp.json(content_type=None)
            except (json.JSONDecodeError, ValueError):
                body = await resp.text()

            if resp.status >= 400:
                message = body.get("message", str(body)) if isinstance(body, dict) else body
                raise WordPressAPIError(
                    f"HTTP {resp.status} from {self.credentials.base_url}: {message}",
                    status_code=resp.status,
                    response_body=body if isinstance(body, str) else json.dumps(body),
                )
            return body

    # -- Posts ----------------------------------------------------------------

    async def create_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        """Create a post; the response carries at least ``id`` and ``link``."""
        result = await self._request("POST", "posts", json_data=post)
        logger.info("Created post id=%s on %s", result.get("id"), self.credentials.base_url)
        return result

    async def update_post(self, post_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"posts/{post_id}", json_data=fields)

    async def delete_post(self, post_id: int, force: bool = False) -> Dict[str, Any]:
        return await self._request(
            "DELETE", f"posts/{post_id}", params={"force": "true" if force else "false"}
        )

    # -- Media ----------------------------------------------------------------

    async def upload_media(self, data: bytes, filename: str, mime_type: str) -> Dict[str, Any]:
        """Upload raw bytes; the response carries ``id`` and ``source_url``."""
        result = await self._request(
            "POST",
            "media",
            data=data,
            headers={
                "Content-Type": mime_type,
                "Content-Disposition": f'attachment; filename="{sanitize_filename(filename)}"',
            },
        )
        logger.info("Uploaded media id=%s (%s)", result.get("id"), mime_type)
        return result

    # -- Health -----------------------------------------------------------------

    async def check_connection(self) -> bool:
        """Return True when the credentials authenticate against /users/me."""
        try:
            await self._request("GET", "users/me")
            return True
        except WordPressAPIError as exc:
            logger.warning("WordPress connection check failed: %s", exc)
            return False
        except aiohttp.ClientError as exc:
            logger.warning("WordPress unreachable: %s", exc)
            return False
