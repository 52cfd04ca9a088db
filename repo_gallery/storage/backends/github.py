"""GitHub Contents API backend.

Reads, writes and deletes single files of a repository branch through
``/repos/{repo}/contents/{path}``. Content travels base64-encoded and every
write or delete is a commit.

GitHub API docs: https://docs.github.com/rest/repos/contents

Examples:
    >>> from repo_gallery.storage.backends.github import GitHubContentsBackend
    >>> backend = GitHubContentsBackend(config)
    >>> resource = await backend.fetch_resource("metadata.json")
    >>> new_sha = await backend.write_resource(
    ...     "metadata.json", b'{"images": []}', "Add image: x.png", sha=resource.sha
    ... )

Tests:
    - tests/unit/test_storage/test_github_backend.py
"""

from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any
from urllib.parse import quote

import httpx

from repo_gallery import __version__
from repo_gallery.config import StoreConfig
from repo_gallery.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
)
from repo_gallery.storage.backends.base import BlobStore, Resource, ResourceInfo

logger = logging.getLogger(__name__)


class GitHubContentsBackend(BlobStore):
    """Blob store backed by one branch of a GitHub repository.

    Attributes:
        config: Store identity and transport settings.
    """

    def __init__(
        self,
        config: StoreConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            config: Store configuration.
            transport: Optional httpx transport (tests inject a MockTransport).
        """
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get httpx async client (lazy initialization)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_base,
                timeout=self.config.timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.config.token}",
                    "Accept": "application/vnd.github.v3+json",
                    "Content-Type": "application/json",
                    "User-Agent": f"repo-gallery/{__version__}",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.config.repo}/contents/{quote(path.strip('/'), safe='/')}"

    def _handle_error(self, response: httpx.Response) -> None:
        """Convert HTTP errors to store errors.

        Args:
            response: The HTTP response.

        Raises:
            AuthenticationError: For 401 errors.
            PermissionDeniedError: For 403 errors.
            NotFoundError: For 404 errors.
            ConflictError: For 409 errors.
            StoreError: For other errors.
        """
        try:
            message = response.json().get("message") or response.text
        except (ValueError, AttributeError):
            message = response.text or response.reason_phrase

        if response.status_code == 401:
            raise AuthenticationError(message)
        elif response.status_code == 403:
            raise PermissionDeniedError(message)
        elif response.status_code == 404:
            raise NotFoundError(message)
        elif response.status_code == 409:
            raise ConflictError(message)
        raise StoreError(message, status_code=response.status_code)

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, self._contents_url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[GITHUB] {method} {path} failed: {e!r}")
            raise StoreError(str(e) or type(e).__name__) from e

        if response.status_code >= 400:
            logger.debug(f"[GITHUB] {method} {path} -> {response.status_code}")
            self._handle_error(response)
        return response

    def _fresh_params(self) -> dict[str, str]:
        # Unique query string: every read must reach the store.
        return {"ref": self.config.branch, "t": str(int(time.time() * 1000))}

    async def fetch_resource(self, path: str) -> Resource | None:
        """Fetch a file, bypassing caches. Returns None on 404."""
        try:
            response = await self._send(
                "GET",
                path,
                params=self._fresh_params(),
                headers={"Cache-Control": "no-cache"},
            )
        except NotFoundError:
            return None

        data = response.json()
        if not isinstance(data, dict) or "sha" not in data:
            raise StoreError(f"Expected a file at {path}, got a directory listing")

        if data.get("encoding") == "none":
            logger.debug(f"[GITHUB] {path} is too large for inline content")
            return Resource(path=data.get("path", path), content=b"", sha=data["sha"], truncated=True)

        try:
            content = base64.b64decode(data.get("content") or "")
        except (binascii.Error, ValueError) as e:
            raise StoreError(f"Undecodable content for {path}: {e}") from e

        return Resource(path=data.get("path", path), content=content, sha=data["sha"])

    async def write_resource(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: str | None = None,
    ) -> str:
        """Create or update a file with one commit."""
        payload: dict[str, str] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.config.branch,
        }
        if sha:
            payload["sha"] = sha

        response = await self._send("PUT", path, json=payload)
        new_sha = response.json()["content"]["sha"]
        logger.info(f"[GITHUB] Wrote {path} ({len(content)} bytes) -> {new_sha[:7]}")
        return new_sha

    async def delete_resource(self, path: str, sha: str, message: str) -> None:
        """Delete a file with one commit."""
        await self._send(
            "DELETE",
            path,
            json={"message": message, "sha": sha, "branch": self.config.branch},
        )
        logger.info(f"[GITHUB] Deleted {path}")

    async def list_directory(self, path: str) -> list[ResourceInfo]:
        """List files in a folder; an absent folder is empty."""
        try:
            response = await self._send(
                "GET",
                path,
                params=self._fresh_params(),
                headers={"Cache-Control": "no-cache"},
            )
        except NotFoundError:
            return []

        data = response.json()
        if not isinstance(data, list):
            raise StoreError(f"Expected a directory at {path}, got a file")
        return [
            ResourceInfo(name=item["name"], path=item["path"], sha=item["sha"])
            for item in data
            if item.get("type") == "file"
        ]
