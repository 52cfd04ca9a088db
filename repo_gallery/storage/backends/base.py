"""Abstract base class for blob store backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel


class Resource(BaseModel):
    """A stored resource and the revision token it currently carries.

    ``truncated`` is set when the store returned the token but withheld the
    content (GitHub does this above 1 MB); ``content`` is then empty.
    """

    path: str
    content: bytes
    sha: str
    truncated: bool = False


class ResourceInfo(BaseModel):
    """Directory listing entry."""

    name: str
    path: str
    sha: str


class BlobStore(ABC):
    """Abstract store for named resources with optimistic concurrency.

    Every write and delete is guarded by the revision token (``sha``) the
    store assigned on the previous write, and produces one commit carrying
    the supplied message.
    """

    @abstractmethod
    async def fetch_resource(self, path: str) -> Resource | None:
        """Fetch the current content and revision token of a resource.

        Args:
            path: Resource path inside the repository.

        Returns:
            The resource, or None if it does not exist.

        Raises:
            StoreError: For every failure other than not-found.
        """

    @abstractmethod
    async def write_resource(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: str | None = None,
    ) -> str:
        """Create or update a resource.

        Args:
            path: Resource path.
            content: Raw bytes to store.
            message: Commit message.
            sha: Current revision token; omit to create.

        Returns:
            The new revision token.

        Raises:
            ConflictError: If ``sha`` is stale.
        """

    @abstractmethod
    async def delete_resource(self, path: str, sha: str, message: str) -> None:
        """Delete a resource.

        Args:
            path: Resource path.
            sha: Current revision token.
            message: Commit message.

        Raises:
            ConflictError: If ``sha`` is stale.
            NotFoundError: If the resource is already absent.
        """

    @abstractmethod
    async def list_directory(self, path: str) -> list[ResourceInfo]:
        """List the files directly inside a folder.

        Args:
            path: Folder path.

        Returns:
            Listing entries; empty if the folder does not exist.
        """

    async def close(self) -> None:
        """Release any network resources."""
