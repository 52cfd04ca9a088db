"""In-process blob store with the same revision-token rules as GitHub.

Revision tokens are git blob hashes of the content, so writing identical
bytes yields an identical token. Each write and delete appends a Commit,
which keeps the audit trail observable in tests and dry runs.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from repo_gallery.errors import ConflictError, NotFoundError, StoreError
from repo_gallery.storage.backends.base import BlobStore, Resource, ResourceInfo


def git_blob_sha(content: bytes) -> str:
    """Compute the git object id of a blob."""
    header = f"blob {len(content)}\0".encode("ascii")
    return hashlib.sha1(header + content).hexdigest()


@dataclass(frozen=True)
class Commit:
    """One audit record."""

    action: str
    path: str
    message: str
    sha: str | None


class MemoryBlobStore(BlobStore):
    """Dictionary-backed store.

    Attributes:
        commits: Audit trail, oldest first.
        fetch_count: Number of fetch_resource calls served.
        write_count: Number of write_resource calls that succeeded.
    """

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}
        self.commits: list[Commit] = []
        self.fetch_count = 0
        self.write_count = 0

    def seed(self, path: str, content: bytes) -> str:
        """Place a file without recording a commit; returns its token."""
        self._files[path.strip("/")] = content
        return git_blob_sha(content)

    def read(self, path: str) -> bytes | None:
        """Raw content of a file, or None."""
        return self._files.get(path.strip("/"))

    def paths(self) -> list[str]:
        return sorted(self._files)

    async def fetch_resource(self, path: str) -> Resource | None:
        self.fetch_count += 1
        key = path.strip("/")
        content = self._files.get(key)
        if content is None:
            return None
        return Resource(path=key, content=content, sha=git_blob_sha(content))

    async def write_resource(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: str | None = None,
    ) -> str:
        key = path.strip("/")
        current = self._files.get(key)
        if current is None:
            if sha:
                raise NotFoundError(f"{key} does not exist")
        else:
            if not sha:
                raise StoreError(
                    f'Invalid request. "sha" wasn\'t supplied for {key}',
                    status_code=422,
                )
            if sha != git_blob_sha(current):
                raise ConflictError(f"{key} does not match {sha}")

        self._files[key] = content
        new_sha = git_blob_sha(content)
        self.write_count += 1
        self.commits.append(Commit(action="write", path=key, message=message, sha=new_sha))
        return new_sha

    async def delete_resource(self, path: str, sha: str, message: str) -> None:
        key = path.strip("/")
        current = self._files.get(key)
        if current is None:
            raise NotFoundError(f"{key} does not exist")
        if sha != git_blob_sha(current):
            raise ConflictError(f"{key} does not match {sha}")
        del self._files[key]
        self.commits.append(Commit(action="delete", path=key, message=message, sha=None))

    async def list_directory(self, path: str) -> list[ResourceInfo]:
        prefix = path.strip("/") + "/"
        entries = []
        for key in sorted(self._files):
            if not key.startswith(prefix):
                continue
            name = key[len(prefix):]
            if "/" in name:
                continue
            entries.append(
                ResourceInfo(name=name, path=key, sha=git_blob_sha(self._files[key]))
            )
        return entries
