"""Blob store backends."""

from repo_gallery.storage.backends.base import BlobStore, Resource, ResourceInfo
from repo_gallery.storage.backends.github import GitHubContentsBackend
from repo_gallery.storage.backends.memory import MemoryBlobStore

__all__ = [
    "BlobStore",
    "GitHubContentsBackend",
    "MemoryBlobStore",
    "Resource",
    "ResourceInfo",
]
