"""Catalog and blob storage for repo-gallery.

Examples:
    >>> from repo_gallery.storage import GalleryService
    >>> service = GalleryService.from_settings(settings)
    >>> result = await service.upload(data, "photo.png", "Sunset")
"""

from repo_gallery.storage.catalog import (
    Catalog,
    ImageEntry,
    decode_catalog,
    encode_catalog,
    prepend_entry,
    remove_by_filename,
)
from repo_gallery.storage.naming import build_image_url, generate_filename, sanitize_filename
from repo_gallery.storage.service import GalleryService
from repo_gallery.storage.synchronizer import CatalogSnapshot, CatalogSynchronizer, SyncResult

__all__ = [
    "Catalog",
    "CatalogSnapshot",
    "CatalogSynchronizer",
    "GalleryService",
    "ImageEntry",
    "SyncResult",
    "build_image_url",
    "decode_catalog",
    "encode_catalog",
    "generate_filename",
    "prepend_entry",
    "remove_by_filename",
    "sanitize_filename",
]
