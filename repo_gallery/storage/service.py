"""Gallery service: upload and delete orchestrators over the blob store.

Each operation sequences one blob operation and one catalog
synchronization. Failures never escape: they are logged and returned as
``success=False`` results carrying a user-facing message.

Partial failures are left in place:
    - upload: blob written, catalog write failed -> orphaned blob
    - delete: blob deleted, catalog write failed -> dangling entry
Neither is undone; reconcile() reports both kinds of drift.

Examples:
    >>> service = GalleryService.from_settings(get_settings())
    >>> result = await service.upload(data, "photo.png", "Sunset")
    >>> result.url
    'https://github.com/octocat/photos/blob/main/images/1770595200000_photo.png?raw=true'
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from repo_gallery.config import BackendType, Settings, StoreConfig
from repo_gallery.errors import describe_error
from repo_gallery.schemas import DeleteResult, ReconcileReport, UploadResult
from repo_gallery.storage.backends.base import BlobStore
from repo_gallery.storage.backends.github import GitHubContentsBackend
from repo_gallery.storage.backends.memory import MemoryBlobStore
from repo_gallery.storage.catalog import (
    Catalog,
    ImageEntry,
    prepend_entry,
    remove_by_filename,
)
from repo_gallery.storage.naming import (
    blob_path,
    build_image_url,
    generate_filename,
    is_plain_filename,
    iso_timestamp,
)
from repo_gallery.storage.synchronizer import CatalogSynchronizer

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GalleryService:
    """Orchestrates blob and catalog operations.

    Attributes:
        store: Blob store adapter.
        config: Store configuration.
        synchronizer: Catalog read-modify-write owner.
    """

    def __init__(
        self,
        store: BlobStore,
        config: StoreConfig,
        synchronizer: CatalogSynchronizer | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.config = config
        self.synchronizer = synchronizer or CatalogSynchronizer(store, config.catalog_path)
        self._clock = clock or utc_now

    @classmethod
    def from_settings(cls, settings: Settings) -> "GalleryService":
        """Create a GalleryService from settings.

        Raises:
            ConfigurationError: If the token or repository is missing. No
                network call is made before this check.
        """
        config = settings.store_config()
        if settings.GALLERY_BACKEND == BackendType.MEMORY:
            store: BlobStore = MemoryBlobStore()
        else:
            store = GitHubContentsBackend(config)
        synchronizer = CatalogSynchronizer(
            store,
            config.catalog_path,
            max_retries=settings.CATALOG_MAX_RETRIES,
            abort_on_corrupt=settings.CATALOG_ABORT_ON_CORRUPT,
        )
        return cls(store=store, config=config, synchronizer=synchronizer)

    async def close(self) -> None:
        await self.store.close()

    async def fetch_metadata(self) -> Catalog:
        """Current catalog; absent or corrupt content reads as empty.

        Raises:
            StoreError: If the store cannot be read.
        """
        snapshot = await self.synchronizer.load()
        return snapshot.catalog

    async def upload(self, data: bytes, original_name: str, description: str = "") -> UploadResult:
        """Store an image and index it in the catalog.

        Args:
            data: Raw image bytes.
            original_name: Name of the file as supplied by the user.
            description: Free-text description.

        Returns:
            UploadResult with the public URL, or the failure message.
        """
        now = self._clock()
        filename = generate_filename(original_name, now)
        url = build_image_url(self.config, filename)

        try:
            blob_sha = await self.store.write_resource(
                blob_path(self.config, filename),
                data,
                f"Upload image: {filename}",
            )
            logger.info(f"Uploaded blob {filename} ({len(data)} bytes)")

            entry = ImageEntry(
                filename=filename,
                description=description,
                url=url,
                timestamp=iso_timestamp(now),
                sha=blob_sha,
            )
            await self.synchronizer.apply_mutation(
                lambda catalog: prepend_entry(catalog, entry),
                f"Add image: {filename}",
            )
        except Exception as e:
            logger.error(f"Upload error for {filename}: {e}", exc_info=True)
            return UploadResult(success=False, error=describe_error(e))

        logger.info(f"Indexed {filename}")
        return UploadResult(success=True, url=url, filename=filename)

    async def delete(self, filename: str) -> DeleteResult:
        """Delete an image blob and its catalog entry.

        An already-missing blob or entry is not an error.

        Args:
            filename: Catalog filename of the image.

        Returns:
            DeleteResult; a filename with a path component is refused
            before any store call.
        """
        if not is_plain_filename(filename):
            logger.warning(f"Refusing to delete {filename!r}: not a plain file name")
            return DeleteResult(success=False, error=f"Invalid image filename: {filename}")

        path = blob_path(self.config, filename)
        try:
            blob = await self.store.fetch_resource(path)
            if blob is not None:
                await self.store.delete_resource(path, blob.sha, f"Delete image: {filename}")
                logger.info(f"Deleted blob {filename}")
            else:
                logger.info(f"Blob {filename} already absent")

            await self.synchronizer.apply_mutation(
                lambda catalog: remove_by_filename(catalog, filename),
                f"Remove image: {filename}",
                create_missing=False,
            )
        except Exception as e:
            logger.error(f"Delete error for {filename}: {e}", exc_info=True)
            return DeleteResult(success=False, error=describe_error(e))

        return DeleteResult(success=True)

    async def reconcile(self) -> ReconcileReport:
        """Cross-check blobs against the catalog without changing either.

        Raises:
            StoreError: If the store cannot be read.
        """
        snapshot = await self.synchronizer.load()
        listing = await self.store.list_directory(self.config.images_dir)

        blob_names = {item.name for item in listing}
        indexed = snapshot.catalog.filenames()

        report = ReconcileReport(
            orphaned_blobs=sorted(blob_names - set(indexed)),
            dangling_entries=[name for name in indexed if name not in blob_names],
        )
        if not report.consistent:
            logger.warning(
                f"Reconcile: {len(report.orphaned_blobs)} orphaned blob(s), "
                f"{len(report.dangling_entries)} dangling entries"
            )
        return report
