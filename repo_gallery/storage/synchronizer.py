"""Read-modify-write cycle for the catalog document.

Each mutation re-fetches the catalog, so the revision token sent with the
write is always the one observed immediately before it. A stale token is
rejected by the store and surfaces as ConflictError; with the default
``max_retries=0`` that rejection is final.

Examples:
    >>> sync = CatalogSynchronizer(store, "metadata.json")
    >>> await sync.apply_mutation(
    ...     lambda catalog: remove_by_filename(catalog, "1_a.png"),
    ...     message="Remove image: 1_a.png",
    ... )

Tests:
    - tests/unit/test_storage/test_synchronizer.py
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from repo_gallery.errors import CatalogCorruptError, ConflictError, StoreError
from repo_gallery.storage.backends.base import BlobStore
from repo_gallery.storage.catalog import (
    Catalog,
    CatalogState,
    decode_catalog,
    encode_catalog,
)

logger = logging.getLogger(__name__)

CatalogMutation = Callable[[Catalog], Catalog]


@dataclass(frozen=True)
class CatalogSnapshot:
    """A decoded catalog and the token it was read at.

    Attributes:
        catalog: Decoded catalog (empty when absent or corrupt).
        sha: Revision token, None when the resource is absent.
        state: Whether the catalog was absent, loaded, or corrupt.
    """

    catalog: Catalog
    sha: str | None
    state: CatalogState


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a successful mutation.

    Attributes:
        catalog: The catalog as written (or as found, when nothing was written).
        sha: Revision token after the write.
        written: False when an absent catalog was left absent.
        attempts: Number of read-modify-write attempts made.
    """

    catalog: Catalog
    sha: str | None
    written: bool
    attempts: int = 1


class CatalogSynchronizer:
    """Owns the catalog read-modify-write cycle.

    Attributes:
        store: Blob store holding the catalog.
        catalog_path: Path of the catalog document.
        max_retries: Extra attempts after a conflict (0 = fail on first conflict).
        abort_on_corrupt: Raise instead of overwriting an undecodable catalog.
    """

    def __init__(
        self,
        store: BlobStore,
        catalog_path: str = "metadata.json",
        max_retries: int = 0,
        abort_on_corrupt: bool = False,
    ) -> None:
        self.store = store
        self.catalog_path = catalog_path
        self.max_retries = max_retries
        self.abort_on_corrupt = abort_on_corrupt

    async def load(self) -> CatalogSnapshot:
        """Fetch and decode the catalog.

        Returns:
            CatalogSnapshot: Never raises on absent or corrupt content.

        Raises:
            StoreError: If the fetch itself fails, or the store withheld the
                content of an oversized catalog.
        """
        resource = await self.store.fetch_resource(self.catalog_path)
        if resource is None:
            return CatalogSnapshot(catalog=Catalog(), sha=None, state=CatalogState.ABSENT)
        if resource.truncated:
            raise StoreError(
                f"Catalog {self.catalog_path} is too large for the store to return; "
                "refusing to read it as empty"
            )

        decoded = decode_catalog(resource.content)
        if decoded.corrupt:
            logger.warning(
                f"Catalog {self.catalog_path} at {resource.sha[:7]} is not valid: {decoded.error}"
            )
            return CatalogSnapshot(
                catalog=decoded.catalog, sha=resource.sha, state=CatalogState.CORRUPT
            )
        return CatalogSnapshot(catalog=decoded.catalog, sha=resource.sha, state=CatalogState.LOADED)

    async def apply_mutation(
        self,
        mutate: CatalogMutation,
        message: str,
        create_missing: bool = True,
    ) -> SyncResult:
        """Apply one pure mutation to the stored catalog.

        Args:
            mutate: Function from the current catalog to the new catalog.
            message: Commit message for the catalog write.
            create_missing: Write even if the catalog does not exist yet.

        Returns:
            SyncResult describing what was written.

        Raises:
            ConflictError: If the catalog changed between fetch and write
                and the retry budget is spent.
            CatalogCorruptError: If the catalog is corrupt and
                ``abort_on_corrupt`` is set.
            StoreError: For any other store failure.
        """
        attempt = 0
        while True:
            attempt += 1
            snapshot = await self.load()

            if snapshot.state is CatalogState.ABSENT and not create_missing:
                logger.info(f"Catalog {self.catalog_path} absent, nothing to update")
                return SyncResult(catalog=snapshot.catalog, sha=None, written=False, attempts=attempt)

            if snapshot.state is CatalogState.CORRUPT:
                if self.abort_on_corrupt:
                    raise CatalogCorruptError(
                        f"Catalog {self.catalog_path} is corrupt; refusing to overwrite it"
                    )
                logger.warning(
                    f"Replacing corrupt catalog {self.catalog_path}; previous entries are lost"
                )

            updated = mutate(snapshot.catalog)
            content = encode_catalog(updated)

            try:
                sha = await self.store.write_resource(
                    self.catalog_path, content, message, sha=snapshot.sha
                )
            except ConflictError:
                if attempt > self.max_retries:
                    logger.warning(
                        f"Catalog {self.catalog_path} changed concurrently "
                        f"(attempt {attempt}), giving up"
                    )
                    raise
                logger.warning(
                    f"Catalog {self.catalog_path} changed concurrently "
                    f"(attempt {attempt}), retrying"
                )
                continue

            return SyncResult(catalog=updated, sha=sha, written=True, attempts=attempt)
