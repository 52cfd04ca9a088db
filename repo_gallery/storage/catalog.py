"""Catalog schema, pure mutations, and the JSON codec.

The catalog is one JSON document::

    {"images": [{"filename": ..., "description": ..., "url": ...,
                 "timestamp": ..., "sha": ...}]}

Entries are ordered newest first and unique by filename.

Examples:
    >>> from repo_gallery.storage.catalog import Catalog, ImageEntry, prepend_entry
    >>> catalog = prepend_entry(Catalog(), entry)
    >>> content = encode_catalog(catalog)
"""

from __future__ import annotations

import json
import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class ImageEntry(BaseModel):
    """One catalog record.

    Fields written by other tools are kept through a rewrite.
    """

    model_config = ConfigDict(extra="allow")

    filename: str
    description: str = ""
    url: str
    timestamp: str
    sha: str | None = None


class Catalog(BaseModel):
    """The ordered image index."""

    images: list[ImageEntry] = Field(default_factory=list)

    def filenames(self) -> list[str]:
        return [image.filename for image in self.images]

    def get(self, filename: str) -> ImageEntry | None:
        for image in self.images:
            if image.filename == filename:
                return image
        return None

    def __contains__(self, filename: object) -> bool:
        return any(image.filename == filename for image in self.images)

    def __len__(self) -> int:
        return len(self.images)


class CatalogState(str, Enum):
    """How a catalog snapshot was obtained."""

    ABSENT = "absent"
    LOADED = "loaded"
    CORRUPT = "corrupt"


class DecodedCatalog(BaseModel):
    """Decoder output: the catalog plus whether the bytes were usable."""

    catalog: Catalog
    corrupt: bool = False
    error: str | None = None


def prepend_entry(catalog: Catalog, entry: ImageEntry) -> Catalog:
    """Return a new catalog with ``entry`` first.

    An existing entry with the same filename is dropped, keeping filenames
    unique.
    """
    rest = [image for image in catalog.images if image.filename != entry.filename]
    return Catalog(images=[entry, *rest])


def remove_by_filename(catalog: Catalog, filename: str) -> Catalog:
    """Return a new catalog without the entry named ``filename``.

    A missing filename is not an error; the result equals the input.
    """
    return Catalog(images=[image for image in catalog.images if image.filename != filename])


def decode_catalog(content: bytes) -> DecodedCatalog:
    """Decode catalog bytes; never raises.

    Invalid UTF-8, invalid JSON, or a document of the wrong shape all decode
    to an empty catalog flagged as corrupt.
    """
    try:
        data = json.loads(content.decode("utf-8"))
        catalog = Catalog.model_validate(data)
    except (UnicodeDecodeError, ValueError, ValidationError) as e:
        logger.debug(f"Catalog decode failed: {e}")
        return DecodedCatalog(catalog=Catalog(), corrupt=True, error=str(e))
    return DecodedCatalog(catalog=catalog)


def encode_catalog(catalog: Catalog) -> bytes:
    """Encode a catalog as indented UTF-8 JSON; ``sha`` is omitted when unset."""
    data = catalog.model_dump(mode="json", exclude_none=True)
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
