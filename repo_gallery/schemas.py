"""Result values returned to callers of the gallery service."""

from __future__ import annotations

from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    """Outcome of an upload."""

    success: bool
    url: str | None = None
    filename: str | None = None
    error: str | None = None


class DeleteResult(BaseModel):
    """Outcome of a delete."""

    success: bool
    error: str | None = None


class ValidationResult(BaseModel):
    """Outcome of client-side file validation."""

    valid: bool
    error: str | None = None


class ReconcileReport(BaseModel):
    """Blobs and catalog entries that have drifted apart.

    Attributes:
        orphaned_blobs: Blob filenames present in the store but not in the catalog.
        dangling_entries: Catalog filenames whose blob no longer exists.
    """

    orphaned_blobs: list[str] = Field(default_factory=list)
    dangling_entries: list[str] = Field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.orphaned_blobs and not self.dangling_entries
