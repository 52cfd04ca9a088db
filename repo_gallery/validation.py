"""Pre-upload file checks."""

from __future__ import annotations

from repo_gallery.schemas import ValidationResult

ALLOWED_TYPES = ("image/jpeg", "image/png", "image/gif")
MAX_SIZE_BYTES = 10 * 1024 * 1024  # 10MB


def validate_image_file(
    data: bytes,
    declared_type: str | None,
    size: int | None = None,
) -> ValidationResult:
    """Check an image's declared type and size.

    Args:
        data: File content.
        declared_type: MIME type reported by the client.
        size: Declared size; defaults to ``len(data)``.

    Returns:
        ValidationResult, with an error message when invalid.
    """
    if declared_type not in ALLOWED_TYPES:
        return ValidationResult(
            valid=False,
            error="Invalid file type. Please upload a JPG, PNG, or GIF image.",
        )

    if size is None:
        size = len(data)
    if size > MAX_SIZE_BYTES:
        return ValidationResult(
            valid=False,
            error="File size exceeds 10MB limit. Please choose a smaller image.",
        )

    return ValidationResult(valid=True)
