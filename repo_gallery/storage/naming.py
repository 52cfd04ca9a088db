"""Filename minting, blob paths and public URLs.

Format: {epoch_millis}_{sanitized_name}

Examples:
    >>> from repo_gallery.storage.naming import sanitize_filename, generate_filename
    >>> sanitize_filename("My Photo (1).png")
    'My_Photo__1_.png'
    >>> generate_filename("My Photo (1).png", now=datetime(2026, 2, 9, tzinfo=timezone.utc))
    '1770595200000_My_Photo__1_.png'
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from repo_gallery.config import StoreConfig

UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]")


def sanitize_filename(name: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with an underscore.

    One underscore per character; runs are not collapsed and nothing is
    truncated, so the sanitized name keeps the original length.

    Args:
        name: Original file name as supplied by the user.

    Returns:
        Sanitized name.
    """
    return UNSAFE_CHARS.sub("_", name)


def epoch_millis(now: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return int(now.timestamp() * 1000)


def iso_timestamp(now: datetime) -> str:
    """ISO-8601 UTC instant with millisecond precision and a Z suffix."""
    utc = now.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_filename(original_name: str, now: datetime | None = None) -> str:
    """Mint a catalog filename.

    Args:
        original_name: Original file name.
        now: Override instant (defaults to now UTC).

    Returns:
        ``<epoch_millis>_<sanitized_name>``
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return f"{epoch_millis(now)}_{sanitize_filename(original_name)}"


def is_plain_filename(filename: str) -> bool:
    """True when ``filename`` names one file directly inside the images folder.

    Rejects empty names, ``.``/``..`` and anything carrying a path separator,
    so a caller-supplied name can never address the catalog or another folder.
    """
    if filename in ("", ".", ".."):
        return False
    return "/" not in filename and "\\" not in filename


def blob_path(config: StoreConfig, filename: str) -> str:
    """Repository path of an image blob."""
    return f"{config.images_dir}/{filename}"


def build_image_url(config: StoreConfig, filename: str) -> str:
    """Public URL of an image blob.

    Stored catalog entries keep this URL, so the template must not change.
    The folder segment is ``config.images_dir``: it is part of the URL, and
    changing IMAGES_DIR after uploads leaves older entries pointing at the
    previous folder. The default ``images`` yields the canonical template.
    """
    return (
        f"https://{config.web_host}/{config.repo}/blob/{config.branch}"
        f"/{config.images_dir}/{filename}?raw=true"
    )
