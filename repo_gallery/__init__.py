"""repo-gallery: an image gallery persisted in a GitHub repository."""

__version__ = "1.0.0"
