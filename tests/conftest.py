"""
Pytest configuration and fixtures for repo-gallery tests.

All store traffic goes to an in-memory store or an httpx MockTransport;
no test talks to GitHub.
"""
import json
from datetime import datetime, timezone

import pytest

from repo_gallery.config import StoreConfig
from repo_gallery.storage.backends.memory import MemoryBlobStore
from repo_gallery.storage.service import GalleryService

# 2026-02-09T12:30:15.123Z
FIXED_NOW = datetime(2026, 2, 9, 12, 30, 15, 123000, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "fast: Fast unit tests (no external API calls)"
    )


def _make_entry(filename, description="", sha=None):
    entry = {
        "filename": filename,
        "description": description,
        "url": f"https://github.com/octocat/photos/blob/main/images/{filename}?raw=true",
        "timestamp": "2026-01-01T00:00:00.000Z",
    }
    if sha:
        entry["sha"] = sha
    return entry


def _catalog_bytes(*entries):
    return json.dumps({"images": list(entries)}, indent=2).encode("utf-8")


@pytest.fixture
def make_entry():
    """Factory for catalog entries as they appear in the stored JSON."""
    return _make_entry


@pytest.fixture
def catalog_bytes():
    """Factory for encoded catalog documents."""
    return _catalog_bytes


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def store_config():
    return StoreConfig(token="ghp_test", repo="octocat/photos", branch="main")


@pytest.fixture
def memory_store():
    return MemoryBlobStore()


@pytest.fixture
def service(memory_store, store_config):
    return GalleryService(store=memory_store, config=store_config, clock=lambda: FIXED_NOW)
