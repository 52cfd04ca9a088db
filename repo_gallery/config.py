"""Application configuration with Pydantic Settings.

Settings are loaded from environment variables and .env files once, at
process start. Everything below the entry points receives an explicit
StoreConfig instead of reading the environment itself.

Examples:
    >>> from repo_gallery.config import get_settings
    >>> settings = get_settings()
    >>> config = settings.store_config()
    >>> config.repo
    'octocat/photos'

Tests:
    - tests/unit/test_config.py
"""

import re
from enum import Enum
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from repo_gallery.errors import ConfigurationError

REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class BackendType(str, Enum):
    """Supported blob store backends."""

    GITHUB = "github"
    MEMORY = "memory"


class StoreConfig(BaseModel):
    """Immutable store identity handed to the adapter and the orchestrators.

    Attributes:
        token: Bearer credential for the storage API.
        repo: Repository identity, ``owner/name``.
        branch: Branch all reads and writes target.
        api_base: Storage API root URL.
        web_host: Host used in public image URLs.
        catalog_path: Path of the catalog document.
        images_dir: Folder holding the image blobs.
        timeout: Request timeout in seconds.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    repo: str
    branch: str = "main"
    api_base: str = "https://api.github.com"
    web_host: str = "github.com"
    catalog_path: str = "metadata.json"
    images_dir: str = "images"
    timeout: float = 30.0


class Settings(BaseSettings):
    """Application settings.

    GITHUB_TOKEN and GITHUB_REPO are required for any store operation, but
    their absence does not fail settings construction: the HTTP API reports
    a missing configuration as a blocking state instead of refusing to start.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Store identity
    GITHUB_TOKEN: str | None = Field(
        default=None,
        description="GitHub token with contents read/write scope",
    )
    GITHUB_REPO: str | None = Field(
        default=None,
        description="Repository identity (owner/name)",
    )
    GITHUB_BRANCH: str = Field(default="main", description="Target branch")
    GITHUB_API_BASE: str = Field(
        default="https://api.github.com",
        description="GitHub REST API root",
    )
    GITHUB_WEB_HOST: str = Field(
        default="github.com",
        description="Host used when deriving public image URLs",
    )

    # Layout
    CATALOG_PATH: str = Field(default="metadata.json", description="Catalog document path")
    IMAGES_DIR: str = Field(
        default="images",
        description="Folder for image blobs; also the folder segment of public URLs",
    )

    # Synchronization
    CATALOG_MAX_RETRIES: int = Field(
        default=0,
        description="Re-fetch/re-apply attempts after a catalog conflict (0 disables)",
        ge=0,
        le=5,
    )
    CATALOG_ABORT_ON_CORRUPT: bool = Field(
        default=False,
        description="Refuse to overwrite a catalog that fails to decode",
    )

    # Transport
    REQUEST_TIMEOUT: float = Field(default=30.0, description="Request timeout in seconds", gt=0)
    GALLERY_BACKEND: BackendType = Field(
        default=BackendType.GITHUB,
        description="Blob store backend",
    )

    DEBUG: bool = Field(default=False, description="Enable debug mode")

    @field_validator("GITHUB_REPO")
    @classmethod
    def validate_repo(cls, v: str | None) -> str | None:
        """Validate repository identity format."""
        if v is None or v == "":
            return None
        v = v.strip().strip("/")
        if not REPO_PATTERN.match(v):
            raise ValueError("GITHUB_REPO must look like 'owner/name'")
        return v

    @field_validator("IMAGES_DIR", "CATALOG_PATH")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Store paths without leading or trailing slashes."""
        return v.strip("/")

    @property
    def is_configured(self) -> bool:
        """Check whether token and repository are both present."""
        return bool(self.GITHUB_TOKEN) and bool(self.GITHUB_REPO)

    def missing_variables(self) -> list[str]:
        """Names of required variables that are unset."""
        missing = []
        if not self.GITHUB_TOKEN:
            missing.append("GITHUB_TOKEN")
        if not self.GITHUB_REPO:
            missing.append("GITHUB_REPO")
        return missing

    def store_config(self) -> StoreConfig:
        """Build the explicit store configuration.

        Returns:
            StoreConfig: Frozen configuration object.

        Raises:
            ConfigurationError: If GITHUB_TOKEN or GITHUB_REPO is missing.
        """
        missing = self.missing_variables()
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {' and '.join(missing)}"
            )
        return StoreConfig(
            token=self.GITHUB_TOKEN,
            repo=self.GITHUB_REPO,
            branch=self.GITHUB_BRANCH,
            api_base=self.GITHUB_API_BASE.rstrip("/"),
            web_host=self.GITHUB_WEB_HOST.strip("/"),
            catalog_path=self.CATALOG_PATH,
            images_dir=self.IMAGES_DIR,
            timeout=self.REQUEST_TIMEOUT,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The application settings.
    """
    return Settings()
