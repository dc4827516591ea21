"""Configuration Management."""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from .hash import Algorithm

# Load environment variables from .env file
load_dotenv()


DEFAULT_IMAGE_DOMAINS = [
    "picsum.photos",
    "via.placeholder.com",
    "placehold.co",
    "placeholder.com",
    "cdn.jsdelivr.net",
    "unpkg.com",
    "cdnjs.cloudflare.com",
    "images.unsplash.com",
    "i.imgur.com",
    "gravatar.com",
    "tailwindui.com",
    "tailwindcss.com",
]


class Settings(BaseSettings):
    """Library settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="SWIFTUI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Rendering
    memoization_enabled: bool = Field(
        default=True, description="Global switch for per-instance render memoization"
    )
    maximum_component_depth: int = Field(
        default=50, gt=0, description="Maximum nesting depth of DSL contexts"
    )
    fingerprint_algorithm: Algorithm = Field(
        default=Algorithm.XXHASH64, description="Digest for fingerprints and cache keys"
    )
    reactive_wrapping: bool = Field(
        default=True, description="Wrap stateful components in a reactive container"
    )

    # Fragment caching
    fragment_cache_size: int = Field(default=500, gt=0, description="Fragment cache max entries")
    fragment_cache_ttl: int = Field(default=3600, gt=0, description="Fragment cache TTL (seconds)")
    cache_version: str = Field(default="v1", description="Version mixed into fragment cache keys")

    # Resources
    approved_image_domains: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IMAGE_DOMAINS),
        description="Hosts external image sources may point at",
    )
    image_placeholder: str = Field(
        default="/images/placeholder.png", description="Fallback for rejected image sources"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Upper-case the level name."""
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
