"""
Centralized settings for polycache.

``CacheSettings`` reads ``POLYCACHE_*`` environment variables (and an
optional ``.env`` file) and describes which store to build and with which
default options. ``polycache.factory`` turns a settings object into a
ready ``Cache``.

Examples:
    >>> settings = CacheSettings(store_backend="weighted", default_expiration_seconds=60)
    >>> settings.store_backend
    <StoreBackend.WEIGHTED: 'weighted'>

    Environment driven::

        POLYCACHE_STORE_BACKEND=redis
        POLYCACHE_REDIS_URL=redis://cache:6379/2
        POLYCACHE_DEFAULT_EXPIRATION_SECONDS=300
        POLYCACHE_DEFAULT_TAGS='["api"]'

Tags:
    configuration, settings, pydantic, environment, polycache

Doc-Types:
    api-reference
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(str, Enum):
    """Supported store backends."""

    MEMORY = "memory"
    WEIGHTED = "weighted"
    REDIS = "redis"
    MEMCACHE = "memcache"
    DISK = "disk"


class CacheSettings(BaseSettings):
    """polycache configuration.

    Fields
    ──────
    store_backend               : Which adapter ``create_store`` builds
    default_expiration_seconds  : Store default TTL (0 = no expiry)
    default_cost                : Store default cost weight
    default_tags                : Store default tag list
    redis_url                   : Connection URL for the redis backend
    memcache_server             : ``host:port`` for the memcache backend
    memory_max_size             : Item bound for the memory backend
    weighted_max_cost           : Cost bound for the weighted backend
    disk_directory              : Cache directory for the disk backend
    log_level / log_format      : Applied by ``configure_logging_from_settings``
    """

    model_config = SettingsConfigDict(
        env_prefix="POLYCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Store selection ──────────────────────────────────────────
    store_backend: StoreBackend = Field(default=StoreBackend.MEMORY)

    # ── Default options ──────────────────────────────────────────
    default_expiration_seconds: float = Field(default=0.0)
    default_cost: int = Field(default=0)
    default_tags: list[str] = Field(default_factory=list)

    # ── Backend connections ──────────────────────────────────────
    redis_url: str = Field(default="redis://localhost:6379/0")
    memcache_server: str = Field(default="localhost:11211")
    memory_max_size: int = Field(default=10_000, gt=0)
    weighted_max_cost: int = Field(default=1 << 20, gt=0)
    disk_directory: str = Field(default=".polycache")

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("default_expiration_seconds", "default_cost")
    @classmethod
    def _not_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return value


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, CacheSettings] = {}


def get_settings(*, _force_reload: bool = False) -> CacheSettings:
    """Load, validate, and cache a :class:`CacheSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = CacheSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["StoreBackend", "CacheSettings", "get_settings", "clear_settings_cache"]
