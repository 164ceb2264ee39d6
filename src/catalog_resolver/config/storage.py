"""Cache storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_float, optional_env_var
from .errors import ConfigurationError

APP_DIR_NAME: Final[str] = "catalog-resolver"
URL_CACHE_FILENAME: Final[str] = "url-cache.v1.json"
EVIDENCE_CACHE_FILENAME: Final[str] = "evidence-cache.v1.json"
LIVE_ENTITY_CACHE_FILENAME: Final[str] = "live-entity-cache.v1.json"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
DEFAULT_EVIDENCE_MAX_ENTRIES: Final[int] = 5000
DEFAULT_LIVE_ENTITY_TTL_SECONDS: Final[float] = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class StorageConfig:
    cache_dir: Path
    url_cache_filename: str = URL_CACHE_FILENAME
    evidence_cache_filename: str = EVIDENCE_CACHE_FILENAME
    live_entity_cache_filename: str = LIVE_ENTITY_CACHE_FILENAME
    http_cache_filename: str = HTTP_CACHE_FILENAME
    evidence_max_entries: int = DEFAULT_EVIDENCE_MAX_ENTRIES
    live_entity_ttl_seconds: float = DEFAULT_LIVE_ENTITY_TTL_SECONDS

    def resolve_cache_dir(self) -> Path:
        return self.cache_dir.expanduser().resolve()

    def ensure_cache_dir(self) -> Path:
        cache_dir = self.resolve_cache_dir()
        cache_dir.mkdir(parents=True, exist_ok=True)
        return cache_dir

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_cache_dir() if ensure else self.resolve_cache_dir()
        return base / self.http_cache_filename


def _default_cache_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_CACHE_HOME")
        base_path = Path(base) if base else (Path.home() / ".cache")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var("CATALOG_RESOLVER_CACHE_DIR")
    cache_dir = Path(env_dir) if env_dir else _default_cache_dir()

    ttl = optional_env_float("CATALOG_RESOLVER_LIVE_TTL_SECONDS")
    max_entries = optional_env_float("CATALOG_RESOLVER_EVIDENCE_MAX_ENTRIES")
    if ttl is not None and ttl <= 0:
        raise ConfigurationError("CATALOG_RESOLVER_LIVE_TTL_SECONDS must be positive")
    if max_entries is not None and max_entries < 1:
        raise ConfigurationError("CATALOG_RESOLVER_EVIDENCE_MAX_ENTRIES must be at least 1")

    return StorageConfig(
        cache_dir=cache_dir,
        evidence_max_entries=(
            int(max_entries) if max_entries is not None else DEFAULT_EVIDENCE_MAX_ENTRIES
        ),
        live_entity_ttl_seconds=ttl if ttl is not None else DEFAULT_LIVE_ENTITY_TTL_SECONDS,
    )
