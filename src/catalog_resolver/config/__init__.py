"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .notion import NotionConfig, get_notion_config
from .policy import get_policy_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "NotionConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_notion_config",
    "get_policy_config",
    "get_storage_config",
    "optional_env_float",
    "optional_env_var",
    "require_env_vars",
]
