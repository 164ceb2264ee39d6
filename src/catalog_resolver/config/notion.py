"""Notion page API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_NOTION_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_API_VERSION = "2022-06-28"


@dataclass(frozen=True, slots=True)
class NotionConfig:
    api_key: str
    api_version: str
    resilience: ResilienceConfig


def get_notion_config(*, timeout_seconds: float = 10.0) -> NotionConfig:
    values = require_env_vars(("NOTION_API_KEY",))
    api_key = values["NOTION_API_KEY"]
    api_version = optional_env_var("NOTION_API_VERSION") or DEFAULT_NOTION_API_VERSION

    resilience = ResilienceConfig(
        name="notion",
        base_url=DEFAULT_NOTION_BASE_URL,
        timeout_seconds=timeout_seconds,
        # Notion documents an average of three requests per second per integration.
        ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(backend="memory"),
        default_headers={
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": api_version,
            "Accept": "application/json",
        },
    )

    return NotionConfig(api_key=api_key, api_version=api_version, resilience=resilience)
