"""Notion live-entity adapter."""

from __future__ import annotations

from .client import NotionAPIError, NotionClient
from .fetcher import NotionEntityFetcher, build_notion_fetcher, translate_page
from .schema import NotionPage

__all__ = [
    "NotionAPIError",
    "NotionClient",
    "NotionEntityFetcher",
    "NotionPage",
    "build_notion_fetcher",
    "translate_page",
]
