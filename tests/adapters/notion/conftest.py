"""Shared fixtures for Notion adapter tests."""

from __future__ import annotations

import pytest

from catalog_resolver.config import NotionConfig, ResilienceConfig, RetryPolicy
from catalog_resolver.config.notion import DEFAULT_NOTION_API_VERSION, DEFAULT_NOTION_BASE_URL

NotionPayload = dict[str, object]
PAGE_ID = "59833787-2cf9-4fdf-8782-e53db20768a5"


@pytest.fixture
def notion_config() -> NotionConfig:
    return NotionConfig(
        api_key="secret-token",
        api_version=DEFAULT_NOTION_API_VERSION,
        resilience=ResilienceConfig(
            name="notion",
            base_url=DEFAULT_NOTION_BASE_URL,
            retry=RetryPolicy(total=0),
            cache=None,
            default_headers={
                "Authorization": "Bearer secret-token",
                "Notion-Version": DEFAULT_NOTION_API_VERSION,
            },
        ),
    )


@pytest.fixture
def page_payload() -> NotionPayload:
    return {
        "object": "page",
        "id": PAGE_ID,
        "url": "https://www.notion.so/Cool-Pack-598337872cf94fdf8782e53db20768a5",
        "last_edited_time": "2024-05-01T10:00:00.000Z",
        "created_by": {"object": "user", "id": "user-1", "name": " Riverbend "},
        "properties": {
            "Tags": {"id": "tags", "type": "multi_select", "multi_select": []},
            "Name": {
                "id": "title",
                "type": "title",
                "title": [
                    {"type": "text", "plain_text": "Cool "},
                    {"type": "text", "plain_text": "Pack"},
                ],
            },
        },
    }
