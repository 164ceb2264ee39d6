"""Notion page API client."""

from __future__ import annotations

import asyncio
import re
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from catalog_resolver.adapters.http_resilience import ResilientClient

from .schema import NotionPage

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalog_resolver.config.http_resilience import ResilienceConfig
    from catalog_resolver.config.notion import NotionConfig

log = getLogger(__name__)

_NON_HEX = re.compile(r"[^a-f0-9]", re.IGNORECASE)
ERROR_BODY_LIMIT = 500


class NotionAPIError(RuntimeError):
    """Raised when the Notion API cannot return a usable page."""


def normalize_page_id(page_id: str) -> str:
    """Accept ids with or without hyphens; return the bare 32-hex form."""

    return _NON_HEX.sub("", page_id.strip()).lower()


class NotionClient:
    """Low-level HTTP client for ``GET /v1/pages/{id}``."""

    def __init__(
        self,
        *,
        config: NotionConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_page(self, page_id: str) -> NotionPage:
        return asyncio.run(self._fetch_page_async(page_id))

    async def _fetch_page_async(self, page_id: str) -> NotionPage:
        normalized = normalize_page_id(page_id)
        if not normalized:
            raise NotionAPIError(f"Empty Notion page id: {page_id!r}")

        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.get(f"pages/{normalized}")
            except httpx.TimeoutException as exc:
                raise NotionAPIError(f"Timed out fetching Notion page {page_id}") from exc
            except httpx.HTTPError as exc:
                msg = f"Transport error fetching Notion page {page_id}: {exc}"
                raise NotionAPIError(msg) from exc

        if response.is_error:
            body = response.text[:ERROR_BODY_LIMIT]
            raise NotionAPIError(
                f"Notion API error {response.status_code} for page {page_id}: {body}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise NotionAPIError(f"Notion page {page_id} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise NotionAPIError("Unexpected Notion response payload")
        try:
            return NotionPage.model_validate(payload)
        except ValidationError as exc:
            raise NotionAPIError(f"Notion page {page_id} failed validation: {exc}") from exc
