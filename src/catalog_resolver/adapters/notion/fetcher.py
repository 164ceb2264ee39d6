"""Live-entity fetcher backed by the Notion page API."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from catalog_resolver.domain.errors import EntityFetchError
from catalog_resolver.domain.ports import LiveEntity

from .client import NotionAPIError, NotionClient

if TYPE_CHECKING:
    from catalog_resolver.config.notion import NotionConfig
    from catalog_resolver.domain.model import EntryId

    from .schema import NotionPage

log = getLogger(__name__)


class PageLookupClient(Protocol):
    def fetch_page(self, page_id: str) -> NotionPage: ...


def translate_page(page: NotionPage, *, entry_id: EntryId) -> LiveEntity:
    return LiveEntity(
        entry_id=entry_id,
        title=page.title_text(),
        creator=page.creator_name(),
        url=page.url,
        last_modified_at=page.last_edited_time,
    )


@dataclass(slots=True)
class NotionEntityFetcher:
    """``EntityFetcher`` that reads catalog entries stored as Notion pages."""

    client: PageLookupClient

    def fetch(self, entry_id: EntryId) -> LiveEntity:
        try:
            page = self.client.fetch_page(entry_id)
        except NotionAPIError as exc:
            raise EntityFetchError(str(exc)) from exc
        log.debug("Fetched live Notion page %s", entry_id)
        return translate_page(page, entry_id=entry_id)


def build_notion_fetcher(config: NotionConfig) -> NotionEntityFetcher:
    return NotionEntityFetcher(client=NotionClient(config=config))
