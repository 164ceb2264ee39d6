"""Port definitions for live catalog-entry enrichment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from catalog_resolver.domain.model import EntryId


@dataclass(frozen=True, slots=True, kw_only=True)
class LiveEntity:
    """Current facts about a catalog entry as reported by its system of record."""

    entry_id: EntryId
    title: str | None = None
    creator: str | None = None
    url: str | None = None
    last_modified_at: datetime | None = None


@runtime_checkable
class EntityFetcher(Protocol):
    """Fetch live facts for one entry, raising ``EntityFetchError`` on any failure."""

    def fetch(self, entry_id: EntryId) -> LiveEntity: ...


@runtime_checkable
class LiveEntityStore(Protocol):
    """Time-boxed store of live facts keyed by entry id."""

    def get_fresh(
        self,
        entry_id: EntryId,
        *,
        min_last_modified: datetime | None = None,
    ) -> LiveEntity | None: ...

    def put(self, entity: LiveEntity) -> None: ...
