"""Validate raw catalog records once, at the boundary into the domain.

Accepts the snake_case field names of ``CatalogEntry`` as well as the names a
Notion database export uses (``notion_id``, ``filename``, ``last_edited_time``).
"""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from catalog_resolver.domain.catalog_index import CatalogIndex
from catalog_resolver.domain.errors import CatalogValidationError
from catalog_resolver.domain.model import CatalogEntry

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

log = getLogger(__name__)


class CatalogRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "notion_id", "notionid"))
    url: str | None = None
    title: str | None = None
    alternate_name: str | None = Field(
        default=None, validation_alias=AliasChoices("alternate_name", "filename")
    )
    creator: str | None = None
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "created_time")
    )
    last_modified_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("last_modified_at", "last_edited_time")
    )

    @field_validator("url", "title", "alternate_name", "creator")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("created_at", "last_modified_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=UTC)

    def to_entry(self) -> CatalogEntry:
        return CatalogEntry(
            id=self.id,
            url=self.url,
            title=self.title,
            alternate_name=self.alternate_name,
            creator=self.creator,
            created_at=self.created_at,
            last_modified_at=self.last_modified_at,
        )


def load_catalog_index(
    records: Iterable[Mapping[str, object]],
    *,
    version: str | None = None,
) -> CatalogIndex:
    """Build a ``CatalogIndex`` from raw mappings, failing fast on the first bad record."""

    entries: list[CatalogEntry] = []
    for position, record in enumerate(records):
        try:
            entries.append(CatalogRecord.model_validate(record).to_entry())
        except ValidationError as exc:
            raise CatalogValidationError(f"Catalog record #{position} is invalid: {exc}") from exc
    index = CatalogIndex.from_entries(entries, version=version)
    log.info("Loaded catalog: entries=%s version=%s", len(index), index.version)
    return index
