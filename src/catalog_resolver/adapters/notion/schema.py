"""Notion page API response schemas (the subset live enrichment reads)."""

from __future__ import annotations

import logging
from datetime import datetime  # noqa: TC003
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class NotionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")
    _logged_missing: ClassVar[set[str]] = set()


class NotionRichText(NotionBaseModel):
    plain_text: str = ""


class NotionUser(NotionBaseModel):
    id: str
    name: str | None = None


class NotionProperty(NotionBaseModel):
    id: str | None = None
    type: str
    title: list[NotionRichText] | None = None
    rich_text: list[NotionRichText] | None = None
    url: str | None = None


class NotionPage(NotionBaseModel):
    object: str = "page"
    id: str
    url: str | None = None
    last_edited_time: datetime | None = None
    created_by: NotionUser | None = None
    properties: dict[str, NotionProperty] = Field(default_factory=dict)

    def title_text(self) -> str | None:
        """Concatenated plain text of the first ``title``-typed property."""

        for prop in self.properties.values():
            if prop.type != "title":
                continue
            text = "".join(part.plain_text for part in prop.title or []).strip()
            return text or None
        if self.id not in self._logged_missing:
            self._logged_missing.add(self.id)
            log.warning("Notion page %s has no title property", self.id)
        return None

    def creator_name(self) -> str | None:
        if self.created_by is None or not self.created_by.name:
            return None
        return self.created_by.name.strip() or None
