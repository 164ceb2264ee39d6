"""Catalog entries and their per-run scored form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

type EntryId = str


@dataclass(frozen=True, slots=True, kw_only=True)
class CatalogEntry:
    """A known item in the reference catalog."""

    id: EntryId
    url: str | None = None
    title: str | None = None
    alternate_name: str | None = None
    creator: str | None = None
    created_at: datetime | None = None
    last_modified_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Catalog entry id must be a non-empty string")

    @property
    def display_name(self) -> str | None:
        """Title, falling back to the alternate (file) name."""

        for value in (self.title, self.alternate_name):
            if value and value.strip():
                return value.strip()
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class ScoredCandidate:
    """Catalog entry with a fuzzy score and the signals that produced it."""

    entry: CatalogEntry
    score: float
    reasons: tuple[str, ...] = field(default_factory=tuple)

    @property
    def id(self) -> EntryId:
        return self.entry.id


def ranked(candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
    """Order candidates by score (desc) with catalog id as the tie-breaker."""

    return sorted(candidates, key=lambda candidate: (-candidate.score, candidate.id))
