"""Read-only in-memory view of the reference catalog."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import CatalogValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .model import CatalogEntry, EntryId

log = getLogger(__name__)

VERSION_DIGEST_LENGTH = 16


def derive_catalog_version(entries: Iterable[CatalogEntry]) -> str:
    """Stable stamp over entry ids and their last-modified times."""

    digest = hashlib.sha256()
    for entry_id, modified in sorted(
        (entry.id, entry.last_modified_at.isoformat() if entry.last_modified_at else "")
        for entry in entries
    ):
        digest.update(f"{entry_id}\x1f{modified}\x1e".encode())
    return digest.hexdigest()[:VERSION_DIGEST_LENGTH]


@dataclass(frozen=True, slots=True)
class CatalogIndex:
    """Catalog entries in load order plus the version stamp they were loaded under."""

    entries: tuple[CatalogEntry, ...]
    version: str = ""
    _by_id: dict[EntryId, CatalogEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_id: dict[EntryId, CatalogEntry] = {}
        duplicates: set[EntryId] = set()
        for entry in self.entries:
            if entry.id in by_id:
                duplicates.add(entry.id)
            by_id[entry.id] = entry
        if duplicates:
            raise CatalogValidationError(
                f"Duplicate catalog entry ids: {', '.join(sorted(duplicates))}"
            )
        object.__setattr__(self, "_by_id", by_id)
        if not self.version:
            object.__setattr__(self, "version", derive_catalog_version(self.entries))
        log.debug("Catalog index ready: entries=%s version=%s", len(self.entries), self.version)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[CatalogEntry],
        *,
        version: str | None = None,
    ) -> CatalogIndex:
        return cls(tuple(entries), version or "")

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def get(self, entry_id: EntryId) -> CatalogEntry | None:
        return self._by_id.get(entry_id)
