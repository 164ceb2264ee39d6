"""Best-effort live enrichment of bounded candidates.

The live-entity store is consulted first; the fetcher runs only on a miss or a
stale entry. Any collaborator failure leaves the candidate as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_resolver.domain.errors import CollaboratorUnavailableError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalog_resolver.domain.model import CatalogEntry, ScoredCandidate
    from catalog_resolver.domain.ports import EntityFetcher, LiveEntity, LiveEntityStore

log = getLogger(__name__)


def apply_live_entity(entry: CatalogEntry, live: LiveEntity) -> CatalogEntry:
    """Overlay non-empty live facts onto a catalog entry."""

    return replace(
        entry,
        title=live.title or entry.title,
        creator=live.creator or entry.creator,
        url=live.url or entry.url,
        last_modified_at=live.last_modified_at or entry.last_modified_at,
    )


@dataclass(slots=True)
class LiveEnricher:
    store: LiveEntityStore | None = None
    fetcher: EntityFetcher | None = None

    def lookup(self, entry: CatalogEntry) -> LiveEntity | None:
        if self.store is not None:
            cached = self.store.get_fresh(entry.id, min_last_modified=entry.last_modified_at)
            if cached is not None:
                return cached
        if self.fetcher is None:
            return None
        try:
            live = self.fetcher.fetch(entry.id)
        except (CollaboratorUnavailableError, TimeoutError) as exc:
            log.warning("Live enrichment failed for %s: %s", entry.id, exc)
            return None
        if self.store is not None:
            self.store.put(live)
        return live

    def enrich(
        self,
        candidates: Sequence[ScoredCandidate],
    ) -> tuple[tuple[ScoredCandidate, ...], int]:
        """Return candidates with live facts applied and how many were enriched."""

        enriched: list[ScoredCandidate] = []
        count = 0
        for candidate in candidates:
            live = self.lookup(candidate.entry)
            if live is None:
                enriched.append(candidate)
                continue
            count += 1
            enriched.append(replace(candidate, entry=apply_live_entity(candidate.entry, live)))
        return tuple(enriched), count
