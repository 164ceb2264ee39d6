"""Deterministic URL matching against the catalog.

Responsibilities of this stage:
- match the queried URL against every lookup key of every catalog URL
- fall back to a final-slug match, accepted only when exactly one entry
  carries that slug
- return a FOUND outcome (stage EXACT or SLUG) or ``None`` to continue

Out of scope for this stage:
- any similarity scoring
- cache access
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_resolver.domain.model import DecisionOutcome, ResolvedStage
from catalog_resolver.domain.urls import final_slug, url_lookup_keys

if TYPE_CHECKING:
    from catalog_resolver.domain.catalog_index import CatalogIndex
    from catalog_resolver.domain.model import CatalogEntry

log = getLogger(__name__)


@dataclass(slots=True)
class DeterministicMatcher:
    """Lookup tables built once per catalog index."""

    catalog: CatalogIndex
    _by_key: dict[str, CatalogEntry] = field(init=False, default_factory=dict)
    _by_slug: dict[str, list[tuple[CatalogEntry, str]]] = field(
        init=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        by_slug: defaultdict[str, list[tuple[CatalogEntry, str]]] = defaultdict(list)
        for entry in self.catalog:
            if not entry.url:
                continue
            for key in url_lookup_keys(entry.url):
                existing = self._by_key.get(key)
                if existing is None:
                    self._by_key[key] = entry
                elif existing.id != entry.id:
                    log.warning(
                        "Catalog entries %s and %s share lookup key %r; keeping %s",
                        existing.id,
                        entry.id,
                        key,
                        existing.id,
                    )
            slug_data = final_slug(entry.url)
            if slug_data is not None:
                slug, host = slug_data
                by_slug[slug].append((entry, host))
        self._by_slug = dict(by_slug)

    def match(self, url: str) -> DecisionOutcome | None:
        """Return a FOUND outcome for ``url`` or ``None`` when nothing matches."""

        return self.match_exact(url) or self.match_slug(url)

    def match_exact(self, url: str) -> DecisionOutcome | None:
        for key in url_lookup_keys(url):
            entry = self._by_key.get(key)
            if entry is not None:
                log.info("Exact URL match for %s -> %s", url, entry.id)
                return DecisionOutcome.found(
                    entry.id,
                    stage=ResolvedStage.EXACT,
                    reason="Direct URL match in catalog",
                )
        return None

    def match_slug(self, url: str) -> DecisionOutcome | None:
        slug_data = final_slug(url)
        if slug_data is None:
            return None
        slug, host = slug_data
        matches = self._by_slug.get(slug, [])
        if len(matches) != 1:
            if matches:
                log.info(
                    "Slug %r shared by %s catalog entries; falling through",
                    slug,
                    len(matches),
                )
            return None

        entry, entry_host = matches[0]
        scope = "same domain" if entry_host == host else "cross-domain"
        log.info("Slug match (%s) for %s -> %s", scope, url, entry.id)
        return DecisionOutcome.found(
            entry.id,
            stage=ResolvedStage.SLUG,
            reason=f"Slug match ({scope})",
        )
