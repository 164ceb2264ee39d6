from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from catalog_resolver.cache import CacheStore
from catalog_resolver.domain.catalog_index import CatalogIndex
from catalog_resolver.domain.errors import PageGoneError
from catalog_resolver.domain.model import CacheSource, DecisionStatus, Identity, ResolvedStage
from catalog_resolver.domain.resolution import DEFAULT_POLICY, ResolutionPipeline
from tests.helpers.resolution import (
    FakeEntityFetcher,
    FakeIdentitySource,
    FakeSimilarityOracle,
    failing_oracle,
    make_entry,
)

if TYPE_CHECKING:
    from catalog_resolver.domain.ports import EntityFetcher, SimilarityOracle
    from tests.helpers.resolution import FakeClock

HARBOR_URL = "https://blog.example.net/posts/999"
HARBOR_MIRROR_URL = "https://mirror.example.net/posts/1000"
HARBOR_IDENTITY = Identity(primary_name="Harbour Lights", domain="blog.example.net")


def _pipeline(
    catalog: CatalogIndex,
    store: CacheStore,
    identities: FakeIdentitySource | None = None,
    *,
    oracle: SimilarityOracle | None = None,
    fetcher: EntityFetcher | None = None,
) -> ResolutionPipeline:
    return ResolutionPipeline(
        catalog=catalog,
        cache=store,
        identity_source=identities or FakeIdentitySource(),
        oracle=oracle,
        fetcher=fetcher,
        live_store=store,
    )


def test_exact_match_is_found_and_url_cached(
    catalog: CatalogIndex, memory_store: CacheStore
) -> None:
    identities = FakeIdentitySource()
    pipeline = _pipeline(catalog, memory_store, identities)

    first = pipeline.resolve("https://mod.example.com/cool-pack/")
    second = pipeline.resolve("http://www.mod.example.com/cool-pack?utm_source=feed")

    assert first.status is DecisionStatus.FOUND
    assert first.chosen_entry_id == "entry-cool"
    assert first.resolved_stage is ResolvedStage.EXACT
    assert first.cache_source is None
    assert second == first
    assert second.cache_source is CacheSource.URL
    assert identities.calls == []


def test_fuzzy_match_is_found(catalog: CatalogIndex, memory_store: CacheStore) -> None:
    url = "https://mod.example.com/p/12345"
    identities = FakeIdentitySource(
        {url: Identity(primary_name="Cool Pakc", domain="mod.example.com")}
    )

    outcome = _pipeline(catalog, memory_store, identities).resolve(url)

    assert outcome.status is DecisionStatus.FOUND
    assert outcome.chosen_entry_id == "entry-cool"
    assert outcome.resolved_stage is ResolvedStage.FUZZY
    assert memory_store.sizes()["url"] == 0
    assert memory_store.sizes()["evidence"] == 1


@pytest.mark.parametrize("raw", ["ftp://example.com/file", "not a url at all", ""])
def test_invalid_input_is_rejected_and_remembered(
    catalog: CatalogIndex, memory_store: CacheStore, raw: str
) -> None:
    identities = FakeIdentitySource()
    pipeline = _pipeline(catalog, memory_store, identities)

    first = pipeline.resolve(raw)
    second = pipeline.resolve(raw)

    assert first.status is DecisionStatus.REJECTED
    assert first.reason == "Input is not a valid http(s) URL"
    assert second.status is DecisionStatus.REJECTED
    assert identities.calls == []


def test_dead_page_is_rejected_once(catalog: CatalogIndex, memory_store: CacheStore) -> None:
    url = "https://gone.example.com/post/1"
    identities = FakeIdentitySource({url: PageGoneError("HTTP 404")})
    pipeline = _pipeline(catalog, memory_store, identities)

    first = pipeline.resolve(url)
    second = pipeline.resolve(url)

    assert first.status is DecisionStatus.REJECTED
    assert first.reason == "Page is gone or has no content: HTTP 404"
    assert second.cache_source is CacheSource.URL
    assert identities.calls == [url]


def test_missing_identity_is_not_found(catalog: CatalogIndex, memory_store: CacheStore) -> None:
    outcome = _pipeline(catalog, memory_store).resolve("https://unknown.example.com/x/1")

    assert outcome.status is DecisionStatus.NOTFOUND
    assert outcome.reason == "No name available for matching"
    assert memory_store.sizes() == {"url": 0, "evidence": 0, "live_entity": 0}


def test_arbitration_resolves_and_replays_without_oracle(
    catalog: CatalogIndex, memory_store: CacheStore
) -> None:
    identities = FakeIdentitySource(
        {HARBOR_URL: HARBOR_IDENTITY, HARBOR_MIRROR_URL: HARBOR_IDENTITY}
    )
    oracle = FakeSimilarityOracle([0.91, 0.40])
    pipeline = _pipeline(catalog, memory_store, identities, oracle=oracle)

    first = pipeline.resolve(HARBOR_URL)
    again = pipeline.resolve(HARBOR_URL)
    mirror = pipeline.resolve(HARBOR_MIRROR_URL)

    assert first.status is DecisionStatus.FOUND
    assert first.chosen_entry_id == "harbor-a"
    assert first.resolved_stage is ResolvedStage.ARBITRATION
    assert again == first
    assert mirror == first
    assert again.cache_source is CacheSource.EVIDENCE
    assert mirror.cache_source is CacheSource.EVIDENCE
    assert len(oracle.calls) == 1
    assert "evidence-cache: hit" in mirror.trail


def test_oracle_failure_degrades_and_is_retried(
    catalog: CatalogIndex, memory_store: CacheStore
) -> None:
    identities = FakeIdentitySource({HARBOR_URL: HARBOR_IDENTITY})
    oracle = failing_oracle("connection reset")
    pipeline = _pipeline(catalog, memory_store, identities, oracle=oracle)

    first = pipeline.resolve(HARBOR_URL)
    second = pipeline.resolve(HARBOR_URL)

    assert first.status is DecisionStatus.AMBIGUOUS
    assert first.resolved_stage is ResolvedStage.FUZZY
    assert first.candidate_ids == ("harbor-a", "harbor-b")
    assert first.reason.endswith("[arbitration failed: connection reset]")
    assert second.cache_source is None
    assert len(oracle.calls) == 2
    assert memory_store.sizes()["evidence"] == 0


def test_without_oracle_fuzzy_ambiguity_is_returned(
    catalog: CatalogIndex, memory_store: CacheStore
) -> None:
    identities = FakeIdentitySource({HARBOR_URL: HARBOR_IDENTITY})

    outcome = _pipeline(catalog, memory_store, identities).resolve(HARBOR_URL)

    assert outcome.status is DecisionStatus.AMBIGUOUS
    assert outcome.reason.endswith("[arbitration unavailable: no oracle]")


def test_trail_records_each_stage(catalog: CatalogIndex, memory_store: CacheStore) -> None:
    identities = FakeIdentitySource({HARBOR_URL: HARBOR_IDENTITY})
    oracle = FakeSimilarityOracle([0.91, 0.40])

    outcome = _pipeline(catalog, memory_store, identities, oracle=oracle).resolve(HARBOR_URL)

    assert outcome.trail[0] == "url-cache: miss"
    assert outcome.trail[1] == "deterministic: no match"
    assert outcome.trail[-2] == "evidence-cache: miss"
    assert outcome.trail[-1].startswith("arbitration: FOUND")


def test_resolving_twice_is_idempotent(catalog: CatalogIndex, memory_store: CacheStore) -> None:
    url = "https://mod.example.com/p/12345"
    identities = FakeIdentitySource(
        {url: Identity(primary_name="Cool Pakc", domain="mod.example.com")}
    )
    pipeline = _pipeline(catalog, memory_store, identities)

    assert pipeline.resolve(url) == pipeline.resolve(url)


def test_live_fetch_timeout_does_not_abort_arbitration(
    catalog: CatalogIndex, memory_store: CacheStore
) -> None:
    identities = FakeIdentitySource({HARBOR_URL: HARBOR_IDENTITY})
    fetcher = FakeEntityFetcher(error=TimeoutError("live fetch timed out"))
    pipeline = _pipeline(
        catalog,
        memory_store,
        identities,
        oracle=FakeSimilarityOracle([0.91, 0.40]),
        fetcher=fetcher,
    )

    outcome = pipeline.resolve(HARBOR_URL)

    assert outcome.status is DecisionStatus.FOUND
    assert outcome.chosen_entry_id == "harbor-a"
    assert outcome.resolved_stage is ResolvedStage.ARBITRATION
    assert sorted(fetcher.calls) == ["harbor-a", "harbor-b"]
    assert memory_store.sizes()["live_entity"] == 0


def test_shared_slug_across_domains_is_left_to_fuzzy(clock: FakeClock) -> None:
    shared = CatalogIndex.from_entries(
        [
            make_entry("alpha", "Lantern Valley", url="https://a.example.com/lantern-valley"),
            make_entry("beta", "Quiet Meadow", url="https://b.example.com/files/lantern-valley"),
        ],
        version="catalog-shared-slug",
    )
    store = CacheStore(
        catalog_version=shared.version,
        policy_version=DEFAULT_POLICY.fingerprint(),
        clock=clock,
    )
    url = "https://c.example.com/lantern-valley"
    identities = FakeIdentitySource({url: Identity(primary_name="Lantern Valley")})

    outcome = _pipeline(shared, store, identities).resolve(url)

    assert outcome.resolved_stage is ResolvedStage.FUZZY
    assert outcome.status is DecisionStatus.FOUND
    assert outcome.chosen_entry_id == "alpha"
    assert identities.calls == [url]
