from __future__ import annotations

import pytest

from catalog_resolver.cache import CacheStore
from catalog_resolver.domain.catalog_index import CatalogIndex
from catalog_resolver.domain.resolution import DEFAULT_POLICY
from tests.helpers.resolution import FakeClock, make_entry


@pytest.fixture
def catalog() -> CatalogIndex:
    return CatalogIndex.from_entries(
        [
            make_entry("entry-cool", "Cool Pack", url="https://mod.example.com/cool-pack"),
            make_entry(
                "entry-forest",
                "Forest Cabin Build",
                url="https://other.example.org/files/forest-cabin",
                creator="Riverbend",
            ),
            make_entry(
                "harbor-a",
                "Harbor Lights",
                url="https://harbor-a.example.com/harbor-lights",
            ),
            make_entry(
                "harbor-b",
                "Harbor Lights",
                url="https://harbor-b.example.com/harbor-lights-hd",
            ),
        ],
        version="catalog-test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(catalog: CatalogIndex, clock: FakeClock) -> CacheStore:
    return CacheStore(
        catalog_version=catalog.version,
        policy_version=DEFAULT_POLICY.fingerprint(),
        clock=clock,
    )
