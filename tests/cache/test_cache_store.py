from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from catalog_resolver.cache import CacheStore, url_partition_key
from catalog_resolver.config import StorageConfig
from catalog_resolver.domain.model import CacheSource, DecisionOutcome, ResolvedStage
from catalog_resolver.domain.ports import LiveEntity
from tests.helpers.resolution import FakeClock

if TYPE_CHECKING:
    from pathlib import Path

EXACT = DecisionOutcome.found("entry-cool", stage=ResolvedStage.EXACT, reason="Direct URL match")
FUZZY = DecisionOutcome.found("entry-cool", stage=ResolvedStage.FUZZY, reason="Fuzzy match")


def _store(
    directory: Path | None,
    clock: FakeClock,
    *,
    catalog_version: str = "cat-1",
    policy_version: str = "pol-1",
    evidence_max_entries: int = 5000,
) -> CacheStore:
    return CacheStore(
        catalog_version=catalog_version,
        policy_version=policy_version,
        directory=directory,
        evidence_max_entries=evidence_max_entries,
        clock=clock,
    )


def test_url_decisions_survive_restart(tmp_path: Path, clock: FakeClock) -> None:
    _store(tmp_path, clock).put_url_decision("https://Example.com/a/?utm_source=x", EXACT)

    reloaded = _store(tmp_path, clock).get_url_decision("http://www.example.com/a")

    assert reloaded == EXACT
    assert reloaded is not None
    assert reloaded.cache_source is CacheSource.URL


def test_url_partition_refuses_non_deterministic_outcomes(clock: FakeClock) -> None:
    with pytest.raises(ValueError, match="deterministic"):
        _store(None, clock).put_url_decision("https://example.com/a", FUZZY)


def test_url_partition_accepts_rejections(clock: FakeClock) -> None:
    store = _store(None, clock)
    rejected = DecisionOutcome.rejected(reason="Input is not a valid http(s) URL")

    key = store.put_url_decision("  not a url  ", rejected)

    assert key == "not a url"
    assert store.get_url_decision("not a url") == rejected


def test_url_partition_key_falls_back_to_trimmed_text() -> None:
    assert url_partition_key("https://www.example.com/A/") == "https://example.com/a"
    assert url_partition_key(" ftp://x ") == "ftp://x"


def test_evidence_decisions_survive_restart(tmp_path: Path, clock: FakeClock) -> None:
    _store(tmp_path, clock).put_decision("k1", FUZZY)

    reloaded = _store(tmp_path, clock).get_decision("k1")

    assert reloaded == FUZZY
    assert reloaded is not None
    assert reloaded.cache_source is CacheSource.EVIDENCE


@pytest.mark.parametrize(
    ("catalog_version", "policy_version"),
    [("cat-2", "pol-1"), ("cat-1", "pol-2")],
)
def test_version_change_wipes_decision_partitions(
    tmp_path: Path, clock: FakeClock, catalog_version: str, policy_version: str
) -> None:
    store = _store(tmp_path, clock)
    store.put_url_decision("https://example.com/a", EXACT)
    store.put_decision("k1", FUZZY)
    store.put(LiveEntity(entry_id="entry-cool", title="Cool Pack"))

    upgraded = _store(
        tmp_path, clock, catalog_version=catalog_version, policy_version=policy_version
    )

    assert upgraded.sizes() == {"url": 0, "evidence": 0, "live_entity": 1}
    on_disk = json.loads((tmp_path / "url-cache.v1.json").read_text())
    assert on_disk["catalog_version"] == catalog_version
    assert on_disk["policy_version"] == policy_version
    assert on_disk["entries"] == {}


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps(
            {
                "schema_version": "url-cache.v0",
                "catalog_version": "cat-1",
                "policy_version": "pol-1",
                "entries": {},
            }
        ),
        json.dumps({"schema_version": "url-cache.v1", "unexpected": True}),
        b"\xff\xfe\x00garbage",
    ],
)
def test_corrupt_document_is_reset(
    tmp_path: Path, clock: FakeClock, content: str | bytes
) -> None:
    path = tmp_path / "url-cache.v1.json"
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)

    store = _store(tmp_path, clock)

    assert store.sizes()["url"] == 0
    repaired = json.loads(path.read_text())
    assert repaired["schema_version"] == "url-cache.v1"
    assert repaired["entries"] == {}


def test_record_breaking_outcome_rules_resets_partition(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "url-cache.v1.json"
    key = url_partition_key("https://x.example.com/a")
    path.write_text(
        json.dumps(
            {
                "schema_version": "url-cache.v1",
                "catalog_version": "cat-1",
                "policy_version": "pol-1",
                "entries": {
                    key: {
                        "result": "FOUND",
                        "resolved_stage": "exact",
                        "reason": "Direct URL match",
                        "chosen_entry_id": None,
                        "candidate_ids": [],
                        "timestamp": "2024-05-01T12:00:00Z",
                    }
                },
            }
        )
    )

    store = _store(tmp_path, clock)

    assert store.get_url_decision("https://x.example.com/a") is None
    assert json.loads(path.read_text())["entries"] == {}


def test_evidence_partition_evicts_oldest(clock: FakeClock) -> None:
    store = _store(None, clock, evidence_max_entries=2)
    for key in ("k1", "k2", "k3"):
        store.put_decision(key, FUZZY)
        clock.advance(seconds=1)

    assert store.get_decision("k1") is None
    assert store.get_decision("k2") is not None
    assert store.get_decision("k3") is not None


def test_live_entities_expire_after_ttl(clock: FakeClock) -> None:
    store = _store(None, clock)
    store.put(LiveEntity(entry_id="a", title="Cool Pack"))

    clock.advance(hours=23)
    assert store.get_fresh("a") is not None
    clock.advance(hours=2)
    assert store.get_fresh("a") is None


def test_live_entity_older_than_catalog_is_stale(clock: FakeClock) -> None:
    store = _store(None, clock)
    store.put(
        LiveEntity(entry_id="a", title="Cool Pack", last_modified_at=datetime(2024, 1, 1))
    )

    assert store.get_fresh("a", min_last_modified=datetime(2023, 12, 1, tzinfo=UTC)) is not None
    assert store.get_fresh("a", min_last_modified=datetime(2024, 2, 1, tzinfo=UTC)) is None


def test_expired_live_entities_are_pruned_on_load(tmp_path: Path, clock: FakeClock) -> None:
    _store(tmp_path, clock).put(LiveEntity(entry_id="a", title="Cool Pack"))
    clock.advance(days=2)

    reloaded = _store(tmp_path, clock)

    assert reloaded.sizes()["live_entity"] == 0
    on_disk = json.loads((tmp_path / "live-entity-cache.v1.json").read_text())
    assert on_disk["entries"] == {}


def test_writes_leave_no_temporary_files(tmp_path: Path, clock: FakeClock) -> None:
    store = _store(tmp_path, clock)
    store.put_url_decision("https://example.com/a", EXACT)
    store.put_decision("k1", FUZZY)

    assert sorted(path.name for path in tmp_path.iterdir()) == [
        "evidence-cache.v1.json",
        "url-cache.v1.json",
    ]


def test_in_memory_store_never_touches_disk(tmp_path: Path, clock: FakeClock) -> None:
    store = _store(None, clock)
    store.put_decision("k1", FUZZY)

    assert list(tmp_path.iterdir()) == []


def test_from_storage_config_uses_configured_limits(tmp_path: Path, clock: FakeClock) -> None:
    storage = StorageConfig(
        cache_dir=tmp_path / "nested",
        evidence_max_entries=1,
        live_entity_ttl_seconds=60,
    )

    store = CacheStore.from_storage_config(
        storage, catalog_version="cat-1", policy_version="pol-1", clock=clock
    )
    store.put_decision("k1", FUZZY)
    store.put_decision("k2", FUZZY)
    store.put(LiveEntity(entry_id="a"))
    clock.advance(minutes=2)

    assert store.sizes()["evidence"] == 1
    assert store.get_fresh("a") is None
    assert (tmp_path / "nested" / "evidence-cache.v1.json").exists()
