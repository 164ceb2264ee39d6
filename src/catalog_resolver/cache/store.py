"""Three-partition decision cache.

Partitions:
- URL: canonical URL -> decision; deterministic and REJECTED outcomes only
- Evidence: evidence key -> decision from fuzzy/arbitration stages
- LiveEntity: entry id -> live facts, bounded by TTL and a staleness check

URL and Evidence are stamped with (catalog version, policy version) and wiped
when either changes. LiveEntity only answers to its own TTL. Every mutation is
followed by an atomic write of the affected document; an unreadable document
resets its partition to empty.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_resolver.domain.errors import CacheCorruptError
from catalog_resolver.domain.model import CacheSource, DecisionStatus
from catalog_resolver.domain.urls import canonical_url_key

from .documents import (
    EVIDENCE_CACHE_SCHEMA,
    LIVE_ENTITY_CACHE_SCHEMA,
    URL_CACHE_SCHEMA,
    DecisionDocument,
    DecisionRecord,
    LiveEntityDocument,
    LiveEntityRecord,
)
from .io import atomic_write_document, read_document

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from catalog_resolver.config.storage import StorageConfig
    from catalog_resolver.domain.model import DecisionOutcome, EntryId
    from catalog_resolver.domain.ports import LiveEntity
    from catalog_resolver.domain.resolution.evidence import EvidenceKey

log = getLogger(__name__)

DEFAULT_EVIDENCE_MAX_ENTRIES = 5000
DEFAULT_LIVE_TTL = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def url_partition_key(url: str) -> str:
    """Canonical key for URLs; unparseable input is keyed by its trimmed text."""

    return canonical_url_key(url) or url.strip()


class CacheStore:
    """Owns the three cache partitions for one (catalog, policy) version pair.

    Pass ``directory=None`` for an in-memory store that never touches disk.
    """

    def __init__(
        self,
        *,
        catalog_version: str,
        policy_version: str,
        directory: Path | None = None,
        url_filename: str = "url-cache.v1.json",
        evidence_filename: str = "evidence-cache.v1.json",
        live_entity_filename: str = "live-entity-cache.v1.json",
        evidence_max_entries: int = DEFAULT_EVIDENCE_MAX_ENTRIES,
        live_ttl: timedelta = DEFAULT_LIVE_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if evidence_max_entries < 1:
            raise ValueError("evidence_max_entries must be at least 1")
        self.catalog_version = catalog_version
        self.policy_version = policy_version
        self.evidence_max_entries = evidence_max_entries
        self.live_ttl = live_ttl
        self._clock = clock
        self._url_path = directory / url_filename if directory else None
        self._evidence_path = directory / evidence_filename if directory else None
        self._live_path = directory / live_entity_filename if directory else None

        self._url = self._load_decisions(self._url_path, URL_CACHE_SCHEMA)
        self._evidence = self._load_decisions(self._evidence_path, EVIDENCE_CACHE_SCHEMA)
        self._live = self._load_live()

    @classmethod
    def from_storage_config(
        cls,
        storage: StorageConfig,
        *,
        catalog_version: str,
        policy_version: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> CacheStore:
        return cls(
            catalog_version=catalog_version,
            policy_version=policy_version,
            directory=storage.ensure_cache_dir(),
            url_filename=storage.url_cache_filename,
            evidence_filename=storage.evidence_cache_filename,
            live_entity_filename=storage.live_entity_cache_filename,
            evidence_max_entries=storage.evidence_max_entries,
            live_ttl=timedelta(seconds=storage.live_entity_ttl_seconds),
            clock=clock,
        )

    # --- loading ---------------------------------------------------------

    def _empty_decisions(self, schema_version: str) -> DecisionDocument:
        return DecisionDocument(
            schema_version=schema_version,
            catalog_version=self.catalog_version,
            policy_version=self.policy_version,
        )

    def _load_decisions(self, path: Path | None, schema_version: str) -> DecisionDocument:
        if path is None:
            return self._empty_decisions(schema_version)
        try:
            document = read_document(path, DecisionDocument, schema_version=schema_version)
        except CacheCorruptError as exc:
            log.warning("Resetting %s partition: %s", schema_version, exc)
            reset = self._empty_decisions(schema_version)
            atomic_write_document(path, reset)
            return reset
        if document is None:
            return self._empty_decisions(schema_version)
        if (
            document.catalog_version != self.catalog_version
            or document.policy_version != self.policy_version
        ):
            log.info(
                "Wiping %s partition (%s entries): catalog %s -> %s, policy %s -> %s",
                schema_version,
                len(document.entries),
                document.catalog_version,
                self.catalog_version,
                document.policy_version,
                self.policy_version,
            )
            reset = self._empty_decisions(schema_version)
            atomic_write_document(path, reset)
            return reset
        return document

    def _load_live(self) -> LiveEntityDocument:
        empty = LiveEntityDocument(schema_version=LIVE_ENTITY_CACHE_SCHEMA)
        if self._live_path is None:
            return empty
        try:
            document = read_document(
                self._live_path,
                LiveEntityDocument,
                schema_version=LIVE_ENTITY_CACHE_SCHEMA,
            )
        except CacheCorruptError as exc:
            log.warning("Resetting %s partition: %s", LIVE_ENTITY_CACHE_SCHEMA, exc)
            atomic_write_document(self._live_path, empty)
            return empty
        if document is None:
            return empty

        now = self._clock()
        expired = [
            entry_id
            for entry_id, record in document.entries.items()
            if self._is_expired(record, now=now)
        ]
        for entry_id in expired:
            del document.entries[entry_id]
        if expired:
            log.info("Pruned %s expired live entities", len(expired))
            atomic_write_document(self._live_path, document)
        return document

    # --- URL partition ---------------------------------------------------------

    def get_url_decision(self, url: str) -> DecisionOutcome | None:
        record = self._url.entries.get(url_partition_key(url))
        if record is None:
            return None
        return record.to_outcome().from_cache(CacheSource.URL)

    def put_url_decision(self, url: str, outcome: DecisionOutcome) -> str | None:
        """Record a deterministic or REJECTED outcome; returns the key used."""

        if not (
            outcome.resolved_stage.is_deterministic or outcome.status is DecisionStatus.REJECTED
        ):
            raise ValueError(
                f"URL partition only accepts deterministic outcomes, got {outcome.resolved_stage}"
            )
        key = url_partition_key(url)
        if not key:
            return None
        self._url.entries[key] = DecisionRecord.from_outcome(outcome, timestamp=self._clock())
        self._write(self._url_path, self._url)
        return key

    # --- Evidence partition ---------------------------------------------------------

    def get_decision(self, key: EvidenceKey) -> DecisionOutcome | None:
        record = self._evidence.entries.get(key)
        if record is None:
            return None
        return record.to_outcome().from_cache(CacheSource.EVIDENCE)

    def put_decision(self, key: EvidenceKey, outcome: DecisionOutcome) -> None:
        self._evidence.entries[key] = DecisionRecord.from_outcome(outcome, timestamp=self._clock())
        self._prune_evidence()
        self._write(self._evidence_path, self._evidence)

    def _prune_evidence(self) -> None:
        overflow = len(self._evidence.entries) - self.evidence_max_entries
        if overflow <= 0:
            return
        oldest = sorted(
            self._evidence.entries.items(),
            key=lambda item: (_aware(item[1].timestamp), item[0]),
        )[:overflow]
        for key, _record in oldest:
            del self._evidence.entries[key]
        log.info("Evicted %s oldest evidence entries", overflow)

    # --- LiveEntity partition ---------------------------------------------------------

    def _is_expired(self, record: LiveEntityRecord, *, now: datetime) -> bool:
        return _aware(now) - _aware(record.fetched_at) > self.live_ttl

    def get_fresh(
        self,
        entry_id: EntryId,
        *,
        min_last_modified: datetime | None = None,
    ) -> LiveEntity | None:
        """Return cached live facts unless expired or older than ``min_last_modified``."""

        record = self._live.entries.get(entry_id)
        if record is None or self._is_expired(record, now=self._clock()):
            return None
        if min_last_modified is not None and (
            record.last_modified_at is None
            or _aware(record.last_modified_at) < _aware(min_last_modified)
        ):
            return None
        return record.to_entity()

    def put(self, entity: LiveEntity) -> None:
        self._live.entries[entity.entry_id] = LiveEntityRecord.from_entity(
            entity, fetched_at=self._clock()
        )
        self._write(self._live_path, self._live)

    # --- introspection ---------------------------------------------------------

    def sizes(self) -> dict[str, int]:
        return {
            "url": len(self._url.entries),
            "evidence": len(self._evidence.entries),
            "live_entity": len(self._live.entries),
        }

    def _write(self, path: Path | None, document: DecisionDocument | LiveEntityDocument) -> None:
        if path is not None:
            atomic_write_document(path, document)
