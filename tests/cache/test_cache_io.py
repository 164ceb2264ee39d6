from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from catalog_resolver.cache.documents import (
    EVIDENCE_CACHE_SCHEMA,
    DecisionDocument,
    DecisionRecord,
)
from catalog_resolver.cache.io import atomic_write_document, read_document
from catalog_resolver.domain.errors import CacheCorruptError
from catalog_resolver.domain.model import DecisionOutcome, ResolvedStage

if TYPE_CHECKING:
    from pathlib import Path


def _document() -> DecisionDocument:
    outcome = DecisionOutcome.ambiguous(("a", "b"), stage=ResolvedStage.ARBITRATION, reason="tie")
    return DecisionDocument(
        schema_version=EVIDENCE_CACHE_SCHEMA,
        catalog_version="cat-1",
        policy_version="pol-1",
        entries={
            "k1": DecisionRecord.from_outcome(
                outcome, timestamp=datetime(2024, 5, 1, tzinfo=UTC)
            )
        },
    )


def test_read_document_returns_none_when_absent(tmp_path: Path) -> None:
    missing = tmp_path / "missing.json"

    assert read_document(missing, DecisionDocument, schema_version=EVIDENCE_CACHE_SCHEMA) is None


def test_written_document_reads_back(tmp_path: Path) -> None:
    path = tmp_path / "deep" / "evidence.json"

    atomic_write_document(path, _document())
    loaded = read_document(path, DecisionDocument, schema_version=EVIDENCE_CACHE_SCHEMA)

    assert loaded == _document()
    assert loaded is not None
    assert loaded.entries["k1"].to_outcome().candidate_ids == ("a", "b")


def test_schema_mismatch_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "evidence.json"
    atomic_write_document(path, _document())

    with pytest.raises(CacheCorruptError, match="expected 'url-cache.v1'"):
        read_document(path, DecisionDocument, schema_version="url-cache.v1")


def test_failed_write_keeps_previous_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "evidence.json"
    atomic_write_document(path, _document())
    before = path.read_text()

    def broken_replace(_src: object, _dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("catalog_resolver.cache.io.os.replace", broken_replace)
    with pytest.raises(OSError, match="disk full"):
        atomic_write_document(path, _document().model_copy(update={"entries": {}}))

    assert path.read_text() == before
    assert [entry.name for entry in tmp_path.iterdir()] == ["evidence.json"]
