"""Public domain model surface."""

from __future__ import annotations

from catalog_resolver.domain.model.catalog import CatalogEntry, EntryId, ScoredCandidate, ranked
from catalog_resolver.domain.model.enums import (
    CacheSource,
    DecisionStatus,
    PlannerMode,
    ResolvedStage,
    SelectionRule,
)
from catalog_resolver.domain.model.identity import Identity
from catalog_resolver.domain.model.outcome import DecisionOutcome

__all__ = [
    "CacheSource",
    "CatalogEntry",
    "DecisionOutcome",
    "DecisionStatus",
    "EntryId",
    "Identity",
    "PlannerMode",
    "ResolvedStage",
    "ScoredCandidate",
    "SelectionRule",
    "ranked",
]
