"""On-disk cache document schemas.

Each partition is one self-describing JSON document carrying a
``schema_version`` tag. A document whose tag does not match is treated as
corrupt and reset by the store.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, model_validator

from catalog_resolver.domain.model import DecisionOutcome, DecisionStatus, ResolvedStage
from catalog_resolver.domain.ports import LiveEntity

URL_CACHE_SCHEMA: Final[str] = "url-cache.v1"
EVIDENCE_CACHE_SCHEMA: Final[str] = "evidence-cache.v1"
LIVE_ENTITY_CACHE_SCHEMA: Final[str] = "live-entity-cache.v1"


class CacheModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class VersionedDocument(CacheModel):
    schema_version: str


class DecisionRecord(CacheModel):
    result: DecisionStatus
    resolved_stage: ResolvedStage
    reason: str
    chosen_entry_id: str | None = None
    candidate_ids: list[str] = Field(default_factory=list)
    timestamp: datetime

    @model_validator(mode="after")
    def _check_outcome_rules(self) -> DecisionRecord:
        # DecisionOutcome raises ValueError for inconsistent records
        self.to_outcome()
        return self

    @classmethod
    def from_outcome(cls, outcome: DecisionOutcome, *, timestamp: datetime) -> DecisionRecord:
        return cls(
            result=outcome.status,
            resolved_stage=outcome.resolved_stage,
            reason=outcome.reason,
            chosen_entry_id=outcome.chosen_entry_id,
            candidate_ids=list(outcome.candidate_ids),
            timestamp=timestamp,
        )

    def to_outcome(self) -> DecisionOutcome:
        return DecisionOutcome(
            status=self.result,
            resolved_stage=self.resolved_stage,
            reason=self.reason,
            chosen_entry_id=self.chosen_entry_id,
            candidate_ids=tuple(self.candidate_ids),
        )


class DecisionDocument(VersionedDocument):
    """URL or Evidence partition, stamped with the versions it was built under."""

    catalog_version: str
    policy_version: str
    entries: dict[str, DecisionRecord] = Field(default_factory=dict)


class LiveEntityRecord(CacheModel):
    entry_id: str
    title: str | None = None
    creator: str | None = None
    url: str | None = None
    last_modified_at: datetime | None = None
    fetched_at: datetime

    @classmethod
    def from_entity(cls, entity: LiveEntity, *, fetched_at: datetime) -> LiveEntityRecord:
        return cls(
            entry_id=entity.entry_id,
            title=entity.title,
            creator=entity.creator,
            url=entity.url,
            last_modified_at=entity.last_modified_at,
            fetched_at=fetched_at,
        )

    def to_entity(self) -> LiveEntity:
        return LiveEntity(
            entry_id=self.entry_id,
            title=self.title,
            creator=self.creator,
            url=self.url,
            last_modified_at=self.last_modified_at,
        )


class LiveEntityDocument(VersionedDocument):
    entries: dict[str, LiveEntityRecord] = Field(default_factory=dict)
