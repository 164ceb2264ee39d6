"""Terminal decision produced by the resolution pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .enums import CacheSource, DecisionStatus, ResolvedStage

if TYPE_CHECKING:
    from .catalog import EntryId


@dataclass(frozen=True, slots=True, kw_only=True)
class DecisionOutcome:
    """One of FOUND / AMBIGUOUS / NOTFOUND / REJECTED with stage and reason.

    ``trail`` and ``cache_source`` are audit metadata: they never take part in
    equality, so a replayed decision compares equal to the one that was cached.
    """

    status: DecisionStatus
    resolved_stage: ResolvedStage
    reason: str
    chosen_entry_id: EntryId | None = None
    candidate_ids: tuple[EntryId, ...] = ()
    trail: tuple[str, ...] = field(default=(), compare=False)
    cache_source: CacheSource | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.status is DecisionStatus.FOUND and self.chosen_entry_id is None:
            raise ValueError("FOUND outcome must name the chosen entry")
        if self.status is not DecisionStatus.FOUND and self.chosen_entry_id is not None:
            raise ValueError(f"{self.status} outcome cannot carry a chosen entry")
        if self.status is DecisionStatus.AMBIGUOUS and not self.candidate_ids:
            raise ValueError("AMBIGUOUS outcome must include at least one candidate")

    @classmethod
    def found(
        cls,
        entry_id: EntryId,
        *,
        stage: ResolvedStage,
        reason: str,
        candidate_ids: tuple[EntryId, ...] = (),
    ) -> DecisionOutcome:
        return cls(
            status=DecisionStatus.FOUND,
            resolved_stage=stage,
            reason=reason,
            chosen_entry_id=entry_id,
            candidate_ids=candidate_ids,
        )

    @classmethod
    def ambiguous(
        cls,
        candidate_ids: tuple[EntryId, ...],
        *,
        stage: ResolvedStage,
        reason: str,
    ) -> DecisionOutcome:
        return cls(
            status=DecisionStatus.AMBIGUOUS,
            resolved_stage=stage,
            reason=reason,
            candidate_ids=candidate_ids,
        )

    @classmethod
    def not_found(
        cls,
        *,
        stage: ResolvedStage,
        reason: str,
        candidate_ids: tuple[EntryId, ...] = (),
    ) -> DecisionOutcome:
        return cls(
            status=DecisionStatus.NOTFOUND,
            resolved_stage=stage,
            reason=reason,
            candidate_ids=candidate_ids,
        )

    @classmethod
    def rejected(cls, *, reason: str) -> DecisionOutcome:
        return cls(
            status=DecisionStatus.REJECTED,
            resolved_stage=ResolvedStage.VALIDATION,
            reason=reason,
        )

    @property
    def is_terminal_match(self) -> bool:
        return self.status is DecisionStatus.FOUND

    def with_reason(self, reason: str) -> DecisionOutcome:
        return replace(self, reason=reason)

    def with_trail(self, trail: tuple[str, ...]) -> DecisionOutcome:
        return replace(self, trail=trail)

    def from_cache(self, source: CacheSource) -> DecisionOutcome:
        return replace(self, cache_source=source)

    def to_record(self) -> dict[str, object]:
        """Plain mapping for presentation layers to serialize."""

        record: dict[str, object] = {
            "status": str(self.status),
            "resolved_stage": str(self.resolved_stage),
            "reason": self.reason,
        }
        match self.status:
            case DecisionStatus.FOUND:
                record["chosen_entry_id"] = self.chosen_entry_id
                if self.candidate_ids:
                    record["candidate_ids"] = list(self.candidate_ids)
            case DecisionStatus.AMBIGUOUS | DecisionStatus.NOTFOUND:
                record["candidate_ids"] = list(self.candidate_ids)
            case DecisionStatus.REJECTED:
                pass
        if self.cache_source is not None:
            record["cache_source"] = str(self.cache_source)
        if self.trail:
            record["trail"] = list(self.trail)
        return record
