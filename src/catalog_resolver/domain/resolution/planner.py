"""Candidate planning ahead of arbitration.

Responsibilities of this stage:
- decide whether arbitration should run at all
- bound the candidate set the oracle will see
- record the scores and selection rule for the audit trail

Pure and free of I/O. The bounded set produced here, not the raw ranked list,
is what the evidence key is computed from.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_resolver.domain.model import PlannerMode, ScoredCandidate, SelectionRule

from .policy import DEFAULT_POLICY

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .policy import ResolutionPolicy

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidatePlan:
    should_arbitrate: bool
    mode: PlannerMode
    bounded_candidates: tuple[ScoredCandidate, ...]
    best_score: float
    second_best_score: float
    gap: float
    total_scored: int
    selection_rule: SelectionRule
    reason: str
    clipped: bool = False

    @property
    def candidate_ids(self) -> tuple[str, ...]:
        return tuple(candidate.id for candidate in self.bounded_candidates)


def plan_candidates(
    candidates: Sequence[ScoredCandidate],
    *,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> CandidatePlan:
    """Classify ranked ``candidates`` into SKIP / CONFIRM_SINGLE_WEAK / DISAMBIGUATE."""

    total = len(candidates)
    best = candidates[0].score if total else 0.0
    second = candidates[1].score if total > 1 else 0.0
    gap = round(best - second, 9) if total else 0.0

    def plan(
        *,
        mode: PlannerMode,
        bounded: Sequence[ScoredCandidate],
        rule: SelectionRule,
        reason: str,
        clipped: bool = False,
    ) -> CandidatePlan:
        return CandidatePlan(
            should_arbitrate=mode is not PlannerMode.SKIP,
            mode=mode,
            bounded_candidates=tuple(bounded),
            best_score=best,
            second_best_score=second,
            gap=gap,
            total_scored=total,
            selection_rule=rule,
            reason=reason,
            clipped=clipped,
        )

    if total == 0:
        return plan(
            mode=PlannerMode.SKIP,
            bounded=(),
            rule=SelectionRule.NONE,
            reason="No candidates to arbitrate",
        )

    if total == 1:
        if best >= policy.found_threshold:
            return plan(
                mode=PlannerMode.SKIP,
                bounded=candidates,
                rule=SelectionRule.NONE,
                reason=f"Single candidate already above threshold ({best:.0%})",
            )
        return plan(
            mode=PlannerMode.CONFIRM_SINGLE_WEAK,
            bounded=candidates,
            rule=SelectionRule.CONFIRM_SINGLE_WEAK,
            reason=f"Single weak candidate ({best:.0%}); needs confirmation",
        )

    limit = policy.max_candidates
    if total <= limit:
        return plan(
            mode=PlannerMode.DISAMBIGUATE,
            bounded=candidates,
            rule=SelectionRule.PLAN_TOP5,
            reason=f"{total} candidates need disambiguation (gap:{gap:.0%})",
        )

    log.info("Clipping %s candidates to the top %s before arbitration", total, limit)
    return plan(
        mode=PlannerMode.DISAMBIGUATE,
        bounded=candidates[:limit],
        rule=SelectionRule.SANITY_TOPK,
        reason=f"Clipped {total} candidates to top {limit} (gap:{gap:.0%})",
        clipped=True,
    )
