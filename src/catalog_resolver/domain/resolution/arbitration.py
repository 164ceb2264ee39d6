"""Confidence-gated arbitration by a similarity oracle.

Responsibilities of this stage:
- refuse identities too weak to be worth an oracle call
- enrich the bounded candidates with live facts (best-effort)
- ask the oracle for one confidence per candidate and apply the
  confirmation / high-threshold / gap rules

Any oracle failure, including a malformed result, degrades to the decision
that was in force before arbitration, with the cause appended to its reason.
Nothing here retries.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_resolver.domain.errors import SimilarityOracleError
from catalog_resolver.domain.model import DecisionOutcome, PlannerMode, ResolvedStage

from .policy import DEFAULT_POLICY
from .texts import candidate_text, identity_text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalog_resolver.domain.model import Identity, ScoredCandidate
    from catalog_resolver.domain.ports import SimilarityOracle

    from .enrichment import LiveEnricher
    from .planner import CandidatePlan
    from .policy import ResolutionPolicy

log = getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[\W_]+")


@dataclass(frozen=True, slots=True, kw_only=True)
class ArbitrationResult:
    outcome: DecisionOutcome
    arbitrated: bool = False
    failed: bool = False
    enriched: int = 0
    confidences: tuple[tuple[str, float], ...] = ()


def identity_gate(identity: Identity, *, policy: ResolutionPolicy = DEFAULT_POLICY) -> str | None:
    """Return why ``identity`` may not be arbitrated, or ``None`` when it may."""

    name = identity.name
    if len(name) < policy.min_name_length:
        return f"name shorter than {policy.min_name_length} characters"
    stripped = _NON_ALPHANUMERIC.sub("", name)
    if stripped.isdigit():
        return "name is purely numeric"
    alpha = sum(1 for char in name if char.isascii() and char.isalpha())
    ratio = alpha / len(name)
    if ratio < policy.min_alpha_ratio:
        return f"too few letters in name ({ratio:.0%})"
    return None


def _degrade(fallback: DecisionOutcome, note: str) -> DecisionOutcome:
    return fallback.with_reason(f"{fallback.reason} [{note}]")


def _validated(raw: Sequence[float], expected: int) -> tuple[float, ...]:
    try:
        values = tuple(float(value) for value in raw)
    except (TypeError, ValueError) as exc:
        raise SimilarityOracleError(f"oracle returned unusable scores: {exc}") from exc
    if len(values) != expected:
        raise SimilarityOracleError(
            f"oracle returned {len(values)} scores for {expected} candidates"
        )
    if not all(math.isfinite(value) for value in values):
        raise SimilarityOracleError("oracle returned non-finite scores")
    return values


def decide_single(
    candidate: ScoredCandidate,
    confidence: float,
    *,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> DecisionOutcome:
    if confidence >= policy.confirmation_threshold:
        return DecisionOutcome.found(
            candidate.id,
            stage=ResolvedStage.ARBITRATION,
            reason=f"Single candidate confirmed by oracle ({confidence:.1%})",
            candidate_ids=(candidate.id,),
        )
    return DecisionOutcome.not_found(
        stage=ResolvedStage.ARBITRATION,
        reason=(
            f"Single candidate similarity too low ({confidence:.1%} < "
            f"{policy.confirmation_threshold:.0%})"
        ),
        candidate_ids=(candidate.id,),
    )


def decide_multiple(
    candidates: Sequence[ScoredCandidate],
    confidences: Sequence[float],
    *,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> DecisionOutcome:
    ranking = sorted(
        zip(candidates, confidences, strict=True),
        key=lambda pair: (-pair[1], pair[0].id),
    )
    top, top_confidence = ranking[0]
    runner_up = ranking[1][1] if len(ranking) > 1 else 0.0
    margin = round(top_confidence - runner_up, 9)

    if top_confidence >= policy.high_threshold and margin >= policy.arbitration_gap:
        return DecisionOutcome.found(
            top.id,
            stage=ResolvedStage.ARBITRATION,
            reason=f"Oracle matched {top.id} ({top_confidence:.1%}, margin {margin:.1%})",
            candidate_ids=tuple(candidate.id for candidate in candidates),
        )
    return DecisionOutcome.ambiguous(
        tuple(candidate.id for candidate in candidates),
        stage=ResolvedStage.ARBITRATION,
        reason=f"Oracle ambiguity: top {top_confidence:.1%} vs runner-up {runner_up:.1%}",
    )


def arbitrate(
    identity: Identity,
    plan: CandidatePlan,
    *,
    fallback: DecisionOutcome,
    oracle: SimilarityOracle | None,
    enricher: LiveEnricher | None = None,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> ArbitrationResult:
    """Run the arbitration stage; never raises for collaborator failures."""

    if not plan.should_arbitrate or not plan.bounded_candidates:
        return ArbitrationResult(outcome=fallback)
    if oracle is None:
        return ArbitrationResult(
            outcome=_degrade(fallback, "arbitration unavailable: no oracle"),
            failed=True,
        )
    rejection = identity_gate(identity, policy=policy)
    if rejection is not None:
        log.info("Arbitration skipped for %r: %s", identity.name, rejection)
        return ArbitrationResult(outcome=_degrade(fallback, f"arbitration skipped: {rejection}"))

    candidates = plan.bounded_candidates
    enriched = 0
    if enricher is not None:
        candidates, enriched = enricher.enrich(candidates)

    query = identity_text(identity)
    texts = [candidate_text(candidate.entry) for candidate in candidates]
    try:
        confidences = _validated(oracle.score(query, texts), len(candidates))
    except (SimilarityOracleError, TimeoutError) as exc:
        log.warning("Similarity oracle failed for %r: %s", identity.name, exc)
        return ArbitrationResult(
            outcome=_degrade(fallback, f"arbitration failed: {exc}"),
            failed=True,
            enriched=enriched,
        )

    if plan.mode is PlannerMode.CONFIRM_SINGLE_WEAK:
        outcome = decide_single(candidates[0], confidences[0], policy=policy)
    else:
        outcome = decide_multiple(candidates, confidences, policy=policy)
    log.info("Arbitration for %r: %s (%s)", identity.name, outcome.status, outcome.reason)
    return ArbitrationResult(
        outcome=outcome,
        arbitrated=True,
        enriched=enriched,
        confidences=tuple(
            (candidate.id, confidence)
            for candidate, confidence in zip(candidates, confidences, strict=True)
        ),
    )
