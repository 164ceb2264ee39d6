"""Weighted multi-factor fuzzy scoring.

Responsibilities of this stage:
- score every catalog entry with a usable display name against the identity
- keep entries above the admission floor, ranked by score then catalog id
- derive a provisional FOUND / AMBIGUOUS / NOTFOUND decision

Signals and default weights (see ``ResolutionPolicy``):
- title similarity (0.60): normalized Levenshtein over normalized titles; when
  it is low, token-set Jaccard overlap is also computed and the larger wins
- creator similarity (0.05): only when both sides have a creator
- slug-token overlap (0.20): identity slug against the entry's URL slug
- domain bonus (0.05): same host, or both hosts on one known platform

A high best score alone never proves uniqueness; the gap to the runner-up does.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from rapidfuzz.distance import Levenshtein

from catalog_resolver.domain.model import DecisionOutcome, ResolvedStage, ScoredCandidate, ranked
from catalog_resolver.domain.text import jaccard, normalize_title, slug_tokens, tokenize
from catalog_resolver.domain.urls import host_of, raw_final_segment, strip_www

from .policy import DEFAULT_POLICY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalog_resolver.domain.model import CatalogEntry, Identity

    from .policy import ResolutionPolicy

log = getLogger(__name__)

TOP_CANDIDATES = 5


@dataclass(frozen=True, slots=True, kw_only=True)
class FuzzyResult:
    """Provisional decision plus every admitted candidate, ranked."""

    outcome: DecisionOutcome
    candidates: tuple[ScoredCandidate, ...] = ()
    total_scored: int = 0
    near_exact: bool = False


@dataclass(frozen=True, slots=True)
class _Query:
    name: str
    tokens: frozenset[str]
    slug_tokens: frozenset[str]
    creator: str
    host: str


def title_similarity(left: str, right: str) -> float:
    """Normalized edit-distance similarity of two titles after normalization.

    A side with nothing left after normalization carries no evidence and scores 0.
    """

    first, second = normalize_title(left), normalize_title(right)
    if not first or not second:
        return 0.0
    return Levenshtein.normalized_similarity(first, second)


def loose_domain_match(left: str, right: str, *, platforms: Iterable[str]) -> bool:
    first, second = strip_www(left), strip_www(right)
    if not first or not second:
        return False
    if first == second:
        return True
    return any(platform in first and platform in second for platform in platforms)


def _score_entry(
    query: _Query,
    entry: CatalogEntry,
    *,
    policy: ResolutionPolicy,
) -> tuple[ScoredCandidate, float] | None:
    """Score one entry; returns ``(candidate, title_similarity)`` or ``None`` if unnamed."""

    display_name = entry.display_name
    if display_name is None:
        return None

    reasons: list[str] = []
    title_sim = title_similarity(query.name, display_name)
    title_signal = title_sim
    title_reason = f"title:{title_sim:.0%}"
    if title_sim < policy.token_fallback_below:
        overlap_score, overlap, union = jaccard(query.tokens, tokenize(display_name))
        if overlap_score > title_sim:
            title_signal = overlap_score
            title_reason = f"tokens:{overlap_score:.0%} ({overlap}/{union})"
    score = title_signal * policy.title_weight
    reasons.append(title_reason)

    if query.creator and entry.creator and entry.creator.strip():
        creator_sim = title_similarity(query.creator, entry.creator)
        score += creator_sim * policy.creator_weight
        reasons.append(f"creator:{creator_sim:.0%}")

    if query.slug_tokens:
        entry_slug = raw_final_segment(entry.url)
        entry_tokens = slug_tokens(entry_slug) if entry_slug else tokenize(display_name)
        slug_sim, _overlap, _union = jaccard(query.slug_tokens, entry_tokens)
        if slug_sim > 0:
            score += slug_sim * policy.slug_weight
            reasons.append(f"slug:{slug_sim:.0%}")

    entry_host = host_of(entry.url)
    if (
        query.host
        and entry_host
        and loose_domain_match(query.host, entry_host, platforms=policy.known_platforms)
    ):
        score += policy.domain_bonus
        reasons.append("domain")

    candidate = ScoredCandidate(entry=entry, score=min(score, 1.0), reasons=tuple(reasons))
    return candidate, title_sim


def decide_from_scores(
    candidates: list[ScoredCandidate],
    *,
    query_name: str,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> DecisionOutcome:
    """Apply the found-threshold and gap rules to already ranked candidates."""

    top = tuple(candidate.id for candidate in candidates[:TOP_CANDIDATES])
    if not candidates:
        return DecisionOutcome.not_found(
            stage=ResolvedStage.FUZZY,
            reason=f"No candidate cleared the admission floor for {query_name!r}",
        )

    best = candidates[0]
    second_score = candidates[1].score if len(candidates) > 1 else 0.0
    gap = round(best.score - second_score, 9)

    if best.score >= policy.found_threshold:
        if len(candidates) == 1 or gap >= policy.ambiguity_gap:
            return DecisionOutcome.found(
                best.id,
                stage=ResolvedStage.FUZZY,
                reason=(
                    f"Fuzzy match (score:{best.score:.0%}, gap:{gap:.0%}) "
                    f"-> {', '.join(best.reasons)}"
                ),
                candidate_ids=top,
            )
        return DecisionOutcome.ambiguous(
            top,
            stage=ResolvedStage.FUZZY,
            reason=(
                f"Multiple matches with similar scores (best:{best.score:.0%}, "
                f"gap:{gap:.0%}); possible catalog duplicates"
            ),
        )

    return DecisionOutcome.not_found(
        stage=ResolvedStage.FUZZY,
        reason=(
            f"No confident match for {query_name!r}. Best: {best.score:.0%} "
            f"(threshold: {policy.found_threshold:.0%})"
        ),
        candidate_ids=top,
    )


def score_catalog(
    identity: Identity,
    entries: Iterable[CatalogEntry],
    *,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> FuzzyResult:
    """Rank ``entries`` against ``identity`` and return the provisional decision."""

    if not identity.has_name:
        return FuzzyResult(
            outcome=DecisionOutcome.not_found(
                stage=ResolvedStage.FUZZY,
                reason="No name available for matching",
            )
        )

    query = _Query(
        name=identity.name,
        tokens=tokenize(identity.name),
        slug_tokens=slug_tokens(identity.slug) if identity.slug else frozenset(),
        creator=(identity.creator or "").strip(),
        host=strip_www(identity.domain or ""),
    )

    admitted: list[ScoredCandidate] = []
    near_exact: list[tuple[float, CatalogEntry]] = []
    total = 0
    for entry in entries:
        scored = _score_entry(query, entry, policy=policy)
        if scored is None:
            continue
        total += 1
        candidate, title_sim = scored
        if title_sim >= policy.near_exact_title:
            near_exact.append((title_sim, entry))
        if candidate.score > policy.admission_floor:
            admitted.append(candidate)

    if near_exact:
        title_sim, entry = min(near_exact, key=lambda item: (-item[0], item[1].id))
        log.info("Near-exact title match for %r -> %s", query.name, entry.id)
        return FuzzyResult(
            outcome=DecisionOutcome.found(
                entry.id,
                stage=ResolvedStage.FUZZY,
                reason=f"Exact name match: {query.name!r} ~ {entry.display_name!r}",
            ),
            total_scored=total,
            near_exact=True,
        )

    ordered = ranked(admitted)
    log.info(
        "Fuzzy scoring for %r: scored=%s admitted=%s best=%s",
        query.name,
        total,
        len(ordered),
        f"{ordered[0].score:.3f}" if ordered else "n/a",
    )
    outcome = decide_from_scores(ordered, query_name=query.name, policy=policy)
    return FuzzyResult(
        outcome=outcome,
        candidates=tuple(ordered),
        total_scored=total,
    )
