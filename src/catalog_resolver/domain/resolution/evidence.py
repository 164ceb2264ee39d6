"""Content-addressed key for decisions made from fuzzy/arbitration evidence.

The key hashes only what a decision depends on: the policy fingerprint, the
noise-stripped identity and the bounded candidate ids. The queried URL and raw
floating scores never enter it, so differently phrased duplicate queries of the
same item share one cached decision.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

from catalog_resolver.domain.text import strip_noise
from catalog_resolver.domain.urls import strip_www

from .policy import DEFAULT_POLICY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalog_resolver.domain.model import Identity, ScoredCandidate

    from .policy import ResolutionPolicy

type EvidenceKey = str


def quantize_score(score: float, *, precision: int = 3) -> float:
    return round(score, precision)


def _identity_signature(identity: Identity, *, include_creator: bool) -> dict[str, object]:
    signature: dict[str, object] = {
        "name": strip_noise(identity.primary_name),
        "domain": strip_www((identity.domain or "").strip()),
        "slug": strip_noise(identity.slug),
        "blocked": identity.blocked,
    }
    if include_creator:
        signature["creator"] = strip_noise(identity.creator)
    return signature


def evidence_payload(
    identity: Identity,
    candidates: Iterable[ScoredCandidate],
    *,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> dict[str, object]:
    """The canonical structure that ``build_evidence_key`` hashes."""

    entries: list[dict[str, object]] = []
    for candidate in sorted(candidates, key=lambda item: item.id):
        item: dict[str, object] = {"id": candidate.id}
        if policy.scores_in_evidence:
            item["score"] = quantize_score(candidate.score, precision=policy.score_precision)
        entries.append(item)
    return {
        "policy": policy.fingerprint(),
        "identity": _identity_signature(identity, include_creator=policy.creator_in_evidence),
        "candidates": entries,
    }


def build_evidence_key(
    identity: Identity,
    candidates: Iterable[ScoredCandidate],
    *,
    policy: ResolutionPolicy = DEFAULT_POLICY,
) -> EvidenceKey:
    payload = evidence_payload(identity, candidates, policy=policy)
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
