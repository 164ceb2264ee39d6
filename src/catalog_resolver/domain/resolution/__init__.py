"""Decision pipeline stages and their orchestrator."""

from __future__ import annotations

from .arbitration import ArbitrationResult, arbitrate, identity_gate
from .deterministic import DeterministicMatcher
from .enrichment import LiveEnricher
from .evidence import EvidenceKey, build_evidence_key
from .fuzzy import FuzzyResult, decide_from_scores, score_catalog
from .pipeline import ResolutionPipeline
from .planner import CandidatePlan, plan_candidates
from .policy import DEFAULT_POLICY, ResolutionPolicy

__all__ = [
    "DEFAULT_POLICY",
    "ArbitrationResult",
    "CandidatePlan",
    "DeterministicMatcher",
    "EvidenceKey",
    "FuzzyResult",
    "LiveEnricher",
    "ResolutionPipeline",
    "ResolutionPolicy",
    "arbitrate",
    "build_evidence_key",
    "decide_from_scores",
    "identity_gate",
    "plan_candidates",
    "score_catalog",
]
