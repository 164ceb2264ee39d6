"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class DecisionStatus(StrEnum):
    FOUND = "FOUND"
    AMBIGUOUS = "AMBIGUOUS"
    NOTFOUND = "NOTFOUND"
    REJECTED = "REJECTED"


class ResolvedStage(StrEnum):
    """Pipeline stage that produced a terminal decision."""

    VALIDATION = "validation"
    EXACT = "exact"
    SLUG = "slug"
    FUZZY = "fuzzy"
    ARBITRATION = "arbitration"

    @property
    def is_deterministic(self) -> bool:
        return self in {ResolvedStage.VALIDATION, ResolvedStage.EXACT, ResolvedStage.SLUG}


class PlannerMode(StrEnum):
    SKIP = "skip"
    CONFIRM_SINGLE_WEAK = "confirm_single_weak"
    DISAMBIGUATE = "disambiguate"


class SelectionRule(StrEnum):
    """How the planner picked the candidates it forwards."""

    NONE = "none"
    PLAN_TOP5 = "plan_top5"
    SANITY_TOPK = "sanity_topk"
    CONFIRM_SINGLE_WEAK = "confirm_single_weak"


class CacheSource(StrEnum):
    URL = "url"
    EVIDENCE = "evidence"
