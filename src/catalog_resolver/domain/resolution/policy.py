"""Tunable decision policy shared by every resolution stage.

All thresholds and weights live here as named fields so that one object
describes how decisions are made. ``fingerprint`` changes whenever any of them
changes, which is what ties cached decisions to the policy that produced them.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from typing import Final

DEFAULT_POLICY_VERSION: Final[str] = "resolver-policy-v1"
KNOWN_PLATFORMS: Final[tuple[str, ...]] = (
    "curseforge.com",
    "patreon.com",
    "itch.io",
    "github.com",
    "modthesims.info",
)


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolutionPolicy:
    version: str = DEFAULT_POLICY_VERSION

    # fuzzy scoring
    title_weight: float = 0.60
    creator_weight: float = 0.05
    slug_weight: float = 0.20
    domain_bonus: float = 0.05
    token_fallback_below: float = 0.60
    near_exact_title: float = 0.98
    admission_floor: float = 0.30
    found_threshold: float = 0.48
    ambiguity_gap: float = 0.15
    known_platforms: tuple[str, ...] = field(default=KNOWN_PLATFORMS)

    # planning
    max_candidates: int = 5

    # arbitration
    min_name_length: int = 5
    min_alpha_ratio: float = 0.30
    confirmation_threshold: float = 0.70
    high_threshold: float = 0.75
    arbitration_gap: float = 0.10

    # evidence key
    score_precision: int = 3
    scores_in_evidence: bool = False
    creator_in_evidence: bool = False

    def __post_init__(self) -> None:
        if self.max_candidates < 1:
            raise ValueError("max_candidates must be at least 1")
        if self.score_precision < 0:
            raise ValueError("score_precision must not be negative")
        for name in (
            "title_weight",
            "creator_weight",
            "slug_weight",
            "domain_bonus",
            "token_fallback_below",
            "near_exact_title",
            "found_threshold",
            "ambiguity_gap",
            "admission_floor",
            "confirmation_threshold",
            "high_threshold",
            "arbitration_gap",
            "min_alpha_ratio",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        total = self.title_weight + self.creator_weight + self.slug_weight + self.domain_bonus
        if round(total, 9) > 1.0:
            raise ValueError(f"score weights must sum to at most 1, got {total:.2f}")
        if self.admission_floor > self.near_exact_title:
            raise ValueError("admission_floor must not exceed near_exact_title")

    def fingerprint(self) -> str:
        """Policy version plus a short digest of every tunable value."""

        payload = json.dumps(asdict(self), sort_keys=True, separators=(",", ":"))
        digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]
        return f"{self.version}+{digest}"


DEFAULT_POLICY: Final[ResolutionPolicy] = ResolutionPolicy()
