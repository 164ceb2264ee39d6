"""Orchestrator for resolving one URL against the catalog.

The pipeline composes the stage functions and owns its collaborators; it holds
no module-level state. Stage order:

1. input validation (non-http input is REJECTED)
2. URL partition lookup
3. deterministic matching (exact keys, then unique slug)
4. identity production (a confirmed dead page is REJECTED)
5. fuzzy scoring (near-exact, confident or empty results end here)
6. candidate planning (SKIP ends here)
7. Evidence partition lookup
8. live enrichment and arbitration
9. Evidence partition write

Only stages 1-4 write to the URL partition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_resolver.domain.errors import PageGoneError
from catalog_resolver.domain.model import DecisionOutcome, DecisionStatus
from catalog_resolver.domain.urls import parse_http_url

from .arbitration import arbitrate
from .deterministic import DeterministicMatcher
from .enrichment import LiveEnricher
from .evidence import build_evidence_key
from .fuzzy import score_catalog
from .planner import plan_candidates
from .policy import DEFAULT_POLICY

if TYPE_CHECKING:
    from catalog_resolver.domain.catalog_index import CatalogIndex
    from catalog_resolver.domain.ports import (
        DecisionCache,
        EntityFetcher,
        IdentitySource,
        LiveEntityStore,
        SimilarityOracle,
    )

    from .policy import ResolutionPolicy

log = getLogger(__name__)


@dataclass(slots=True)
class ResolutionPipeline:
    """Resolve URLs to one terminal ``DecisionOutcome`` each."""

    catalog: CatalogIndex
    cache: DecisionCache
    identity_source: IdentitySource
    oracle: SimilarityOracle | None = None
    fetcher: EntityFetcher | None = None
    live_store: LiveEntityStore | None = None
    policy: ResolutionPolicy = DEFAULT_POLICY
    matcher: DeterministicMatcher = field(init=False)

    def __post_init__(self) -> None:
        self.matcher = DeterministicMatcher(self.catalog)

    def resolve(self, url: str) -> DecisionOutcome:
        trail: list[str] = []
        outcome = self._resolve(url, trail)
        outcome = outcome.with_trail(tuple(trail))
        self._log_outcome(url, outcome)
        return outcome

    def _resolve(self, url: str, trail: list[str]) -> DecisionOutcome:
        if parse_http_url(url) is None:
            trail.append("validation: not an http(s) URL")
            return self._remember_url(
                url, DecisionOutcome.rejected(reason="Input is not a valid http(s) URL")
            )

        cached = self.cache.get_url_decision(url)
        if cached is not None:
            trail.append("url-cache: hit")
            return cached
        trail.append("url-cache: miss")

        deterministic = self.matcher.match(url)
        if deterministic is not None:
            trail.append(f"{deterministic.resolved_stage}: {deterministic.chosen_entry_id}")
            return self._remember_url(url, deterministic)
        trail.append("deterministic: no match")

        try:
            identity = self.identity_source(url)
        except PageGoneError as exc:
            trail.append("identity: page gone")
            return self._remember_url(
                url, DecisionOutcome.rejected(reason=f"Page is gone or has no content: {exc}")
            )
        trail.append(f"identity: {identity.name!r} on {identity.domain or '?'}")

        fuzzy = score_catalog(identity, self.catalog, policy=self.policy)
        trail.append(
            f"fuzzy: {fuzzy.outcome.status} ({len(fuzzy.candidates)} of "
            f"{fuzzy.total_scored} admitted)"
        )
        plan = plan_candidates(fuzzy.candidates, policy=self.policy)
        evidence_key = (
            build_evidence_key(identity, plan.bounded_candidates, policy=self.policy)
            if plan.bounded_candidates
            else None
        )

        if fuzzy.outcome.status is DecisionStatus.FOUND or not fuzzy.candidates:
            return self._remember_evidence(evidence_key, fuzzy.outcome)

        trail.append(f"planner: {plan.mode} via {plan.selection_rule} ({plan.reason})")
        if not plan.should_arbitrate:
            return self._remember_evidence(evidence_key, fuzzy.outcome)

        if evidence_key is not None:
            hit = self.cache.get_decision(evidence_key)
            if hit is not None:
                trail.append("evidence-cache: hit")
                return hit
            trail.append("evidence-cache: miss")

        enricher = (
            LiveEnricher(store=self.live_store, fetcher=self.fetcher)
            if self.live_store is not None or self.fetcher is not None
            else None
        )
        result = arbitrate(
            identity,
            plan,
            fallback=fuzzy.outcome,
            oracle=self.oracle,
            enricher=enricher,
            policy=self.policy,
        )
        trail.append(
            f"arbitration: {result.outcome.status} "
            f"(enriched={result.enriched}, failed={result.failed})"
        )
        if result.failed:
            # Collaborator failures stay revisitable.
            return result.outcome
        return self._remember_evidence(evidence_key, result.outcome)

    def _remember_url(self, url: str, outcome: DecisionOutcome) -> DecisionOutcome:
        self.cache.put_url_decision(url, outcome)
        return outcome

    def _remember_evidence(
        self,
        key: str | None,
        outcome: DecisionOutcome,
    ) -> DecisionOutcome:
        if key is not None:
            self.cache.put_decision(key, outcome)
        return outcome

    def _log_outcome(self, url: str, outcome: DecisionOutcome) -> None:
        source = f" from {outcome.cache_source} cache" if outcome.cache_source else ""
        match outcome.status:
            case DecisionStatus.FOUND:
                log.info(
                    "%s -> FOUND %s at %s%s",
                    url,
                    outcome.chosen_entry_id,
                    outcome.resolved_stage,
                    source,
                )
            case DecisionStatus.AMBIGUOUS:
                log.info(
                    "%s -> AMBIGUOUS among %s at %s%s",
                    url,
                    ", ".join(outcome.candidate_ids),
                    outcome.resolved_stage,
                    source,
                )
            case DecisionStatus.NOTFOUND:
                log.info("%s -> NOTFOUND at %s%s", url, outcome.resolved_stage, source)
            case DecisionStatus.REJECTED:
                log.info("%s -> REJECTED: %s%s", url, outcome.reason, source)
