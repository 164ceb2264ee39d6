"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalog_resolver.adapters.notion import build_notion_fetcher
from catalog_resolver.cache import CacheStore
from catalog_resolver.config import (
    MissingConfigurationError,
    get_notion_config,
    get_policy_config,
    get_storage_config,
)
from catalog_resolver.domain.resolution import ResolutionPipeline

if TYPE_CHECKING:
    from catalog_resolver.config import StorageConfig
    from catalog_resolver.domain.catalog_index import CatalogIndex
    from catalog_resolver.domain.model import DecisionOutcome
    from catalog_resolver.domain.ports import EntityFetcher, IdentitySource, SimilarityOracle
    from catalog_resolver.domain.resolution import ResolutionPolicy

log = getLogger(__name__)


def live_fetcher_from_env() -> EntityFetcher | None:
    """Notion-backed fetcher when ``NOTION_API_KEY`` is set, else ``None``."""

    try:
        config = get_notion_config()
    except MissingConfigurationError as exc:
        log.info("Live enrichment disabled: %s", exc)
        return None
    return build_notion_fetcher(config)


def build_pipeline(
    catalog: CatalogIndex,
    *,
    identity_source: IdentitySource,
    oracle: SimilarityOracle | None = None,
    fetcher: EntityFetcher | None = None,
    policy: ResolutionPolicy | None = None,
    storage: StorageConfig | None = None,
    persist: bool = True,
) -> ResolutionPipeline:
    """Wire a pipeline whose cache is stamped with ``catalog`` and ``policy`` versions.

    ``persist=False`` keeps every cache partition in memory for this process only.
    """

    effective_policy = policy or get_policy_config()
    policy_version = effective_policy.fingerprint()
    if persist:
        store = CacheStore.from_storage_config(
            storage or get_storage_config(),
            catalog_version=catalog.version,
            policy_version=policy_version,
        )
    else:
        store = CacheStore(catalog_version=catalog.version, policy_version=policy_version)
    log.info(
        "Pipeline ready: catalog=%s (%s entries), policy=%s, cache=%s",
        catalog.version,
        len(catalog),
        policy_version,
        store.sizes(),
    )
    return ResolutionPipeline(
        catalog=catalog,
        cache=store,
        identity_source=identity_source,
        oracle=oracle,
        fetcher=fetcher,
        live_store=store,
        policy=effective_policy,
    )


def resolve_urls(pipeline: ResolutionPipeline, urls: list[str]) -> list[DecisionOutcome]:
    """Resolve ``urls`` one after another with a shared pipeline."""

    return [pipeline.resolve(url) for url in urls]
