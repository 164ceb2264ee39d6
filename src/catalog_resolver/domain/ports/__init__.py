"""Domain port definitions for adapters."""

from __future__ import annotations

from .caching import DecisionCache
from .enrichment import EntityFetcher, LiveEntity, LiveEntityStore
from .identity import IdentitySource
from .oracle import SimilarityOracle

__all__ = [
    "DecisionCache",
    "EntityFetcher",
    "IdentitySource",
    "LiveEntity",
    "LiveEntityStore",
    "SimilarityOracle",
]
