"""Versioned, file-backed decision cache."""

from __future__ import annotations

from .store import CacheStore, url_partition_key

__all__ = ["CacheStore", "url_partition_key"]
